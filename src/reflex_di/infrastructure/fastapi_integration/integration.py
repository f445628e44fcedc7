from typing import Any, Awaitable, Callable, Mapping, Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from reflex_di.domain import IContainer, TypeRef


def create_fastapi_dependency(
    container: IContainer,
    type_ref: TypeRef,
    definition: Optional[Mapping[str, Any]] = None,
) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that builds ``type_ref`` from the container.

    Shared types yield the same instance on every request; other types are
    built per call.

    Args:
        container: The DI container to resolve from.
        type_ref: Class object or type name to build.
        definition: Optional call-time definition passed to ``make``.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> get_users = create_fastapi_dependency(container, UserController)
        >>>
        >>> @app.get("/users")
        >>> def list_users(controller: UserController = Depends(get_users)):
        ...     return controller.list()
    """

    def dependency() -> Any:
        return container.make(type_ref, definition)

    return dependency


def create_request_dependency(type_ref: TypeRef) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that builds from the container attached to the request.

    Requires the ContainerMiddleware to be installed.

    Args:
        type_ref: Class object or type name to build.

    Returns:
        A callable that resolves from ``request.state.di_container``.
    """

    def request_dependency(request: Request) -> Any:
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a DI container. Did you forget to add ContainerMiddleware?"
            )
        container: IContainer = request.state.di_container
        return container.make(type_ref)

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes a request scope of the DI container on every request.

    The scope is accessible via ``request.state.di_container``. Types listed in
    ``request_scoped`` get one instance per request; every other shared type
    keeps a single application-wide instance. Overlapping requests never see
    each other's request-scoped instances.

    Attributes:
        container: The parent container scopes are created from.
        request_scoped: Types shared within a request only.

    Example:
        >>> container = DIContainer()
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=container, request_scoped=[RequestContext])
    """

    def __init__(self, app: FastAPI, container: IContainer, request_scoped: Optional[list] = None):
        super().__init__(app)
        self.container = container
        self.request_scoped = list(request_scoped or [])

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request.state.di_container = self.container.create_scope(self.request_scoped)
        return await call_next(request)
