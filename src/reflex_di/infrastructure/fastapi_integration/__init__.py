"""
FastAPI integration module.

Provides helpers for building endpoint dependencies with reflex-di.
"""

from .integration import (
    ContainerMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "ContainerMiddleware",
]
