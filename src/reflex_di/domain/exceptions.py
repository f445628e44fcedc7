from typing import List, Optional


class DIException(Exception):
    """Base exception for DI-related errors.

    Errors raised while resolving nested dependencies collect the enclosing
    resolution frames in ``context`` (innermost first). The rendered message
    lists them from the root type down to the failing leaf.

    Attributes:
        context: Resolution frames added while the error propagated.
    """

    def __init__(self, *args: object) -> None:
        super().__init__(*args)
        self.context: List[str] = []

    def add_context(self, frame: str) -> "DIException":
        """Record an enclosing resolution frame.

        Args:
            frame: Human readable description of the frame, e.g. ``App.__init__``.

        Returns:
            The same exception, so it can be re-raised directly.
        """
        self.context.append(frame)
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            message += f" [{' -> '.join(reversed(self.context))}]"
        return message


class TypeNotFoundError(DIException):
    """Raised when a type name cannot be located.

    Attributes:
        type_name: The name that could not be located.
    """

    def __init__(self, type_name: str, reason: Optional[str] = None) -> None:
        self.type_name = type_name
        message = f"Type {type_name} does not exist and could not be imported"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidDefinitionError(DIException):
    """Raised when an injection definition maps a bare parameter name to something
    other than a type name or class.

    Attributes:
        parameter: The offending definition key.
    """

    def __init__(self, parameter: str, value: object) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(
            f"Invalid injection definition for parameter '{parameter}': {value!r} is not a type name. "
            f"Raw values must be prefixed with ':' (:{parameter}) to differentiate them from "
            "provisionable types."
        )


class UnresolvableTypeError(DIException):
    """Raised when a type or constructor parameter cannot be resolved.

    This occurs when:
    - An interface or abstract type has no implementation binding.
    - A constructor raises while the container instantiates it.
    - An untyped parameter has no default and strict mode is enabled.

    Attributes:
        type_name: The type that could not be provided, if known.
        reason: Optional reason for the failure.
        parameter: Name of the constructor parameter being resolved, if any.
        position: 1-based position of that parameter.
    """

    def __init__(
        self,
        type_name: Optional[str],
        reason: Optional[str] = None,
        parameter: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        self.type_name = type_name
        self.reason = reason
        self.parameter = parameter
        self.position = position

        if parameter is not None:
            type_label = f"of type {type_name}" if type_name else "without a declared type"
            message = f"Cannot resolve parameter '{parameter}' {type_label} at position {position}"
        else:
            message = f"Cannot resolve type {type_name}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)


class BadImplementationError(DIException):
    """Raised when a bound implementation does not satisfy its abstract type.

    Attributes:
        implementation: The bound concrete type.
        expected: The abstract or interface type it was bound to.
    """

    def __init__(self, implementation: str, expected: str, detail: Optional[str] = None) -> None:
        self.implementation = implementation
        self.expected = expected
        message = f"Bad implementation: {implementation} does not implement {expected}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class InvalidArgumentError(DIException, TypeError):
    """Raised when a bulk registration receives input it cannot iterate as expected."""


class CyclicDependencyError(DIException):
    """Raised when a type is requested again while it is still being built.

    Attributes:
        dependency_chain: Names of the types involved, starting and ending with
            the repeated type.
    """

    def __init__(self, dependency_chain: List[str]) -> None:
        self.dependency_chain = dependency_chain
        super().__init__(f"Circular dependency detected: {' -> '.join(dependency_chain)}")


class RegistrationNotFoundError(DIException, LookupError):
    """Raised when looking up a definition or implementation that was never registered."""
