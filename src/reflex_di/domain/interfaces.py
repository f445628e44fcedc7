from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Type, Union

from reflex_di.domain.models import ClassDescriptor, ParameterDescriptor

TypeRef = Union[str, Type]


class ITypeIntrospector(ABC):
    """Abstract interface for discovering and caching constructor shapes."""

    @abstractmethod
    def normalize(self, type_ref: TypeRef) -> str:
        """Return the canonical, case-insensitive key for a type or type name."""

    @abstractmethod
    def aliases_of(self, canonical: str) -> Tuple[str, ...]:
        """Return the other names that normalize to ``canonical``.

        Names used before a class was known may since have become aliases;
        callers holding tables keyed by name use this to merge such entries.
        """

    @abstractmethod
    def describe_class(self, type_ref: TypeRef) -> ClassDescriptor:
        """Describe a type.

        Args:
            type_ref: Class object or type name.

        Raises:
            TypeNotFoundError: If the type cannot be located.
        """

    @abstractmethod
    def describe_constructor(self, type_ref: TypeRef) -> Optional[Tuple[ParameterDescriptor, ...]]:
        """Return the constructor parameters, or ``None`` if the type declares no constructor."""

    @abstractmethod
    def declared_type(self, parameter: ParameterDescriptor) -> Optional[str]:
        """Return the canonical name of the parameter's declared class, or ``None``."""

    @abstractmethod
    def satisfies(self, instance: Any, type_ref: TypeRef) -> bool:
        """Check whether ``instance`` is-a ``type_ref``."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every cached descriptor."""


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def make(self, type_ref: TypeRef, custom_definition: Optional[Mapping[str, Any]] = None) -> Any:
        """Build (or fetch the shared instance of) the requested type.

        Args:
            type_ref: Class object or type name.
            custom_definition: Optional call-time definition overriding the registered one.
        """

    @abstractmethod
    def define(self, type_ref: TypeRef, definition: Mapping[str, Any]) -> None:
        """Validate and store the injection definition for a type."""

    @abstractmethod
    def define_all(self, definitions: Union[Mapping[TypeRef, Any], Iterable[Tuple[TypeRef, Any]]]) -> int:
        """Define several types at once and return how many were stored."""

    @abstractmethod
    def get_definition(self, type_ref: TypeRef) -> Dict[str, Any]:
        """Return a copy of the stored definition for a type."""

    @abstractmethod
    def is_defined(self, type_ref: TypeRef) -> bool:
        """Check whether a type has a stored definition."""

    @abstractmethod
    def implement(self, abstract: TypeRef, concrete: TypeRef) -> None:
        """Bind an abstract or interface type to a concrete implementation."""

    @abstractmethod
    def implement_all(self, implementations: Union[Mapping[TypeRef, TypeRef], Iterable[Tuple[TypeRef, TypeRef]]]) -> int:
        """Bind several abstract types at once and return how many were stored."""

    @abstractmethod
    def get_implementation(self, abstract: TypeRef) -> TypeRef:
        """Return the implementation bound to an abstract type."""

    @abstractmethod
    def is_implemented(self, abstract: TypeRef) -> bool:
        """Check whether an abstract type has a binding."""

    @abstractmethod
    def share(self, target: Any) -> None:
        """Mark a type as shared, or store an instance as the shared value of its type."""

    @abstractmethod
    def share_all(self, targets: Iterable[Any]) -> None:
        """Apply :meth:`share` to every element."""

    @abstractmethod
    def is_shared(self, type_ref: TypeRef) -> bool:
        """Check whether a type is shared (pending or populated)."""

    @abstractmethod
    def refresh(self, type_ref: TypeRef) -> None:
        """Force a shared type to be rebuilt on its next resolution."""

    @abstractmethod
    def unshare(self, type_ref: TypeRef) -> None:
        """Stop sharing a type."""

    @abstractmethod
    def create_scope(self, fresh: Iterable[TypeRef] = ()) -> "IContainer":
        """Create a child container where the ``fresh`` types get their own shared instances."""

    @abstractmethod
    def clear(self) -> None:
        """Clear every definition, binding, shared instance and cached descriptor."""
