"""
Domain layer - Core models, interfaces and errors.

This layer contains the descriptors and definitions the container works with.
It has no dependencies on other layers.
"""

from .enums import TypeKind
from .exceptions import (
    BadImplementationError,
    CyclicDependencyError,
    DIException,
    InvalidArgumentError,
    InvalidDefinitionError,
    RegistrationNotFoundError,
    TypeNotFoundError,
    UnresolvableTypeError,
)
from .interfaces import IContainer, ITypeIntrospector, TypeRef
from .models import (
    RAW_PREFIX,
    ClassDescriptor,
    InjectionDefinition,
    ParameterDescriptor,
    SharedInstanceSlot,
)

__all__ = [
    # Enums
    "TypeKind",
    # Exceptions
    "DIException",
    "TypeNotFoundError",
    "InvalidDefinitionError",
    "UnresolvableTypeError",
    "BadImplementationError",
    "InvalidArgumentError",
    "CyclicDependencyError",
    "RegistrationNotFoundError",
    # Interfaces
    "IContainer",
    "ITypeIntrospector",
    "TypeRef",
    # Models
    "RAW_PREFIX",
    "ClassDescriptor",
    "ParameterDescriptor",
    "InjectionDefinition",
    "SharedInstanceSlot",
]
