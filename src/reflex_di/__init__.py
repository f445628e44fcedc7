"""
reflex-di: Reflection based Dependency Injection container with auto-wiring.

Public API exports for the reflex-di package.
"""

# Application exports
from reflex_di.application.container import DIContainer
from reflex_di.application.introspector import ReflectionIntrospector

# Domain exports
from reflex_di.domain.enums import TypeKind
from reflex_di.domain.exceptions import (
    BadImplementationError,
    CyclicDependencyError,
    DIException,
    InvalidArgumentError,
    InvalidDefinitionError,
    RegistrationNotFoundError,
    TypeNotFoundError,
    UnresolvableTypeError,
)
from reflex_di.domain.interfaces import IContainer, ITypeIntrospector

# Infrastructure exports
from reflex_di.infrastructure.config import ContainerSettings, bootstrap

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    "IContainer",
    "ReflectionIntrospector",
    "ITypeIntrospector",
    # Configuration
    "ContainerSettings",
    "bootstrap",
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
]
