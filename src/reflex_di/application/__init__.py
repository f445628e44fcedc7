"""
Application layer - Use cases and orchestration.

This layer contains the introspector and the container that orchestrate domain objects.
It depends only on the Domain layer.
"""

from .circular_detector import CircularDependencyDetector
from .container import DIContainer
from .introspector import ReflectionIntrospector, qualified_name
from .shared_instances import SharedInstanceManager

__all__ = [
    "DIContainer",
    "ReflectionIntrospector",
    "SharedInstanceManager",
    "CircularDependencyDetector",
    "qualified_name",
]
