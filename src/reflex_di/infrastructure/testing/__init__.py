"""
Testing utilities module.

Provides helpers and utilities for testing applications using reflex-di.
"""

from .utilities import FixedTypeIntrospector, TestContainer, create_mock_container, fixed_parameter

__all__ = [
    "FixedTypeIntrospector",
    "TestContainer",
    "create_mock_container",
    "fixed_parameter",
]
