"""
Infrastructure layer - External integrations.

This layer contains configuration, logging, framework integrations and
testing tools. It depends on both Application and Domain layers.
"""

from . import config, testing

__all__ = [
    "config",
    "testing",
]
