"""
Configuration module.

Loads static wiring with pydantic-settings and applies it to a container.
"""

from .bootstrap import bootstrap
from .settings import ContainerSettings

__all__ = [
    "ContainerSettings",
    "bootstrap",
]
