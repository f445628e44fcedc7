"""Application layer - Circular dependency detection."""

import threading
from typing import List, Optional, Tuple

from reflex_di.domain import CyclicDependencyError


class CircularDependencyDetector:
    """Detects circular dependencies during resolution.

    Uses thread-local storage to track the current resolution stack.
    When a type appears twice in the stack, a circular dependency is detected.

    Attributes:
        _local: Thread-local storage for resolution stacks.
    """

    def __init__(self) -> None:
        """Initialize the circular dependency detector with thread-local storage."""
        self._local = threading.local()

    def _get_stack(self) -> List[Tuple[str, str]]:
        """Get the current thread's stack of (canonical name, label) pairs."""
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, type_name: str, label: Optional[str] = None) -> None:
        """Add a type to the resolution stack.

        Args:
            type_name: Canonical name of the type being built.
            label: Name shown in the error message; defaults to ``type_name``.

        Raises:
            CyclicDependencyError: If the type is already in the stack.

        Example:
            >>> detector = CircularDependencyDetector()
            >>> detector.push("app.servicea", "ServiceA")
            >>> detector.push("app.serviceb", "ServiceB")
            >>> detector.push("app.servicea", "ServiceA")  # Raises CyclicDependencyError
        """
        stack = self._get_stack()
        names = [name for name, _ in stack]

        if type_name in names:
            cycle = [entry_label for _, entry_label in stack[names.index(type_name) :]]
            raise CyclicDependencyError(cycle + [label or type_name])

        stack.append((type_name, label or type_name))

    def pop(self) -> None:
        """Remove the most recent type from the resolution stack."""
        stack = self._get_stack()
        if stack:
            stack.pop()

    def depth(self) -> int:
        return len(self._get_stack())

    def clear(self) -> None:
        """Clear the current thread's resolution stack."""
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
