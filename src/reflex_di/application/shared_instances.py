from typing import Any, Callable, Dict, Iterable, Optional

import structlog

from reflex_di.domain import SharedInstanceSlot

logger = structlog.get_logger(__name__)


class SharedInstanceManager:
    """Manages shared (singleton) slots keyed by canonical type name.

    A key that is present marks the type as shared. Its slot stays pending
    until the first resolution fills it.

    Attributes:
        _slots: Shared slots by canonical type name.
    """

    def __init__(self) -> None:
        """Initialize the manager with no shared types."""
        self._slots: Dict[str, SharedInstanceSlot] = {}

    def mark(self, key: str) -> None:
        """Mark a type as shared without an instance.

        An already populated slot is reset, so the next resolution rebuilds it.
        """
        self._slots[key] = SharedInstanceSlot()

    def store(self, key: str, instance: Any) -> None:
        """Store ``instance`` as the shared value for ``key``."""
        self._slots[key] = SharedInstanceSlot(instance=instance, populated=True)

    def is_populated(self, key: str) -> bool:
        slot = self._slots.get(key)
        return slot is not None and slot.is_populated

    def get(self, key: str) -> Optional[Any]:
        """Return the populated instance for ``key``, or ``None`` when absent or pending."""
        slot = self._slots.get(key)
        if slot is None or not slot.is_populated:
            return None
        return slot.instance

    def get_or_create(self, key: str, factory: Callable[[], Any]) -> Any:
        """Return the shared instance, building it with ``factory`` when the slot is pending.

        Types that are not shared are built on every call and never cached.

        Args:
            key: Canonical type name.
            factory: Builds a new instance.

        Returns:
            The shared or freshly built instance.
        """
        if self.is_populated(key):
            logger.debug("shared_instance_hit", type=key)
            return self._slots[key].instance

        instance = factory()
        # The slot may have been removed by unshare() while the factory ran.
        if key in self._slots:
            self._slots[key].fill(instance)
            logger.debug("shared_instance_stored", type=key)
        return instance

    def is_shared(self, key: str) -> bool:
        return key in self._slots

    def refresh(self, key: str) -> None:
        """Reset a populated slot to pending; no-op for pending or unshared types."""
        slot = self._slots.get(key)
        if slot is not None and slot.is_populated:
            slot.reset()

    def unshare(self, key: str) -> None:
        self._slots.pop(key, None)

    def rekey(self, old_key: str, new_key: str) -> None:
        """Move the slot stored under ``old_key`` to ``new_key``.

        An existing slot under ``new_key`` wins and the old one is dropped.
        """
        slot = self._slots.pop(old_key, None)
        if slot is not None:
            self._slots.setdefault(new_key, slot)

    def scoped(self, fresh_keys: Iterable[str] = ()) -> "SharedInstanceManager":
        """Create a manager that shares this manager's slots except ``fresh_keys``.

        Slots are shared by reference, so an instance built through either
        manager is visible to both. Each key in ``fresh_keys`` gets a new
        pending slot that only the returned manager sees.
        """
        scope = SharedInstanceManager()
        scope._slots = dict(self._slots)
        for key in fresh_keys:
            scope.mark(key)
        return scope

    def clear(self) -> None:
        self._slots.clear()
