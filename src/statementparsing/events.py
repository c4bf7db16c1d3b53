"""
Change notifications for vendor category updates.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

CategoryListener = Callable[[str, str], None]


class CategoryEvents:
    """Delivers category changes to every subscribed listener."""

    def __init__(self):
        self._listeners: list[CategoryListener] = []

    def subscribe(self, listener: CategoryListener) -> Callable[[], None]:
        """
        Register a listener called as ``listener(vendor, category)``.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, vendor: str, category: str) -> None:
        """Notify listeners in subscription order."""
        for listener in list(self._listeners):
            try:
                listener(vendor, category)
            except Exception:
                logger.exception(
                    f"Category listener {listener!r} failed for '{vendor}' -> '{category}'",
                )

    def __len__(self) -> int:
        return len(self._listeners)
