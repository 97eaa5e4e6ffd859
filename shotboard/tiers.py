"""
shotboard.tiers - Account tier signal.

Holds the current tier name and notifies subscribers when it changes.
"""

from __future__ import annotations

from collections.abc import Callable

from shotboard.config import load_tier
from shotboard.logging import logger

TierListener = Callable[[str], None]


class TierSource:
    """Current account tier plus a change-notification channel."""

    def __init__(self, tier: str = "free") -> None:
        load_tier(tier)
        self._tier = tier
        self._listeners: list[TierListener] = []

    @property
    def tier(self) -> str:
        return self._tier

    def subscribe(self, listener: TierListener) -> Callable[[], None]:
        """Register a callback invoked with the new tier name.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_tier(self, tier: str) -> None:
        """Change the tier; subscribers are notified only on an actual change.

        Raises:
            ValueError: If the tier is unknown
        """
        load_tier(tier)
        if tier == self._tier:
            return
        logger.info("Tier changed: %s -> %s", self._tier, tier)
        self._tier = tier
        for listener in list(self._listeners):
            listener(tier)
