"""
shotboard.state - Per-shot image state machine.

Maps shot identifiers to their ImageState (Idle → Loading → Done/Error →
Loading → ...). Every write is tagged with the epoch of the scene set it
belongs to; writes from an older epoch are dropped.
"""

from __future__ import annotations

from collections.abc import Callable

from shotboard.logging import logger
from shotboard.models import IDLE, LOADING, Done, Error, ImageState

StateListener = Callable[[str, ImageState], None]


class ImageStateMap:
    """Authoritative image state for each shot of the current epoch."""

    def __init__(self) -> None:
        self._states: dict[str, ImageState] = {}
        self._epoch = 0
        self._listeners: list[StateListener] = []

    @property
    def epoch(self) -> int:
        return self._epoch

    def reset(self, epoch: int) -> None:
        """Clear all entries and accept writes only for ``epoch`` from now on."""
        self._states = {}
        self._epoch = epoch

    def get(self, identifier: str) -> ImageState:
        """Current state of a shot; shots without an entry are Idle."""
        return self._states.get(identifier, IDLE)

    def snapshot(self) -> dict[str, ImageState]:
        return dict(self._states)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback for every accepted state change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def set_loading(self, identifier: str, epoch: int) -> bool:
        return self._write(identifier, epoch, LOADING)

    def set_done(self, identifier: str, epoch: int, image: str) -> bool:
        return self._write(identifier, epoch, Done(image=image))

    def set_error(self, identifier: str, epoch: int, message: str) -> bool:
        return self._write(identifier, epoch, Error(message=message))

    def _write(self, identifier: str, epoch: int, state: ImageState) -> bool:
        if epoch != self._epoch:
            logger.debug(
                "Dropping %s for %s from stale epoch %d (current %d)",
                state.status,
                identifier,
                epoch,
                self._epoch,
            )
            return False
        self._states[identifier] = state
        logger.debug("%s -> %s", identifier, state.status)
        for listener in list(self._listeners):
            listener(identifier, state)
        return True
