import logging
from typing import Optional

from models import PlaybackState
from services.playback_machine import PlaybackStateMachine

logger = logging.getLogger(__name__)


class NavigationBridge:
    """Turns page gestures into track changes on the state machine.

    The bridge holds the index the feed is scrolled to. Any change to it that
    differs from the last observed value is forwarded to the machine; index
    changes made by the machine itself (auto-advance) are mirrored back so
    they never trigger a second reload.
    """

    def __init__(self, machine: PlaybackStateMachine):
        self._machine = machine
        self._requested_index: Optional[int] = machine.current_index
        self._subscription = machine.state_changed.subscribe(self._on_state_changed)

    @property
    def requested_index(self) -> Optional[int]:
        return self._requested_index

    @requested_index.setter
    def requested_index(self, index: Optional[int]) -> None:
        if index is None or index == self._requested_index:
            return

        if not self._machine.set_current_index(index):
            logger.debug(f"Navigation to {index} rejected, staying on {self._machine.current_index}")
        self._requested_index = self._machine.current_index

    def swipe_next(self) -> None:
        if self._requested_index is not None:
            self.requested_index = self._requested_index + 1

    def swipe_previous(self) -> None:
        if self._requested_index is not None:
            self.requested_index = self._requested_index - 1

    def close(self) -> None:
        self._subscription.cancel()

    def _on_state_changed(self, state: PlaybackState) -> None:
        self._requested_index = state.current_index
