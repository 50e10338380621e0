import logging
from typing import Callable, Optional

from textual.timer import Timer

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1.0

# Signature of ``MessagePump.set_interval``; the app passes its own bound method
IntervalFactory = Callable[..., Timer]


class PlaybackClock:
    """Repeating tick driven by a Textual interval timer.

    Used as the fallback time source when no media engine drives a track,
    and by the media engine to poll the mixer position. Textual timers skip
    missed ticks rather than catching up.
    """

    def __init__(self, set_interval: IntervalFactory, name: str = "clock"):
        self.name = name
        self._set_interval = set_interval
        self._timer: Optional[Timer] = None
        self._interval: float = DEFAULT_TICK_INTERVAL
        self._on_tick: Optional[Callable[[], None]] = None

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, interval: float, on_tick: Callable[[], None]) -> None:
        """Fire ``on_tick`` every ``interval`` seconds until stopped.

        Starting a running clock stops the previous run first.

        Raises:
            ValueError: If interval is not positive.
        """
        if interval <= 0:
            raise ValueError("interval must be > 0")

        self.stop()

        self._interval = interval
        self._on_tick = on_tick
        self._timer = self._set_interval(interval, self._fire, name=self.name)
        logger.debug(f"{self.name} started ({interval}s)")

    def stop(self) -> None:
        """Stop the timer, if any."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
            logger.debug(f"{self.name} stopped")
        self._on_tick = None

    def _fire(self) -> None:
        on_tick = self._on_tick
        if on_tick is None:
            return

        try:
            on_tick()
        except Exception as e:
            logger.error(f"{self.name} tick handler failed: {type(e).__name__}: {e}", exc_info=True)
