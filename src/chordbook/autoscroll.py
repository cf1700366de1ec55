"""Auto-scroll engine for the song reader.

A single cooperative loop per reader: every frame advances the container by
``pixels_per_second * elapsed`` and asks the host scheduler for the next
frame.  Nothing runs concurrently; at most one frame is pending at a time.

States are ``Idle`` and ``Playing``.  The speed level can change while
playing and is read fresh on every frame.  Every play session owns a
:class:`CancelToken` so a frame that fires after :meth:`AutoScroller.stop`
(or after the reader is torn down) never touches the container.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from .config import Settings, get_settings
from .exceptions import ScrollTargetError
from .models import ScrollState

logger = logging.getLogger(__name__)


class ScrollTarget(Protocol):
    """The scrollable container: the three numbers a DOM element exposes."""

    scroll_top: float
    scroll_height: float
    client_height: float


class FrameScheduler(Protocol):
    def request(self, callback: Callable[[float], None]) -> Any:
        """Run ``callback(now_seconds)`` on the next frame; return a handle."""

    def cancel(self, handle: Any) -> None:
        """Cancel a pending frame.  Must tolerate handles that already ran."""


class CancelToken:
    __slots__ = ("_cancelled",)

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioFrameScheduler:
    """Frame scheduler driven by an asyncio event loop at a fixed interval."""

    def __init__(self, interval: float = 1 / 60, loop: asyncio.AbstractEventLoop | None = None):
        self.interval = interval
        self._loop = loop

    def request(self, callback: Callable[[float], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, lambda: callback(loop.time()))

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class AutoScroller:
    """Scroll *target* towards its bottom at the selected speed level."""

    def __init__(
        self,
        target: ScrollTarget | None,
        scheduler: FrameScheduler,
        speed_level: int | None = None,
        settings: Settings | None = None,
        on_state_change: Callable[[bool], None] | None = None,
        on_complete: Callable[[], None] | None = None,
    ):
        if target is None:
            raise ScrollTargetError("auto-scroll needs a scroll container")
        self.target = target
        self.scheduler = scheduler
        self.settings = settings or get_settings()
        self.on_state_change = on_state_change
        self.on_complete = on_complete

        level = self.settings.default_speed_level if speed_level is None else speed_level
        self._speed_level = self.settings.clamp_speed_level(level)
        self._playing = False
        self._closed = False
        self._token: CancelToken | None = None
        self._frame: Any = None
        self._last_time: float | None = None
        self._progress = 0.0
        self._listeners: list[Callable[[float], None]] = []
        self._update_progress()

    # --- state ---

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed_level(self) -> int:
        return self._speed_level

    @speed_level.setter
    def speed_level(self, level: int) -> None:
        self._speed_level = self.settings.clamp_speed_level(level)

    @property
    def pixels_per_second(self) -> float:
        return self.settings.pixels_per_second(self._speed_level)

    @property
    def extent(self) -> float:
        """Scrollable distance; recomputed on every call."""
        return self.target.scroll_height - self.target.client_height

    @property
    def progress_percent(self) -> float:
        return self._progress

    @property
    def state(self) -> ScrollState:
        return ScrollState(
            is_playing=self._playing,
            speed_level=self._speed_level,
            progress_percent=self._progress,
        )

    # --- commands ---

    def play(self) -> bool:
        """Start scrolling.  Returns False when there is nothing to scroll."""
        if self._closed:
            return False
        if self._playing:
            return True

        extent = self.extent
        if extent <= 0:
            logger.debug("auto-scroll rejected: nothing to scroll (extent %s)", extent)
            return False

        if self.target.scroll_top >= extent - self.settings.scroll_restart_epsilon:
            self.target.scroll_top = 0
            self._update_progress()

        self._playing = True
        self._token = CancelToken()
        self._last_time = None
        self._notify_state(True)
        self._schedule(self._token)
        return True

    def stop(self) -> None:
        """Stop scrolling.  Safe to call at any time, any number of times."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._frame is not None:
            self.scheduler.cancel(self._frame)
            self._frame = None
        if self._playing:
            self._playing = False
            self._notify_state(False)

    def toggle(self) -> bool:
        """Play when idle, stop when playing.  Returns the new playing state."""
        if self._playing:
            self.stop()
        else:
            self.play()
        return self._playing

    def close(self) -> None:
        """Tear down: stop and refuse further playback."""
        self.stop()
        self._closed = True
        self._listeners.clear()

    # --- progress ---

    def subscribe(self, listener: Callable[[float], None]) -> Callable[[], None]:
        """Call *listener* with the progress percentage on every update."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def handle_scroll(self) -> float:
        """Scroll-event hook for the host; refreshes progress."""
        self._update_progress()
        return self._progress

    # --- loop ---

    def _schedule(self, token: CancelToken) -> None:
        self._frame = self.scheduler.request(lambda now: self._tick(token, now))

    def _tick(self, token: CancelToken, now: float) -> None:
        if token.cancelled:
            return
        self._frame = None

        delta = 0.0 if self._last_time is None else now - self._last_time
        self._last_time = now
        extent = self.extent

        if delta > self.settings.max_frame_delta:
            # host starved the loop (backgrounded tab); don't jump
            logger.debug("skipping frame after %.3fs gap", delta)
        elif delta > 0:
            position = self.target.scroll_top + self.pixels_per_second * delta
            self.target.scroll_top = min(position, max(extent, 0))
            self._update_progress()

        if self.target.scroll_top >= extent - self.settings.scroll_end_threshold:
            self._finish()
            return

        self._schedule(token)

    def _finish(self) -> None:
        self.stop()
        self._update_progress()
        if self.on_complete is not None:
            self.on_complete()

    def _update_progress(self) -> None:
        extent = self.extent
        if extent > 0:
            self._progress = min(max(self.target.scroll_top / extent * 100, 0.0), 100.0)
        for listener in list(self._listeners):
            listener(self._progress)

    def _notify_state(self, playing: bool) -> None:
        if self.on_state_change is not None:
            self.on_state_change(playing)
