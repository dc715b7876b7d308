from __future__ import annotations

import logging

from PySide6.QtCore import QElapsedTimer, QObject, QTimer

from springforming.app.state import TimelineStore
from springforming.config import DEFAULT_FRAME_INTERVAL_MS

logger = logging.getLogger(__name__)


class PlaybackDriver(QObject):
    """
    Frame scheduler for a ``TimelineStore``.

    Every timer timeout measures the wall time since the previous frame and
    feeds it to ``store.tick``. Runs on the Qt event loop, so ticks and
    process regeneration never interleave.
    """

    def __init__(self, store: TimelineStore, interval_ms: int = DEFAULT_FRAME_INTERVAL_MS) -> None:
        super().__init__()
        self.store = store
        self._clock = QElapsedTimer()

        self.timer = QTimer(self)
        self.timer.setInterval(interval_ms)
        self.timer.timeout.connect(self.advance_frame)

    @property
    def is_running(self) -> bool:
        return self.timer.isActive()

    def start(self) -> None:
        self._clock.start()
        self.timer.start()
        logger.debug(f"Playback driver started ({self.timer.interval()} ms/frame).")

    def stop(self) -> None:
        self.timer.stop()
        self._clock.invalidate()

    def advance_frame(self) -> float:
        """Tick the store with the elapsed wall time; returns the delta in seconds."""
        if not self._clock.isValid():
            self._clock.start()
            return 0.0
        delta = self._clock.restart() / 1000.0
        self.store.tick(delta)
        return delta
