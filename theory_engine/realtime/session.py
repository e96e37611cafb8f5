"""Real-time listening loop.

A ListeningSession polls a frame source once per display frame:
1. Read the latest spectral frame (never waits for audio)
2. Extract notes and match a chord
3. Record successful detections in the session's own history
4. Re-arm for the next frame

Scheduling is cooperative and single-threaded; stop() cancels the pending
tick so nothing fires after teardown.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..analysis import FrameSource, PitchExtractor
from ..core.constants import DEFAULT_FFT_SIZE, DEFAULT_FPS
from ..inference import ChordMatcher
from .history import DetectedSample, DetectionHistory


@dataclass
class SessionConfig:
    """Configuration for the listening loop.

    Attributes:
        fps: Ticks per second (default: 60, one per display frame)
        fft_size: Analysis window for live sample buffers (default: 8192)
    """

    fps: float = DEFAULT_FPS
    fft_size: int = DEFAULT_FFT_SIZE

    def __post_init__(self):
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")

    @property
    def interval(self) -> float:
        """Seconds between ticks."""
        return 1.0 / self.fps


class FrameScheduler(ABC):
    """Arms one callback at a time for the next frame."""

    @abstractmethod
    def schedule(self, callback: Callable[[], None]) -> None:
        """Run callback once on the next frame."""
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Drop the pending callback, if any."""
        pass


class AsyncioFrameScheduler(FrameScheduler):
    """Frame scheduler backed by an asyncio event loop."""

    def __init__(self, fps: float = DEFAULT_FPS, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Initialize AsyncioFrameScheduler.

        Args:
            fps: Frames per second
            loop: Event loop; the running loop is used when omitted
        """
        self.interval = 1.0 / fps
        self.loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    def schedule(self, callback: Callable[[], None]) -> None:
        loop = self.loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def pending(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()


class ListeningSession:
    """Continuous chord detection against a live frame source."""

    def __init__(
        self,
        source: FrameSource,
        config: Optional[SessionConfig] = None,
        scheduler: Optional[FrameScheduler] = None,
        extractor: Optional[PitchExtractor] = None,
        matcher: Optional[ChordMatcher] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize ListeningSession.

        Args:
            source: Where frames come from
            config: Loop configuration
            scheduler: Frame scheduler (asyncio at config.fps by default)
            extractor: Spectral peak picker
            matcher: Chord matcher
            clock: Timestamp source for detected samples
        """
        self.source = source
        self.config = config or SessionConfig()
        self.scheduler = scheduler or AsyncioFrameScheduler(self.config.fps)
        self.extractor = extractor or PitchExtractor()
        self.matcher = matcher or ChordMatcher()
        self.clock = clock

        self._history = DetectionHistory()
        self._callbacks: List[Callable[[DetectedSample], None]] = []
        self._running = False

    @property
    def history(self) -> DetectionHistory:
        return self._history

    @property
    def running(self) -> bool:
        return self._running

    def on_detection(self, callback: Callable[[DetectedSample], None]) -> None:
        """Register a callback for every successful detection."""
        self._callbacks.append(callback)

    def start(self) -> None:
        """Arm the first tick. Starting twice is a no-op."""
        if self._running:
            return
        self._running = True
        try:
            self.scheduler.schedule(self._on_frame)
        except Exception:
            self._running = False
            raise

    def stop(self) -> None:
        """Cancel the pending tick."""
        self._running = False
        self.scheduler.cancel()

    def tick(self) -> Optional[DetectedSample]:
        """
        Run one detection step.

        Returns:
            The recorded sample, or None when there was no frame or no chord
        """
        frame = self.source.latest_frame()
        if frame is None:
            return None

        notes = self.extractor.extract(frame, self.source.fft_size)
        chord = self.matcher.detect_chord_from_notes(notes)
        if chord is None:
            return None

        sample = DetectedSample(chord_name=chord, notes=tuple(notes), timestamp=self.clock())
        self._history.push(sample)
        for callback in self._callbacks:
            callback(sample)
        return sample

    async def run_for(self, seconds: float) -> Tuple[DetectedSample, ...]:
        """
        Listen for a while on the running event loop.

        Returns:
            History snapshot at the end
        """
        self.start()
        try:
            await asyncio.sleep(seconds)
        finally:
            self.stop()
        return self._history.snapshot()

    def _on_frame(self) -> None:
        if not self._running:
            return
        try:
            self.tick()
        finally:
            # Re-arm even when a tick or callback raised
            if self._running:
                self.scheduler.schedule(self._on_frame)
