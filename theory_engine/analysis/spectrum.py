"""Spectrum frame sources for the real-time detection loop.

A frame source hands out the most recent FFT magnitude frame without
ever waiting for new samples:
- SpectrumBuffer: audio callbacks push sample blocks, the loop reads
- FileFrameSource: a loaded signal played back against a clock
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from ..core.constants import DEFAULT_FFT_SIZE, DEFAULT_SR


def magnitude_frame(samples: np.ndarray, fft_size: int) -> np.ndarray:
    """
    Hann-windowed FFT magnitudes of the last fft_size samples.

    Shorter blocks are zero-padded at the front. Returns fft_size // 2
    bins, bin i centred on i * sr / fft_size.
    """
    block = np.asarray(samples, dtype=float).ravel()[-fft_size:]
    if block.size < fft_size:
        block = np.concatenate([np.zeros(fft_size - block.size), block])
    spectrum = np.abs(np.fft.rfft(block * np.hanning(fft_size)))
    return spectrum[:fft_size // 2]


class FrameSource(ABC):
    """Non-blocking provider of the latest spectral frame."""

    def __init__(self, fft_size: int = DEFAULT_FFT_SIZE):
        if fft_size <= 0 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a positive power of two, got {fft_size}")
        self.fft_size = fft_size

    @abstractmethod
    def latest_frame(self) -> Optional[np.ndarray]:
        """
        Return the most recent magnitude frame.

        Returns:
            Frame array, or None when nothing is buffered
        """
        pass


class SpectrumBuffer(FrameSource):
    """Single-slot buffer holding the newest frame.

    Writers may run on an audio driver thread; the lock only guards the
    slot swap so the reader never waits on an FFT.
    """

    def __init__(self, fft_size: int = DEFAULT_FFT_SIZE):
        super().__init__(fft_size)
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._tail = np.zeros(0)

    def push_samples(self, block: np.ndarray) -> None:
        """Append time-domain samples and refresh the frame."""
        samples = np.concatenate([self._tail, np.asarray(block, dtype=float).ravel()])
        self._tail = samples[-self.fft_size:]
        frame = magnitude_frame(self._tail, self.fft_size)
        with self._lock:
            self._frame = frame

    def push_frame(self, frame: np.ndarray) -> None:
        """Store a frame computed elsewhere."""
        with self._lock:
            self._frame = np.asarray(frame, dtype=float)

    def latest_frame(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._frame

    def clear(self) -> None:
        with self._lock:
            self._frame = None
        self._tail = np.zeros(0)


class FileFrameSource(FrameSource):
    """Serve frames of a loaded signal as if it were playing live."""

    def __init__(
        self,
        audio: np.ndarray,
        sr: int = DEFAULT_SR,
        fft_size: int = DEFAULT_FFT_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize FileFrameSource.

        Args:
            audio: Mono signal
            sr: Sample rate of the signal
            fft_size: Samples per analysis window
            clock: Seconds counter; playback starts on first read
        """
        super().__init__(fft_size)
        self.audio = np.asarray(audio, dtype=float).ravel()
        self.sr = sr
        self.clock = clock
        self._start: Optional[float] = None

    @property
    def duration(self) -> float:
        return len(self.audio) / self.sr

    def position(self) -> int:
        """Current playback position in samples."""
        if self._start is None:
            self._start = self.clock()
        return int((self.clock() - self._start) * self.sr)

    def finished(self) -> bool:
        return self._start is not None and self.position() >= len(self.audio)

    def latest_frame(self) -> Optional[np.ndarray]:
        end = self.position()
        if end >= len(self.audio):
            return None
        start = max(0, end - self.fft_size)
        if end == start:
            return None
        return magnitude_frame(self.audio[start:end], self.fft_size)
