"""Bounded history of real-time chord detections."""

from collections import deque
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from ..core.constants import CONFIDENCE_DIVISOR, HISTORY_LENGTH


@dataclass(frozen=True)
class DetectedSample:
    """One successful detection from the listening loop."""
    chord_name: str
    notes: Tuple[str, ...]
    timestamp: float  # Seconds, from the session clock

    @property
    def confidence(self) -> float:
        """Share of the peak budget that produced notes (0-1)."""
        return len(self.notes) / CONFIDENCE_DIVISOR


class DetectionHistory:
    """Ring buffer of the most recent detections, oldest first.

    Pushing into a full history evicts the oldest sample.
    """

    def __init__(self, capacity: int = HISTORY_LENGTH):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._samples = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    @property
    def latest(self) -> Optional[DetectedSample]:
        return self._samples[-1] if self._samples else None

    def push(self, sample: DetectedSample) -> None:
        self._samples.append(sample)

    def snapshot(self) -> Tuple[DetectedSample, ...]:
        """Immutable copy in chronological order."""
        return tuple(self._samples)

    def chord_names(self):
        return [sample.chord_name for sample in self._samples]

    def clear(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[DetectedSample]:
        return iter(self.snapshot())
