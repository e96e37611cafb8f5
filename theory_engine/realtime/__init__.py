"""Real-time layer - Continuous detection from live audio.

- DetectionHistory: bounded, chronological record of detections
- ListeningSession: frame-rate polling loop feeding the history
"""

from .history import DetectedSample, DetectionHistory
from .session import AsyncioFrameScheduler, FrameScheduler, ListeningSession, SessionConfig

__all__ = [
    "DetectedSample",
    "DetectionHistory",
    "AsyncioFrameScheduler",
    "FrameScheduler",
    "ListeningSession",
    "SessionConfig",
]
