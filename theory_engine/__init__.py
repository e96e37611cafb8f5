"""Music Theory Engine - Chords, keys, progressions and bass lines.

Architecture Layers:
    1. core/      - Pitch classes, note names, constants
    2. analysis/  - Spectral frames to note names, audio loading
    3. inference/ - Musical understanding (chords, key, progressions, bass)
    4. realtime/  - Detection history and the listening loop
    5. output/    - Export (MIDI)
"""

__version__ = "0.1.0"

# Core types
from .core import Note

# Analysis layer
from .analysis import AudioLoader, FileFrameSource, PitchExtractor, SpectrumBuffer

# Inference layer
from .inference import (
    BassLineGenerator,
    ChordMatcher,
    KeyDetector,
    ProgressionAdvisor,
    parse_chord,
)

# Real-time layer
from .realtime import DetectionHistory, ListeningSession

# Output layer
from .output import MIDIExporter

__all__ = [
    # Core
    "Note",
    # Analysis
    "AudioLoader",
    "FileFrameSource",
    "PitchExtractor",
    "SpectrumBuffer",
    # Inference
    "BassLineGenerator",
    "ChordMatcher",
    "KeyDetector",
    "ProgressionAdvisor",
    "parse_chord",
    # Real-time
    "DetectionHistory",
    "ListeningSession",
    # Output
    "MIDIExporter",
]
