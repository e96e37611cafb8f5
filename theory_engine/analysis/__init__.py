"""Analysis layer - Spectral frames to note names.

This layer turns frequency-domain audio into symbolic pitches:
- Frame sources (live sample buffer, file playback)
- Spectral peak picking and semitone quantization
- Audio file loading

Pipeline: Samples → FFT frame → Peaks → Note names
"""

from .pitch import PitchConfig, PitchExtractor
from .spectrum import FileFrameSource, FrameSource, SpectrumBuffer, magnitude_frame
from .loader import AudioLoader

__all__ = [
    "PitchConfig",
    "PitchExtractor",
    "FrameSource",
    "SpectrumBuffer",
    "FileFrameSource",
    "magnitude_frame",
    "AudioLoader",
]
