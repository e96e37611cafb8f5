"""Output layer - Export generated material.

- MIDI files of bass lines
"""

from .midi import MIDIExporter

__all__ = [
    "MIDIExporter",
]
