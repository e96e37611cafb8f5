"""Core types and constants for the music-theory engine."""

from .note import Note, spell, midi_to_name, split_note_name, to_pitch_class
from .constants import (
    PITCH_NAMES,
    FLAT_PITCH_NAMES,
    DEFAULT_SR,
    DEFAULT_FFT_SIZE,
    HISTORY_LENGTH,
    MIN_NOTES,
    PEAK_COUNT,
)

__all__ = [
    "Note",
    "spell",
    "midi_to_name",
    "split_note_name",
    "to_pitch_class",
    "PITCH_NAMES",
    "FLAT_PITCH_NAMES",
    "DEFAULT_SR",
    "DEFAULT_FFT_SIZE",
    "HISTORY_LENGTH",
    "MIN_NOTES",
    "PEAK_COUNT",
]
