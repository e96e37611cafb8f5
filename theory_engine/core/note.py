"""Note data class and pitch-name helpers."""

import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import librosa
import numpy as np

from .constants import (
    ACCIDENTALS,
    FLAT_PITCH_NAMES,
    NATURAL_PITCH_CLASSES,
    PITCH_NAMES,
)

# Letter, optional accidental, optional (possibly negative) octave
_NOTE_RE = re.compile(r"^([A-G])([#♯b♭]?)(-?\d+)?$")


@dataclass
class Note:
    """A timed note, used when bass lines are rendered to MIDI."""

    pitch: int  # MIDI pitch (0-127)
    onset: float  # Start time in seconds
    offset: float  # End time in seconds
    velocity: int = 64  # MIDI velocity (0-127)
    instrument: Optional[str] = None

    @property
    def duration(self) -> float:
        """Note duration in seconds."""
        return self.offset - self.onset

    @property
    def pitch_name(self) -> str:
        """Get note name (e.g., 'C4', 'A#3')."""
        return midi_to_name(self.pitch)

    @property
    def pitch_class(self) -> int:
        """Get pitch class (0-11, where 0=C)."""
        return self.pitch % 12

    @staticmethod
    def freq_to_midi(freq: float) -> int:
        """Convert frequency (Hz) to the nearest MIDI pitch."""
        if freq <= 0:
            return 0
        return int(np.floor(librosa.hz_to_midi(freq) + 0.5))

    @staticmethod
    def midi_to_freq(midi: int) -> float:
        """Convert MIDI pitch to frequency (Hz)."""
        return float(librosa.midi_to_hz(midi))


def spell(pitch_class: int, prefer_flats: bool = False) -> str:
    """Name a pitch class, with sharps unless flats are preferred."""
    names = FLAT_PITCH_NAMES if prefer_flats else PITCH_NAMES
    return names[pitch_class % 12]


def midi_to_name(midi: int) -> str:
    """Convert a MIDI number to a sharp-spelled name with octave ('A4')."""
    return librosa.midi_to_note(int(midi), unicode=False)


def split_note_name(name: str) -> Optional[Tuple[int, Optional[int]]]:
    """
    Split a note name into (pitch class, octave).

    Accepts 'C', 'F#', 'Bb3', 'E♭5'. Octave is None when absent.
    Returns None for anything that is not a note name.
    """
    if not isinstance(name, str):
        return None
    match = _NOTE_RE.match(name.strip())
    if not match:
        return None
    letter, accidental, octave = match.groups()
    pitch_class = (NATURAL_PITCH_CLASSES[letter] + ACCIDENTALS.get(accidental, 0)) % 12
    return pitch_class, int(octave) if octave is not None else None


def to_pitch_class(note: Union[str, int]) -> Optional[int]:
    """Pitch class of a note name or MIDI number, None if unreadable."""
    if isinstance(note, (int, np.integer)) and not isinstance(note, bool):
        return int(note) % 12
    parsed = split_note_name(note)
    if parsed is None:
        return None
    return parsed[0]
