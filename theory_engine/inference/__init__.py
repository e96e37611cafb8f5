"""Inference layer - Musical understanding from chord symbols.

This layer builds higher-level musical knowledge from chord names:
- Chord parsing and note-set matching
- Key detection (tonal center of a progression)
- Next-chord suggestions from functional harmony
- Bass line generation

Pipeline: Chords → Key → [Suggestions, Bass line]
"""

from .chords import (
    ChordMatcher,
    ChordCandidate,
    ChordQuality,
    MatcherConfig,
    ParsedChord,
    chord_tension,
    parse_chord,
    transpose_chord,
    transpose_progression,
)
from .key import (
    DiatonicChord,
    HarmonicFunction,
    Key,
    KeyCandidate,
    KeyDetector,
    Mode,
    build_key,
    circle_of_fifths_position,
    get_key,
    harmonic_function,
    parse_key_name,
    roman_numeral,
    scale_notes,
)
from .progression import ChordSuggestion, ProgressionAdvisor
from .bass import BassLine, BassLineGenerator, BassNote, BassRole, BassStyle

__all__ = [
    # Chords
    "ChordMatcher",
    "ChordCandidate",
    "ChordQuality",
    "MatcherConfig",
    "ParsedChord",
    "chord_tension",
    "parse_chord",
    "transpose_chord",
    "transpose_progression",
    # Keys
    "DiatonicChord",
    "HarmonicFunction",
    "Key",
    "KeyCandidate",
    "KeyDetector",
    "Mode",
    "build_key",
    "circle_of_fifths_position",
    "get_key",
    "harmonic_function",
    "parse_key_name",
    "roman_numeral",
    "scale_notes",
    # Progressions
    "ChordSuggestion",
    "ProgressionAdvisor",
    # Bass
    "BassLine",
    "BassLineGenerator",
    "BassNote",
    "BassRole",
    "BassStyle",
]
