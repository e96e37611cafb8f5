"""Key detection - Identify the tonal center of a chord progression.

Scores all 24 major and minor keys against a chord sequence:
- Membership of each chord root in the key's scale
- Agreement of chord quality with the diatonic chord on that root
- Extra weight for tonic, dominant and subdominant chords
- A bonus when the progression starts on the tonic

Highest total wins; on a tie the key enumerated first is kept.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from ..core import PITCH_NAMES, spell, split_note_name, to_pitch_class
from .chords import ChordQuality, ParsedChord, parse_chord


class Mode(Enum):
    """Key modes."""
    MAJOR = "major"
    MINOR = "minor"


class HarmonicFunction(Enum):
    """Role of a chord by the scale degree of its root."""
    TONIC = "tonic"
    SUPERTONIC = "supertonic"
    MEDIANT = "mediant"
    SUBDOMINANT = "subdominant"
    DOMINANT = "dominant"
    SUBMEDIANT = "submediant"
    LEADING = "leading"


DEGREE_FUNCTIONS = [
    HarmonicFunction.TONIC,
    HarmonicFunction.SUPERTONIC,
    HarmonicFunction.MEDIANT,
    HarmonicFunction.SUBDOMINANT,
    HarmonicFunction.DOMINANT,
    HarmonicFunction.SUBMEDIANT,
    HarmonicFunction.LEADING,
]

SCALE_INTERVALS = {
    Mode.MAJOR: [0, 2, 4, 5, 7, 9, 11],
    Mode.MINOR: [0, 2, 3, 5, 7, 8, 10],  # Natural minor
}

# Diatonic triad quality on each scale degree
DIATONIC_QUALITIES = {
    Mode.MAJOR: [
        ChordQuality.MAJOR,       # I
        ChordQuality.MINOR,       # ii
        ChordQuality.MINOR,       # iii
        ChordQuality.MAJOR,       # IV
        ChordQuality.MAJOR,       # V
        ChordQuality.MINOR,       # vi
        ChordQuality.DIMINISHED,  # vii°
    ],
    Mode.MINOR: [
        ChordQuality.MINOR,       # i
        ChordQuality.DIMINISHED,  # ii°
        ChordQuality.MAJOR,       # III
        ChordQuality.MINOR,       # iv
        ChordQuality.MINOR,       # v
        ChordQuality.MAJOR,       # VI
        ChordQuality.MAJOR,       # VII
    ],
}

QUALITY_SUFFIX = {
    ChordQuality.MAJOR: "",
    ChordQuality.MINOR: "m",
    ChordQuality.DIMINISHED: "dim",
}

# Candidate tonics in circle-of-fifths order
MAJOR_TONICS = ["C", "G", "D", "A", "E", "B", "F#", "Db", "Ab", "Eb", "Bb", "F"]
MINOR_TONICS = ["A", "E", "B", "F#", "C#", "G#", "D#", "Bb", "F", "C", "G", "D"]

# Key signatures written with flats
FLAT_KEYS = {
    Mode.MAJOR: {"F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb"},
    Mode.MINOR: {"D", "G", "C", "F", "Bb", "Eb", "Ab"},
}

ROMAN_NUMERALS = ["I", "II", "III", "IV", "V", "VI", "VII"]

# Scoring rules
IN_KEY_SCORE = 2
QUALITY_MATCH_SCORE = 3
TONIC_SCORE = 5
FIRST_CHORD_TONIC_SCORE = 3
TONIC_QUALITY_SCORE = 2
DOMINANT_SCORE = 3
SUBDOMINANT_SCORE = 2

_KEY_NAME_RE = re.compile(r"^([A-G][#♯b♭]?)\s*(m|min|minor|maj|major|M)?$")


@dataclass
class DiatonicChord:
    """A chord built on one degree of a key's scale."""
    degree: int  # 0-6
    root: int
    quality: ChordQuality
    symbol: str
    numeral: str

    @property
    def function(self) -> HarmonicFunction:
        return DEGREE_FUNCTIONS[self.degree]


@dataclass
class KeyCandidate:
    """A candidate key with its score."""
    tonic: str
    mode: Mode
    score: float

    @property
    def name(self) -> str:
        return f"{self.tonic} {self.mode.value}"


@dataclass
class Key:
    """Container for a key and its neighbourhood."""

    tonic: str  # Key root (e.g., "C", "F#", "Bb")
    mode: Mode
    scale: List[str]  # 7 note names
    diatonic_chords: List[DiatonicChord]
    relative_key: str
    parallel_key: str
    dominant_key: str
    subdominant_key: str
    score: float = 0.0
    alternatives: List[KeyCandidate] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"{self.tonic} {self.mode.value}"

    @property
    def tonic_pc(self) -> int:
        return split_note_name(self.tonic)[0]

    @property
    def scale_pitch_classes(self) -> List[int]:
        return [chord.root for chord in self.diatonic_chords]

    @property
    def chord_symbols(self) -> List[str]:
        return [chord.symbol for chord in self.diatonic_chords]

    @property
    def prefers_flats(self) -> bool:
        return self.tonic in FLAT_KEYS[self.mode] or "b" in self.tonic

    def degree_of(self, chord: ParsedChord) -> Optional[int]:
        """Scale degree index (0-6) of the chord's root, None if chromatic."""
        try:
            return self.scale_pitch_classes.index(chord.root)
        except ValueError:
            return None

    def function_of(self, chord: ParsedChord) -> Optional[HarmonicFunction]:
        """Harmonic function of a chord in this key."""
        degree = self.degree_of(chord)
        return DEGREE_FUNCTIONS[degree] if degree is not None else None

    def roman_numeral(self, chord: ParsedChord) -> str:
        """
        Get roman numeral representation in this key.

        Returns:
            Roman numeral (e.g., "IV", "ii", "V7"), or "(symbol)" for
            non-diatonic roots
        """
        degree = self.degree_of(chord)
        if degree is None:
            return f"({chord.symbol})"

        numeral = ROMAN_NUMERALS[degree]

        # Lowercase for minor chords
        if chord.quality in (ChordQuality.MINOR, ChordQuality.DIMINISHED):
            numeral = numeral.lower()

        if "7" in chord.suffix:
            numeral += "7"
        elif chord.quality is ChordQuality.DIMINISHED:
            numeral += "°"
        elif chord.quality is ChordQuality.AUGMENTED:
            numeral += "+"

        return numeral


def scale_notes(tonic: str, mode: Mode) -> List[int]:
    """Pitch classes of the scale on a tonic."""
    root = split_note_name(tonic)[0]
    return [(root + interval) % 12 for interval in SCALE_INTERVALS[mode]]


def _key_label(tonic_pc: int, mode: Mode) -> str:
    """Name a key conventionally ("Bb major", "F# minor")."""
    tonics = MAJOR_TONICS if mode is Mode.MAJOR else MINOR_TONICS
    for tonic in tonics:
        if split_note_name(tonic)[0] == tonic_pc:
            return f"{tonic} {mode.value}"
    return f"{PITCH_NAMES[tonic_pc]} {mode.value}"


def build_key(tonic: str, mode: Mode, score: float = 0.0) -> Key:
    """Build a Key with scale, diatonic chords and related keys."""
    tonic_pc = split_note_name(tonic)[0]
    flats = tonic in FLAT_KEYS[mode] or "b" in tonic
    pitch_classes = scale_notes(tonic, mode)
    qualities = DIATONIC_QUALITIES[mode]

    chords = []
    for degree, (pc, quality) in enumerate(zip(pitch_classes, qualities)):
        numeral = ROMAN_NUMERALS[degree]
        if quality is not ChordQuality.MAJOR:
            numeral = numeral.lower()
        if quality is ChordQuality.DIMINISHED:
            numeral += "°"
        chords.append(DiatonicChord(
            degree=degree,
            root=pc,
            quality=quality,
            symbol=spell(pc, flats) + QUALITY_SUFFIX[quality],
            numeral=numeral,
        ))

    if mode is Mode.MAJOR:
        relative = _key_label((tonic_pc - 3) % 12, Mode.MINOR)
        parallel = _key_label(tonic_pc, Mode.MINOR)
    else:
        relative = _key_label((tonic_pc + 3) % 12, Mode.MAJOR)
        parallel = _key_label(tonic_pc, Mode.MAJOR)

    return Key(
        tonic=tonic,
        mode=mode,
        scale=[spell(pc, flats) for pc in pitch_classes],
        diatonic_chords=chords,
        relative_key=relative,
        parallel_key=parallel,
        dominant_key=_key_label((tonic_pc + 7) % 12, mode),
        subdominant_key=_key_label((tonic_pc + 5) % 12, mode),
        score=score,
    )


def get_key(name: str) -> Key:
    """
    Build a Key from a name.

    Args:
        name: "C", "Am", "C major", "F# minor", "Bbm"

    Raises:
        ValueError: If the name is not a key
    """
    parsed = parse_key_name(name)
    if parsed is None:
        raise ValueError(f"Not a key name: {name!r}")
    return build_key(*parsed)


def parse_key_name(name: str) -> Optional[Tuple[str, Mode]]:
    """Split a key name into (tonic, mode), None if unreadable."""
    if not isinstance(name, str):
        return None
    match = _KEY_NAME_RE.match(name.strip())
    if not match:
        return None
    tonic, mode = match.groups()
    tonic = tonic.replace("♯", "#").replace("♭", "b")
    if mode in ("m", "min", "minor"):
        return tonic, Mode.MINOR
    return tonic, Mode.MAJOR


def _as_key(key) -> Key:
    return key if isinstance(key, Key) else get_key(key)


def harmonic_function(chord, key) -> Optional[HarmonicFunction]:
    """
    Harmonic function of a chord in a key.

    Args:
        chord: Chord symbol or ParsedChord
        key: Key or key name

    Returns:
        HarmonicFunction of the chord's root, or None when the chord does
        not parse or its root is outside the scale
    """
    parsed = chord if isinstance(chord, ParsedChord) else parse_chord(chord)
    if parsed is None:
        return None
    return _as_key(key).function_of(parsed)


def roman_numeral(chord, key) -> Optional[str]:
    """Roman numeral of a chord in a key, None if the chord does not parse."""
    parsed = chord if isinstance(chord, ParsedChord) else parse_chord(chord)
    if parsed is None:
        return None
    return _as_key(key).roman_numeral(parsed)


def circle_of_fifths_position(note) -> Optional[int]:
    """Steps clockwise from C on the circle of fifths (C=0, G=1, F=11)."""
    pc = to_pitch_class(note)
    if pc is None:
        return None
    return (pc * 7) % 12


class KeyDetector:
    """Detect the key of a chord progression.

    Features:
    - Additive rule-based scoring over all 24 major/minor keys
    - Deterministic tie-breaking by enumeration order
    - Related keys (relative, parallel, dominant, subdominant)
    - Runner-up candidates for ambiguous progressions
    """

    def __init__(self, num_alternatives: int = 3):
        """
        Initialize KeyDetector.

        Args:
            num_alternatives: Runner-up keys reported with the result
        """
        self.num_alternatives = num_alternatives
        self._candidates = [build_key(t, Mode.MAJOR) for t in MAJOR_TONICS] + [
            build_key(t, Mode.MINOR) for t in MINOR_TONICS
        ]

    def detect_key(self, chords: Sequence[str]) -> Optional[Key]:
        """
        Detect the most likely key of a chord sequence.

        Args:
            chords: Chord symbols in playing order

        Returns:
            Best Key (with alternatives), or None for an empty sequence
        """
        if not chords:
            return None

        ranked = self.rank_keys(chords)
        best = ranked[0]
        key = build_key(best.tonic, best.mode, score=best.score)
        key.alternatives = ranked[1:1 + self.num_alternatives]
        return key

    def rank_keys(self, chords: Sequence[str]) -> List[KeyCandidate]:
        """
        Score every key, best first.

        The sort is stable, so equal scores keep enumeration order and the
        first entry is the first-enumerated key with the highest score.
        """
        parsed = [parse_chord(symbol) for symbol in chords]
        candidates = [
            KeyCandidate(key.tonic, key.mode, self.score_key(key, parsed))
            for key in self._candidates
        ]
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    def score_key(self, key: Key, chords: Sequence[Optional[ParsedChord]]) -> float:
        """Accumulate the rule scores of a chord sequence in one key."""
        roots = key.scale_pitch_classes
        tonic_quality = key.diatonic_chords[0].quality
        score = 0

        for index, chord in enumerate(chords):
            if chord is None:
                continue
            quality = chord.quality.triad

            if chord.root in roots:
                score += IN_KEY_SCORE
                expected = key.diatonic_chords[roots.index(chord.root)].quality
                if quality is expected:
                    score += QUALITY_MATCH_SCORE

            if chord.root == roots[0]:
                score += TONIC_SCORE
                if index == 0:
                    score += FIRST_CHORD_TONIC_SCORE
                if quality is tonic_quality:
                    score += TONIC_QUALITY_SCORE

            if chord.root == roots[4] and quality is ChordQuality.MAJOR:
                score += DOMINANT_SCORE

            if chord.root == roots[3]:
                score += SUBDOMINANT_SCORE

        return score

    def key_scores(self, chords: Sequence[str]) -> Dict[str, float]:
        """Score per key name, in enumeration order."""
        parsed = [parse_chord(symbol) for symbol in chords]
        return {key.name: self.score_key(key, parsed) for key in self._candidates}
