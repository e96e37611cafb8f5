"""Chord parsing and chord-name matching.

Implements the two directions between chord names and notes:
- Parsing chord symbols ("Cmaj7", "F#m", "Bb7/D") into structured chords
- Template matching of a note set to the best-fitting chord name
- Tolerance for missing or extra notes when matching
- Transposition and tension helpers used by the generators
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from ..core import PITCH_NAMES, spell, split_note_name, to_pitch_class
from ..core.constants import MIN_NOTES

# Root letter, optional accidental, then everything else
_SYMBOL_RE = re.compile(r"^([A-G])([#♯b♭]?)(.*)$")


class ChordQuality(Enum):
    """Broad chord quality classes."""
    MAJOR = "major"
    MINOR = "minor"
    DIMINISHED = "diminished"
    AUGMENTED = "augmented"
    DOMINANT = "dominant"
    OTHER = "other"

    @property
    def triad(self) -> "ChordQuality":
        """The triad family (a dominant seventh is built on a major triad)."""
        if self is ChordQuality.DOMINANT:
            return ChordQuality.MAJOR
        return self


# Canonical suffix -> (intervals from root, quality)
CHORD_FORMULAS: Dict[str, Tuple[Tuple[int, ...], ChordQuality]] = {
    "": ((0, 4, 7), ChordQuality.MAJOR),
    "m": ((0, 3, 7), ChordQuality.MINOR),
    "dim": ((0, 3, 6), ChordQuality.DIMINISHED),
    "aug": ((0, 4, 8), ChordQuality.AUGMENTED),
    "sus4": ((0, 5, 7), ChordQuality.OTHER),
    "sus2": ((0, 2, 7), ChordQuality.OTHER),
    "5": ((0, 7), ChordQuality.OTHER),
    "7": ((0, 4, 7, 10), ChordQuality.DOMINANT),
    "maj7": ((0, 4, 7, 11), ChordQuality.MAJOR),
    "m7": ((0, 3, 7, 10), ChordQuality.MINOR),
    "dim7": ((0, 3, 6, 9), ChordQuality.DIMINISHED),
    "m7b5": ((0, 3, 6, 10), ChordQuality.DIMINISHED),
    "aug7": ((0, 4, 8, 10), ChordQuality.AUGMENTED),
    "mMaj7": ((0, 3, 7, 11), ChordQuality.MINOR),
    "7sus4": ((0, 5, 7, 10), ChordQuality.DOMINANT),
    "6": ((0, 4, 7, 9), ChordQuality.MAJOR),
    "m6": ((0, 3, 7, 9), ChordQuality.MINOR),
    "add9": ((0, 4, 7, 14), ChordQuality.MAJOR),
    "madd9": ((0, 3, 7, 14), ChordQuality.MINOR),
    "9": ((0, 4, 7, 10, 14), ChordQuality.DOMINANT),
    "maj9": ((0, 4, 7, 11, 14), ChordQuality.MAJOR),
    "m9": ((0, 3, 7, 10, 14), ChordQuality.MINOR),
    "11": ((0, 4, 7, 10, 14, 17), ChordQuality.DOMINANT),
    "13": ((0, 4, 7, 10, 14, 21), ChordQuality.DOMINANT),
}

# Alternative spellings -> canonical suffix
SUFFIX_ALIASES = {
    "M": "",
    "maj": "",
    "major": "",
    "min": "m",
    "minor": "m",
    "-": "m",
    "°": "dim",
    "o": "dim",
    "+": "aug",
    "sus": "sus4",
    "M7": "maj7",
    "Maj7": "maj7",
    "Δ": "maj7",
    "Δ7": "maj7",
    "min7": "m7",
    "-7": "m7",
    "°7": "dim7",
    "o7": "dim7",
    "ø": "m7b5",
    "ø7": "m7b5",
    "m7-5": "m7b5",
    "+7": "aug7",
    "7#5": "aug7",
    "dom7": "7",
    "mmaj7": "mMaj7",
    "mM7": "mMaj7",
    "min6": "m6",
    "M9": "maj9",
    "min9": "m9",
}

# Base chord for each quality when the suffix is not in the table
FALLBACK_INTERVALS = {
    ChordQuality.MAJOR: (0, 4, 7),
    ChordQuality.MINOR: (0, 3, 7),
    ChordQuality.DIMINISHED: (0, 3, 6),
    ChordQuality.AUGMENTED: (0, 4, 8),
    ChordQuality.DOMINANT: (0, 4, 7, 10),
    ChordQuality.OTHER: (0, 4, 7),
}

# Base tension per quality (0 = at rest, 1 = maximum tension)
QUALITY_TENSION = {
    ChordQuality.MAJOR: 0.2,
    ChordQuality.MINOR: 0.4,
    ChordQuality.DOMINANT: 0.7,
    ChordQuality.DIMINISHED: 0.9,
    ChordQuality.AUGMENTED: 0.85,
    ChordQuality.OTHER: 0.5,
}


def classify_suffix(suffix: str) -> ChordQuality:
    """
    Classify an unrecognized suffix by substring rules.

    "dim" -> diminished, "aug" -> augmented, a leading "M" or "maj"
    -> major, a leading "m" or "m"/"minor" without "maj" -> minor,
    other "maj" -> major, "7" -> dominant, anything else -> other.
    """
    lowered = suffix.lower()
    if "dim" in lowered:
        return ChordQuality.DIMINISHED
    if "aug" in lowered:
        return ChordQuality.AUGMENTED
    if suffix.startswith("M") or lowered.startswith("maj"):
        return ChordQuality.MAJOR
    if suffix.startswith("m") or ("m" in suffix and "maj" not in lowered):
        return ChordQuality.MINOR
    if "maj" in lowered:
        return ChordQuality.MAJOR
    if "7" in lowered:
        return ChordQuality.DOMINANT
    return ChordQuality.OTHER


@dataclass(frozen=True)
class ParsedChord:
    """A chord symbol broken into root, quality and pitch classes."""

    root: int  # Pitch class 0-11
    quality: ChordQuality
    intervals: Tuple[int, ...]  # Semitones from root
    notes: Tuple[int, ...]  # Pitch classes in chord order
    symbol: str  # Canonical name, e.g. "Cmaj7", "Bbm7/F"
    root_name: str = ""
    suffix: str = ""
    bass: Optional[int] = None  # Slash-chord bass pitch class
    known_suffix: bool = True

    @property
    def prefers_flats(self) -> bool:
        return "b" in self.root_name

    @property
    def note_names(self) -> List[str]:
        """Chord tones spelled like the root (flats stay flats)."""
        return [spell(pc, self.prefers_flats) for pc in self.notes]

    @property
    def is_dominant_seventh(self) -> bool:
        return self.quality is ChordQuality.DOMINANT and 10 in self.intervals

    @property
    def tension(self) -> float:
        return chord_tension(self)


def _canonical_suffix(suffix: str) -> Optional[str]:
    if suffix in CHORD_FORMULAS:
        return suffix
    return SUFFIX_ALIASES.get(suffix)


def parse_chord(symbol: str) -> Optional[ParsedChord]:
    """
    Parse a chord symbol.

    Args:
        symbol: Chord name such as "C", "Am", "G7", "Cmaj7", "F#m7b5", "C/E"

    Returns:
        ParsedChord, or None when the root is not a note letter A-G
    """
    if not isinstance(symbol, str):
        return None
    text = symbol.strip().replace(" ", "")
    match = _SYMBOL_RE.match(text)
    if not match:
        return None

    letter, accidental, rest = match.groups()
    root_name = letter + {"♯": "#", "♭": "b"}.get(accidental, accidental)
    root = to_pitch_class(root_name)

    # Slash chord: "C/E", "Am7/G"
    bass = None
    bass_name = ""
    if "/" in rest:
        head, tail = rest.rsplit("/", 1)
        parsed_bass = split_note_name(tail)
        if parsed_bass is not None and parsed_bass[1] is None:
            rest = head
            bass = parsed_bass[0]
            bass_name = tail.replace("♯", "#").replace("♭", "b")

    canonical = _canonical_suffix(rest)
    if canonical is not None:
        intervals, quality = CHORD_FORMULAS[canonical]
        suffix = canonical
        known = True
    else:
        quality = classify_suffix(rest)
        intervals = FALLBACK_INTERVALS[quality]
        suffix = rest
        known = False

    notes = tuple((root + i) % 12 for i in intervals)
    name = f"{root_name}{suffix}"
    if bass is not None and bass != root:
        name += f"/{bass_name}"
    else:
        bass = None

    return ParsedChord(
        root=root,
        quality=quality,
        intervals=intervals,
        notes=notes,
        symbol=name,
        root_name=root_name,
        suffix=suffix,
        bass=bass,
        known_suffix=known,
    )


def chord_tension(chord: ParsedChord) -> float:
    """Tension level 0-1 from quality plus extensions."""
    tension = QUALITY_TENSION[chord.quality]
    if "9" in chord.suffix:
        tension += 0.1
    if "11" in chord.suffix:
        tension += 0.15
    if "13" in chord.suffix:
        tension += 0.1
    return min(tension, 1.0)


def transpose_chord(symbol: str, semitones: int) -> Optional[str]:
    """Transpose a chord symbol, keeping its suffix and accidental style."""
    chord = parse_chord(symbol)
    if chord is None:
        return None
    root = spell(chord.root + semitones, chord.prefers_flats)
    name = f"{root}{chord.suffix}"
    if chord.bass is not None:
        name += "/" + spell(chord.bass + semitones, chord.prefers_flats)
    return name


def transpose_progression(symbols: Sequence[str], semitones: int) -> List[str]:
    """Transpose every chord, dropping the ones that do not parse."""
    transposed = (transpose_chord(s, semitones) for s in symbols)
    return [s for s in transposed if s is not None]


@dataclass
class ChordCandidate:
    """A candidate chord with its match score."""
    root: int
    suffix: str
    score: float
    matched_intervals: List[int] = field(default_factory=list)
    missing_intervals: List[int] = field(default_factory=list)
    extra_intervals: List[int] = field(default_factory=list)

    @property
    def symbol(self) -> str:
        return f"{PITCH_NAMES[self.root]}{self.suffix}"


@dataclass
class MatcherConfig:
    """Configuration for chord-name matching.

    Attributes:
        min_notes: Minimum distinct pitch classes before matching (default: 3)
        min_score: Minimum template score to report a chord (default: 0.5)
    """

    min_notes: int = MIN_NOTES
    min_score: float = 0.5


class ChordMatcher:
    """Parse chord names and match note sets to chord names.

    Matching scores every (root, template) pair by weighted interval
    coverage. Roots are tried in the order their notes first appear
    (the lowest/first note first), templates in dictionary order, and
    a later candidate only wins with a strictly higher score.
    """

    # Chord templates (canonical suffix -> intervals from root)
    # Ordered by priority (more common chords first)
    CHORD_TEMPLATES = {
        # Triads
        "": [0, 4, 7],
        "m": [0, 3, 7],
        "dim": [0, 3, 6],
        "aug": [0, 4, 8],
        "sus4": [0, 5, 7],
        "sus2": [0, 2, 7],
        # Seventh chords
        "7": [0, 4, 7, 10],
        "maj7": [0, 4, 7, 11],
        "m7": [0, 3, 7, 10],
        "dim7": [0, 3, 6, 9],
        "m7b5": [0, 3, 6, 10],
        "aug7": [0, 4, 8, 10],
        # Extended
        "add9": [0, 4, 7, 14],  # 14 = 2 + 12 (9th)
        "6": [0, 4, 7, 9],
        "m6": [0, 3, 7, 9],
    }

    # Root and fifth are most important
    INTERVAL_WEIGHTS = {
        0: 2.0,   # Root - essential
        2: 0.8,   # Ninth
        3: 1.5,   # Minor third
        4: 1.5,   # Major third
        5: 1.0,   # Perfect fourth (sus)
        6: 1.0,   # Tritone
        7: 1.8,   # Perfect fifth - very important
        8: 1.0,   # Augmented fifth
        9: 0.8,   # Sixth
        10: 0.9,  # Minor seventh
        11: 0.9,  # Major seventh
    }

    def __init__(self, config: Optional[MatcherConfig] = None):
        self.config = config or MatcherConfig()

    def detect_chord_from_notes(
        self, notes: Iterable[Union[str, int]]
    ) -> Optional[str]:
        """
        Name the chord formed by a set of notes.

        Args:
            notes: Note names ("E4", "G#", "Bb") or MIDI numbers

        Returns:
            Chord symbol such as "Am" or "G7", or None when fewer than
            min_notes distinct pitch classes are present or nothing fits
        """
        best = self.best_candidate(notes)
        return best.symbol if best else None

    def best_candidate(
        self, notes: Iterable[Union[str, int]]
    ) -> Optional[ChordCandidate]:
        """Best-scoring candidate, first enumerated on ties."""
        ordered = self.notes_to_pitch_classes(notes)
        if len(ordered) < self.config.min_notes:
            return None

        best = None
        for candidate in self._get_chord_candidates(ordered):
            if best is None or candidate.score > best.score:
                best = candidate

        if best is None or best.score < self.config.min_score:
            return None
        return best

    def rank_candidates(
        self, notes: Iterable[Union[str, int]]
    ) -> List[ChordCandidate]:
        """All candidates with a positive score, best first."""
        ordered = self.notes_to_pitch_classes(notes)
        if len(ordered) < self.config.min_notes:
            return []
        candidates = self._get_chord_candidates(ordered)
        return sorted(candidates, key=lambda c: c.score, reverse=True)

    def notes_to_pitch_classes(self, notes: Iterable[Union[str, int]]) -> List[int]:
        """Distinct pitch classes in order of first appearance."""
        ordered = []
        for note in notes:
            pc = to_pitch_class(note)
            if pc is not None and pc not in ordered:
                ordered.append(pc)
        return ordered

    def _root_order(self, ordered: List[int]) -> List[int]:
        return ordered + [pc for pc in range(12) if pc not in ordered]

    def _get_chord_candidates(self, ordered: List[int]) -> List[ChordCandidate]:
        """
        Get all chord candidates for a set of pitch classes.
        """
        pitch_classes = set(ordered)
        candidates = []

        for root_pc in self._root_order(ordered):
            for suffix, template in self.CHORD_TEMPLATES.items():
                score, matched, missing, extra = self._score_chord_match(
                    pitch_classes, root_pc, template
                )
                if score > 0:
                    candidates.append(ChordCandidate(
                        root=root_pc,
                        suffix=suffix,
                        score=score,
                        matched_intervals=matched,
                        missing_intervals=missing,
                        extra_intervals=extra,
                    ))

        return candidates

    def _score_chord_match(
        self,
        pitch_classes: Set[int],
        root_pc: int,
        template: List[int],
    ) -> Tuple[float, List[int], List[int], List[int]]:
        """
        Score how well pitch classes match a chord template.

        Returns:
            (score, matched_intervals, missing_intervals, extra_intervals)
        """
        intervals = {(pc - root_pc) % 12 for pc in pitch_classes}
        template_intervals = set(i % 12 for i in template)

        matched = sorted(intervals & template_intervals)
        missing = sorted(template_intervals - intervals)
        extra = sorted(intervals - template_intervals)

        matched_score = sum(self.INTERVAL_WEIGHTS.get(i, 1.0) for i in matched)
        template_score = sum(self.INTERVAL_WEIGHTS.get(i, 1.0) for i in template_intervals)

        # Penalty for missing essential notes (root, third, fifth)
        missing_penalty = 0.0
        for interval in missing:
            if interval == 0:
                missing_penalty += 0.5
            elif interval in (3, 4):
                missing_penalty += 0.3
            elif interval == 7:
                missing_penalty += 0.2
            else:
                missing_penalty += 0.1

        # Extra notes could be extensions or passing tones
        extra_penalty = len(extra) * 0.05

        if template_score > 0:
            score = (matched_score / template_score) - missing_penalty - extra_penalty
        else:
            score = 0.0

        return max(0.0, score), matched, missing, extra
