"""Progression advice - Rank likely next chords.

Suggestions come from functional harmony:
- A transition table from each scale degree to its usual successors
- Dominant and subdominant neighbours of the current root, always offered
- Tritone substitution for dominant seventh chords

Results are deduplicated by chord name, sorted by probability and capped.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..core import spell
from .chords import ParsedChord, parse_chord
from .key import HarmonicFunction, Key, KeyDetector, get_key, parse_key_name

# Degree function -> [(target degree, weight, reason)]
TRANSITIONS: Dict[HarmonicFunction, List[Tuple[int, float, str]]] = {
    HarmonicFunction.TONIC: [
        (3, 0.8, "I → IV (subdominant motion)"),
        (4, 0.8, "I → V (half cadence)"),
        (5, 0.75, "I → vi (relative minor)"),
    ],
    HarmonicFunction.SUPERTONIC: [
        (3, 0.7, "ii → IV (pre-dominant)"),
        (4, 0.85, "ii → V (ii-V motion)"),
    ],
    HarmonicFunction.MEDIANT: [
        (4, 0.65, "iii → V (mediant to dominant)"),
        (5, 0.75, "iii → vi (descending fifth)"),
    ],
    HarmonicFunction.SUBDOMINANT: [
        (0, 0.85, "IV → I (plagal cadence)"),
        (4, 0.9, "IV → V (authentic cadence approach)"),
    ],
    HarmonicFunction.DOMINANT: [
        (0, 0.95, "V → I (perfect cadence)"),
        (5, 0.8, "V → vi (deceptive cadence)"),
    ],
    HarmonicFunction.SUBMEDIANT: [
        (1, 0.75, "vi → ii (circle progression)"),
        (3, 0.7, "vi → IV (descending third)"),
    ],
    HarmonicFunction.LEADING: [],
}

DOMINANT_STEP = 5
DOMINANT_WEIGHT = 0.7
SUBDOMINANT_STEP = 4
SUBDOMINANT_WEIGHT = 0.6
TRITONE_STEP = 6
TRITONE_WEIGHT = 0.6

MAX_SUGGESTIONS = 5


@dataclass
class ChordSuggestion:
    """A ranked next-chord suggestion."""
    chord: str
    probability: float  # 0-1
    reason: str
    harmonic_function: HarmonicFunction


class ProgressionAdvisor:
    """Suggest next chords from the current chord and key."""

    def __init__(
        self,
        max_suggestions: int = MAX_SUGGESTIONS,
        key_detector: Optional[KeyDetector] = None,
    ):
        """
        Initialize ProgressionAdvisor.

        Args:
            max_suggestions: Upper bound on returned suggestions
            key_detector: Used when no key is given
        """
        self.max_suggestions = max_suggestions
        self.key_detector = key_detector or KeyDetector()

    def suggest_next_chords(
        self,
        current_chord: str,
        key: Union[Key, str, None] = None,
        history: Sequence[str] = (),
    ) -> List[ChordSuggestion]:
        """
        Rank candidate next chords.

        Args:
            current_chord: Chord being played
            key: Key object or name ("C", "Am"); detected from history plus
                 the current chord when missing or unreadable
            history: Chords played before the current one

        Returns:
            At most max_suggestions suggestions, highest probability first
        """
        chord = parse_chord(current_chord)
        if chord is None:
            return []

        resolved = self._resolve_key(key, list(history) + [current_chord])
        flats = chord.prefers_flats or resolved.prefers_flats

        suggestions = self._diatonic_suggestions(chord, resolved)
        suggestions.extend(self._neighbour_suggestions(chord, flats))

        if chord.is_dominant_seventh:
            suggestions.append(ChordSuggestion(
                chord=spell(chord.root + TRITONE_STEP, flats) + "7",
                probability=TRITONE_WEIGHT,
                reason="Tritone substitution",
                harmonic_function=HarmonicFunction.DOMINANT,
            ))

        unique = {}
        for suggestion in suggestions:
            unique.setdefault(suggestion.chord, suggestion)

        ranked = sorted(unique.values(), key=lambda s: s.probability, reverse=True)
        return ranked[:self.max_suggestions]

    def locate_degree(self, chord: ParsedChord, key: Key) -> Optional[int]:
        """Degree of the chord among the key's diatonic chords.

        Exact root and quality first, then root alone.
        """
        for diatonic in key.diatonic_chords:
            if diatonic.root == chord.root and diatonic.quality is chord.quality.triad:
                return diatonic.degree
        for diatonic in key.diatonic_chords:
            if diatonic.root == chord.root:
                return diatonic.degree
        return None

    def _resolve_key(self, key: Union[Key, str, None], chords: List[str]) -> Key:
        if isinstance(key, Key):
            return key
        if isinstance(key, str) and parse_key_name(key) is not None:
            return get_key(key)
        return self.key_detector.detect_key(chords)

    def _diatonic_suggestions(self, chord: ParsedChord, key: Key) -> List[ChordSuggestion]:
        degree = self.locate_degree(chord, key)
        if degree is None:
            return []

        suggestions = []
        source = key.diatonic_chords[degree].function
        for target, weight, reason in TRANSITIONS[source]:
            diatonic = key.diatonic_chords[target]
            suggestions.append(ChordSuggestion(
                chord=diatonic.symbol,
                probability=weight,
                reason=reason,
                harmonic_function=diatonic.function,
            ))
        return suggestions

    def _neighbour_suggestions(self, chord: ParsedChord, flats: bool) -> List[ChordSuggestion]:
        """Dominant and subdominant neighbours keeping the chord's suffix."""
        return [
            ChordSuggestion(
                chord=spell(chord.root + DOMINANT_STEP, flats) + chord.suffix,
                probability=DOMINANT_WEIGHT,
                reason="Dominant relationship",
                harmonic_function=HarmonicFunction.DOMINANT,
            ),
            ChordSuggestion(
                chord=spell(chord.root + SUBDOMINANT_STEP, flats) + chord.suffix,
                probability=SUBDOMINANT_WEIGHT,
                reason="Subdominant relationship",
                harmonic_function=HarmonicFunction.SUBDOMINANT,
            ),
        ]
