"""Bass line generation from chord progressions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Union

from ..core import spell
from ..core.constants import BASS_OCTAVE
from .chords import ChordQuality, ParsedChord, parse_chord


class BassStyle(Enum):
    """Bass line patterns."""
    ROOT = "root"
    ALTERNATING = "alternating"
    WALKING = "walking"
    OCTAVE = "octave"
    ARPEGGIO = "arpeggio"


class BassRole(Enum):
    """What a bass note contributes to its chord."""
    ROOT = "root"
    THIRD = "third"
    FIFTH = "fifth"
    CONNECTOR = "connector"


@dataclass(frozen=True)
class BassNote:
    """A single bass note."""
    pitch_class: int
    octave: int
    role: BassRole
    chord_index: int = 0  # Position of the chord it belongs to
    name: str = ""

    @property
    def midi(self) -> int:
        return (self.octave + 1) * 12 + self.pitch_class


@dataclass
class BassLine:
    """Generated bass notes plus the chords that could not be read."""
    notes: List[BassNote] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)  # Indices of unparsable chords
    style: BassStyle = BassStyle.ROOT

    @property
    def names(self) -> List[str]:
        return [note.name for note in self.notes]

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[BassNote]:
        return iter(self.notes)

    def __getitem__(self, index):
        return self.notes[index]


class BassLineGenerator:
    """Generate monophonic bass lines under a selectable style."""

    def __init__(self, octave: int = BASS_OCTAVE):
        """
        Initialize BassLineGenerator.

        Args:
            octave: Octave of chord roots (2 = the low bass register)
        """
        self.octave = octave

    def generate(
        self,
        chords: Sequence[str],
        style: Union[BassStyle, str] = BassStyle.ROOT,
    ) -> BassLine:
        """
        Generate a bass line.

        Args:
            chords: Chord symbols in playing order
            style: "root", "alternating", "walking", "octave" or "arpeggio"

        Returns:
            BassLine; chords that do not parse emit nothing and are listed
            in BassLine.skipped

        Raises:
            ValueError: If the style is unknown
        """
        style = BassStyle(style)
        line = BassLine(style=style)
        parsed = [parse_chord(symbol) for symbol in chords]

        for index, chord in enumerate(parsed):
            if chord is None:
                line.skipped.append(index)
                continue

            root = self._root_midi(chord)
            if style is BassStyle.ROOT:
                line.notes.append(self._note(root, BassRole.ROOT, index, chord))
            elif style is BassStyle.ALTERNATING:
                line.notes.append(self._note(root, BassRole.ROOT, index, chord))
                line.notes.append(self._note(root + 7, BassRole.FIFTH, index, chord))
            elif style is BassStyle.OCTAVE:
                line.notes.append(self._note(root, BassRole.ROOT, index, chord))
                line.notes.append(self._note(root + 12, BassRole.ROOT, index, chord))
            else:
                line.notes.extend(self._triad(root, index, chord))
                if style is BassStyle.WALKING:
                    following = parsed[index + 1] if index + 1 < len(parsed) else None
                    if following is not None:
                        line.notes.append(self._note(
                            self._root_midi(following) - 2, BassRole.CONNECTOR, index, following
                        ))

        return line

    def generate_walking_bass(self, chords: Sequence[str]) -> BassLine:
        """Walking bass: root, third, fifth and a connector into the next chord."""
        return self.generate(chords, BassStyle.WALKING)

    def _root_midi(self, chord: ParsedChord) -> int:
        return (self.octave + 1) * 12 + chord.root

    def _triad(self, root: int, index: int, chord: ParsedChord) -> List[BassNote]:
        third = 3 if chord.quality in (ChordQuality.MINOR, ChordQuality.DIMINISHED) else 4
        return [
            self._note(root, BassRole.ROOT, index, chord),
            self._note(root + third, BassRole.THIRD, index, chord),
            self._note(root + 7, BassRole.FIFTH, index, chord),
        ]

    def _note(
        self,
        midi: int,
        role: BassRole,
        index: int,
        chord: ParsedChord,
    ) -> BassNote:
        pitch_class = midi % 12
        octave = midi // 12 - 1
        flats = chord.prefers_flats
        return BassNote(
            pitch_class=pitch_class,
            octave=octave,
            role=role,
            chord_index=index,
            name=f"{spell(pitch_class, flats)}{octave}",
        )
