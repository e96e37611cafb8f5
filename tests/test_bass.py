"""Tests for bass line generation."""

import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from theory_engine.inference import BassLineGenerator, BassRole, BassStyle


class TestBassLineGenerator:
    """Tests for BassLineGenerator."""

    def test_root_style(self):
        line = BassLineGenerator().generate(["C", "Am", "F", "G"])

        assert line.style is BassStyle.ROOT
        assert line.names == ["C2", "A2", "F2", "G2"]
        assert all(note.role is BassRole.ROOT for note in line)

    def test_alternating_style(self):
        line = BassLineGenerator().generate(["C", "F"], "alternating")
        assert line.names == ["C2", "G2", "F2", "C3"]

    def test_walking_bass_length(self):
        """Two chords: 3 + 1 connector + 3."""
        line = BassLineGenerator().generate_walking_bass(["C", "G"])

        assert len(line) == 7
        assert line.names == ["C2", "E2", "G2", "F2", "G2", "B2", "D3"]
        assert [n.role for n in line][:4] == [
            BassRole.ROOT, BassRole.THIRD, BassRole.FIFTH, BassRole.CONNECTOR
        ]

    def test_walking_minor_third(self):
        line = BassLineGenerator().generate(["Am"], BassStyle.WALKING)
        assert line.names == ["A2", "C3", "E3"]

    def test_walking_diminished_third(self):
        line = BassLineGenerator().generate(["Bdim"], "walking")
        assert line.names[1] == "D3"

    def test_connector_can_drop_an_octave(self):
        line = BassLineGenerator().generate(["G", "C"], "walking")
        assert line[3].role is BassRole.CONNECTOR
        assert line[3].name == "A#1"

    def test_no_connector_after_last_chord(self):
        line = BassLineGenerator().generate(["C", "G", "Am"], "walking")
        assert len(line) == 3 * 3 + 2
        assert line[-1].role is BassRole.FIFTH

    def test_octave_style(self):
        line = BassLineGenerator().generate(["D"], "octave")
        assert line.names == ["D2", "D3"]

    def test_arpeggio_style(self):
        line = BassLineGenerator().generate(["Dm", "G"], "arpeggio")
        assert line.names == ["D2", "F2", "A2", "G2", "B2", "D3"]

    def test_flat_roots(self):
        line = BassLineGenerator().generate(["Bb"], "arpeggio")
        assert line.names == ["Bb2", "D3", "F3"]

    def test_unparsable_chords_skipped(self):
        line = BassLineGenerator().generate(["C", "H", "G"], "walking")

        assert line.skipped == [1]
        assert line.names == ["C2", "E2", "G2", "G2", "B2", "D3"]
        assert [n.chord_index for n in line] == [0, 0, 0, 2, 2, 2]

    def test_empty_progression(self):
        line = BassLineGenerator().generate([])
        assert len(line) == 0
        assert line.skipped == []

    def test_unknown_style(self):
        with pytest.raises(ValueError):
            BassLineGenerator().generate(["C"], "funky")

    def test_custom_octave(self):
        line = BassLineGenerator(octave=3).generate(["E"])
        assert line.names == ["E3"]
        assert line[0].midi == 52

    def test_midi_numbers(self):
        line = BassLineGenerator().generate(["C"])
        assert line[0].midi == 36
