"""Tests for MIDI export of bass lines."""

import pretty_midi
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from theory_engine.inference import BassLineGenerator
from theory_engine.output import MIDIExporter


class TestMIDIExporter:
    """Tests for MIDIExporter."""

    def test_one_beat_per_note(self):
        line = BassLineGenerator().generate(["C", "G"], "alternating")
        notes = MIDIExporter(tempo=120).bass_line_to_notes(line)

        assert [n.pitch for n in notes] == [36, 43, 43, 50]
        assert [n.onset for n in notes] == [0.0, 0.5, 1.0, 1.5]
        assert all(n.duration == pytest.approx(0.5) for n in notes)

    def test_to_pretty_midi(self):
        line = BassLineGenerator().generate(["C", "Am"])
        midi = MIDIExporter().to_pretty_midi(line)

        assert len(midi.instruments) == 1
        assert midi.instruments[0].program == 33
        assert [n.pitch for n in midi.instruments[0].notes] == [36, 45]

    def test_export_roundtrip(self, tmp_path):
        line = BassLineGenerator().generate_walking_bass(["C", "G"])
        output = tmp_path / "out" / "bass.mid"

        MIDIExporter(tempo=90).export(line, str(output))

        assert output.exists()
        midi = pretty_midi.PrettyMIDI(str(output))
        notes = midi.instruments[0].notes
        assert [n.pitch for n in notes] == [n.midi for n in line]
        assert notes[1].start == pytest.approx(60.0 / 90, abs=1e-3)

    def test_invalid_tempo(self):
        with pytest.raises(ValueError):
            MIDIExporter(tempo=0)
