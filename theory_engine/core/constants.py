"""Global constants for the music-theory engine."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]
FLAT_PITCH_NAMES = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

# Natural note letters to pitch class
NATURAL_PITCH_CLASSES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# Accidentals accepted after a note letter
ACCIDENTALS = {"#": 1, "♯": 1, "b": -1, "♭": -1}

# Audio processing defaults
DEFAULT_SR = 44100
DEFAULT_FFT_SIZE = 8192

# Real-time chord detection
PEAK_COUNT = 6
MIN_NOTES = 3
MIN_FREQUENCY = 20.0
MAX_FREQUENCY = 4000.0
HISTORY_LENGTH = 10
CONFIDENCE_DIVISOR = 6
DEFAULT_FPS = 60.0

# Bass defaults
BASS_OCTAVE = 2
