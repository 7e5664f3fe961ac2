# Shared configuration and constants.

# ---- Generation ----
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 3
ACCIDENTAL_PROBABILITY = 0.3  # chance a note is altered when accidentals are on
PRIMARY_OCTAVE_PROBABILITY = 0.8
SEQUENCE_LENGTHS = (3, 4)  # MULTI mode
PARALLEL_LENGTHS = (2, 3)  # MUSICAL mode, per staff

# ---- Staff geometry (abstract units) ----
LINE_SPACING = 14.0
STAFF_START_X = 20.0
STAFF_TOP = 20.0
GRAND_STAFF_GAP = 160.0  # treble block at STAFF_TOP, bass block 160 below
FIRST_NOTE_OFFSET = 70.0
NOTE_SPACING = 60.0
LEDGER_TOLERANCE = 2.0

# ---- Session timing (seconds) ----
ADVANCE_DELAY = 1.0  # success feedback before the next challenge
DEBOUNCE_WINDOW = 0.1  # duplicate note-on suppression
NPM_SMOOTHING = 0.7  # weight of the previous notes-per-minute estimate
