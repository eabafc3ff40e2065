# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Constants - Directive tags, opcode names and defaults shared by the
parser, the loader and the sampler engine.
"""

# Directive tags (matched at line start only)
GROUP_TAG = "<group>"
REGION_TAG = "<region>"

COMMENT_MARKER = "//"

SAMPLE_OPCODE = "sample"

# Opcodes accepted on a <group> line
GROUP_OPCODES = frozenset({
    "key",
    "lokey",
    "hikey",
    "pitch_keycenter",
    "tune",
    "volume",
    "pan",
})

# Opcodes accepted on a <region> line
# The note opcodes override the group defaults for that region only.
REGION_OPCODES = frozenset({
    "key",
    "lokey",
    "hikey",
    "pitch_keycenter",
    "lovel",
    "hivel",
    "loop_mode",
    "loop_start",
    "loop_end",
    "start",
    "end",
    "tune",
    "volume",
    "pan",
    SAMPLE_OPCODE,
})

NO_LOOP = "no_loop"

# Sample file extensions (case-sensitive suffix match)
COMPRESSED_EXTENSIONS = (".wv",)
AUDIO_FILE_EXTENSIONS = (".aif", ".wav")

# MIDI ranges
MIDI_NOTENUMBERS = 128
MIN_MIDI_VALUE = 0
MAX_MIDI_VALUE = 127

DEFAULT_NOTE_NUMBER = 60
DEFAULT_LOW_NOTE = 0
DEFAULT_HIGH_NOTE = 127
DEFAULT_LOW_VELOCITY = 0
DEFAULT_HIGH_VELOCITY = 127

# 12-tone equal temperament reference
A4_NOTE_NUMBER = 69
A4_FREQUENCY = 440.0

DEFAULT_ENCODING = "ascii"
