"""Key names and message-type vocabulary for device profiles."""

CC_KEY = "controlChangeCommands"
CC_KEY_ALIASES = ("controls", "controlChangeMessages")

REQUIRED_FIELDS = ("receives", "transmits")
MESSAGE_FIELDS = ("receives", "transmits")

# Valid receives/transmits values (MIDI RTC JSON schema)
VALID_MESSAGE_TYPES = frozenset({
    "NOTE_NUMBER",
    "PROGRAM_CHANGE",
    "VELOCITY_NOTE_ON",
    "VELOCITY_NOTE_OFF",
    "CHANNEL_PRESSURE",
    "POLY_PRESSURE",
    "PITCH_BEND",
    "CLOCK",
    "TRANSPORT_START",
    "TRANSPORT_STOP",
    "TRANSPORT_CONTINUE",
})

# CC and SysEx support is described by the command tables, not by tokens
REMOVE_MESSAGE_TYPES = frozenset({"CONTROL_CHANGE", "SYSEX"})

MESSAGE_TYPE_REPLACEMENTS = {
    "NOTE_ON": "NOTE_NUMBER",
    "NOTE_OFF": "NOTE_NUMBER",
    "AFTERTOUCH": "CHANNEL_PRESSURE",
}

BANK_SELECT_VALUES = ("none", "cc0", "cc32", "cc0+cc32")
INDEX_BASES = (0, 1)

CC_MIN, CC_MAX = 0, 127

KEY_ORDER = (
    "$schema", "schemaVersion", "implementationVersion",
    "title", "displayName",
    "device",
    "receives", "transmits",
    "controlChangeCommands", "nrpnCommands",
    "x_programChangeMessages", "x_pc", "x_midiTrs", "x_midiChannel",
)
