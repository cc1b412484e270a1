#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "C8VM"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory layout
MEM_SIZE = 0x1000
MEM_TOP = MEM_SIZE - 1
PROGRAM_START = 0x200
PC_TOP = MEM_SIZE - 2  # Last address from which a full 2-byte opcode can be fetched
MAX_ROM_SIZE = MEM_SIZE - PROGRAM_START
FONT_LOC = 0x000
FONT_GLYPH_SIZE = 5
STACK_SIZE = 24

# Display
VID_WIDTH = 64
VID_HEIGHT = 32

# Timers
TIMER_FREQ = 60.0  # 60Hz, regardless of CPU speed
TIMER_INTERVAL_US = 1000000 // int(TIMER_FREQ)  # In whole microseconds

# Host loop
DEFAULT_STEPS_PER_SECOND = 720
DISPLAY_FREQ = 60.0
DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ

# Hex digits 0-F, 4 pixels wide (top nibble) and 5 rows tall
SYSTEM_FONT = bytes((
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
))

# Default mappings for keys 0-F, later populated into a dictionary.  Note that the keyscans (on a UK QWERTY keyboard)
# and ASCII characters for these are the same code.  Laid out as 1234 / QWER / ASDF / ZXCV.
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# Shift instruction behaviour.  Modern shifts Vx in place, legacy shifts Vy and copies the result into Vx.
COMPAT_MODERN = "modern"
COMPAT_LEGACY = "legacy"
COMPAT_MODES = [COMPAT_MODERN, COMPAT_LEGACY]

# Engine states
STATE_RUNNING = 0
STATE_AWAITING_KEY = 1
STATE_FAULTED = 2

STATE_NAMES = {
    STATE_RUNNING:      "RUNNING",
    STATE_AWAITING_KEY: "AWAITING_KEY",
    STATE_FAULTED:      "FAULTED"
}
