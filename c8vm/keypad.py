#!/usr/bin/env python3

"""
Hex Keypad Latch

Holds the up/down state of the 16 keys (0-F), as fed in by an input plugin,
and implements the 'wait for a keypress' protocol used by the Fx0A
instruction.

When the CPU starts a wait, it records which register should receive the key.
Only a fresh press (up to down) satisfies the wait, so a key that was already
held when the wait began must be released and pressed again.  The key number
is written straight into the target register, and the wait is marked as
fulfilled so the CPU can finish the instruction on its next step.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

NUM_KEYS = 0x10


class Keypad:
    def __init__(self, registers):
        self.registers = registers
        self.key_down = [False] * NUM_KEYS
        self.waiting = False
        self.target_register = 0
        self.fulfilled = False

    def set_key(self, key, pressed):
        if key < 0 or key >= NUM_KEYS:
            return

        was_down = self.key_down[key]
        self.key_down[key] = pressed

        if self.waiting and pressed and not was_down:
            self.registers[self.target_register] = key
            self.waiting = False
            self.fulfilled = True

    def is_key_down(self, key):
        # Keys outside 0-F can never be held
        if key < 0 or key >= NUM_KEYS:
            return False

        return self.key_down[key]

    def begin_wait(self, register):
        self.waiting = True
        self.fulfilled = False
        self.target_register = register

    def is_waiting(self):
        return self.waiting

    def take_fulfilled(self):
        # Returns True once per satisfied wait
        fulfilled = self.fulfilled
        self.fulfilled = False
        return fulfilled
