#!/usr/bin/env python3

"""
Machine

Owns one complete emulated system: RAM, stack, framebuffer, timers, keypad
latch and CPU.  Nothing is shared between machines, so several can run side by
side (handy for testing).

Create one with Machine.initialize(rom, compat_mode).  After that, the host
only needs:
    * step()            - Run one instruction, returns the engine state
    * tick(elapsed)     - Advance the timers by 'elapsed' seconds of wall time
    * set_key(key, on)  - Report a key going down or up
    * read_screen()     - Snapshot of the 64x32 pixels, clears the damage flag
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .audio.a_null import Audio
from .constants import COMPAT_MODERN, FONT_LOC, MEM_SIZE, PROGRAM_START, STACK_SIZE, SYSTEM_FONT
from .cpu import CPU
from .debugger import Debugger
from .framebuffer import Framebuffer
from .hostio import check_rom_size
from .keypad import Keypad
from .ram import RAM
from .stack import Stack
from .timers import Timers


class Machine:
    def __init__(self, compat_mode=COMPAT_MODERN, audio=None, debugger=None, rng=None):
        self.ram = RAM()
        self.ram.resize(MEM_SIZE)
        self.stack = Stack(STACK_SIZE)
        self.framebuffer = Framebuffer()
        self.timers = Timers()
        self.keypad = Keypad(memoryview(bytearray(16)))
        self.audio = Audio() if audio is None else audio
        self.debugger = Debugger() if debugger is None else debugger
        self.cpu = CPU(
            self.ram, self.stack, self.framebuffer, self.keypad, self.timers, self.audio, self.debugger,
            compat_mode=compat_mode, rng=rng
        )

    @classmethod
    def initialize(cls, rom, compat_mode=COMPAT_MODERN, **kwargs):
        # Oversized ROMs are rejected here, before anything has run
        check_rom_size(rom)
        machine = cls(compat_mode, **kwargs)
        machine._load(rom)
        return machine

    def _load(self, rom):
        # Only ever called on a freshly built machine.  Re-initialising is the only way to reset.
        self.ram.write_block(FONT_LOC, SYSTEM_FONT)
        self.ram.write_block(PROGRAM_START, rom)
        self.cpu.reset(PROGRAM_START)

    def step(self):
        return self.cpu.step()

    def tick(self, elapsed):
        self.cpu.tick(elapsed)

    def set_key(self, key, pressed):
        self.keypad.set_key(key, pressed)

    def get_state(self):
        return self.cpu.state

    def get_fault_reason(self):
        return self.cpu.fault_reason

    def is_screen_damaged(self):
        return self.framebuffer.is_damaged()

    def read_screen(self):
        return self.framebuffer.read()
