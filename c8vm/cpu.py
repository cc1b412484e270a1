#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  Each call
to step() runs exactly one fetch/decode/execute cycle, and the host loop
decides how often that happens.  Timers are ticked separately from wall-clock
time, so they keep the right pace whatever the step rate.

The CPU is always in one of three states:
    * RUNNING      - Executing instructions normally
    * AWAITING_KEY - Stalled on an Fx0A instruction until the keypad latch
                     sees a fresh keypress.  Steps do nothing until then
    * FAULTED      - The program counter, a memory access, or the call stack
                     went out of range.  This is terminal

Unknown opcodes don't fault.  They are reported through the debugger and
skipped, as historical interpreters did.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import (
    APP_INTRO, COMPAT_MODERN, COMPAT_MODES, FONT_LOC, FONT_GLYPH_SIZE, MEM_TOP, PC_TOP, STATE_RUNNING,
    STATE_AWAITING_KEY, STATE_FAULTED
)
from .ram import RAMError
from .stack import StackError

CPU_ENDIAN = "big"  # CHIP-8 is big-endian


class CPUError(Exception):
    pass


class CPU:
    def __init__(self, ram, stack, framebuffer, keypad, timers, audio, debugger, compat_mode=COMPAT_MODERN,
                 rng=None):

        if compat_mode not in COMPAT_MODES:
            raise CPUError("Unknown compatibility mode '{}'".format(compat_mode))

        self.ram = ram
        self.stack = stack
        self.framebuffer = framebuffer
        self.keypad = keypad
        self.timers = timers
        self.audio = audio
        self.debugger = debugger
        self.live_debug = self.debugger.is_live()
        self.compat_mode = compat_mode

        # Modern interpreters shift Vx in place.  The original shifted Vy and copied the result into Vx.
        self.shift_quirks = compat_mode == COMPAT_MODERN

        # Seeded once, from the OS, when the CPU is created
        self.rng = Random() if rng is None else rng

        # Define instruction pointers.
        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        # Initialise registers.  The keypad latch writes keys straight into Vx at the end of a wait, so they share
        # the register file.
        self.v = keypad.registers
        self.i = 0  # Index register

        # Initialise program counter, current opcode and engine state
        self.pc = 0
        self.debug_pc = 0
        self.opcode = 0
        self.state = STATE_RUNNING
        self.fault_reason = None

    def reset(self, start_location):
        self.pc = start_location
        self.debug_pc = start_location
        self.state = STATE_RUNNING
        self.fault_reason = None

    def step(self):
        state = self.state

        if state == STATE_FAULTED:
            return state

        if state == STATE_AWAITING_KEY and self.keypad.is_waiting():
            # Nothing to do until a key is pressed.  The host keeps ticking the timers.
            return state

        try:
            self.check_pc()
            # Keep track of the program counter before altering it in any way for debugging purposes
            self.debug_pc = self.pc
            self.opcode = self.fetch()
            self.inc_pc()  # Program counter updates after fetch (and technically before decode), but before execute
            self.decode_exec()
            self.check_pc()
        except (CPUError, RAMError, StackError) as e:
            self.fault(str(e))

        return self.state

    def tick(self, elapsed):
        if self.timers.tick(elapsed):
            # Sound timer just reached zero.  Stop the audio.
            self.audio.enable_buzzer(False)

    def fault(self, reason):
        self.state = STATE_FAULTED
        self.fault_reason = reason
        self.debugger.report(
            "{}Emulation halted: {}\n{}".format(APP_INTRO, reason, self.debugger.debug(self, "???", verbose=True))
        )

    def check_pc(self):
        if self.pc < 0 or self.pc > PC_TOP:
            raise CPUError("Program counter out of range at 0x{:04x}".format(self.pc))

    def fetch(self):
        return int.from_bytes(self.ram.read_block(self.pc, 2), CPU_ENDIAN, signed=False)

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()
            return

        instruction()

    def decode_exec(self):
        self._call_masked_instruction((0xF000 & self.opcode) >> 12)

    def inc_pc(self):
        self.pc += 2

    def dec_pc(self):
        # Only used to re-run instructions (i.e. keypress wait)
        self.pc -= 2

    # References to Vx, Vy, byte and addr are always in the same opcode position throughout all instructions, so avoid
    # excessive code duplication (ever so slight slowdown).  Don't reference these more than necessary as they are
    # recalculated each time.
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _opcode_unsupported(self):
        # Not fatal.  The program counter has already moved past it.
        self.debugger.report(
            "{}Opcode 0x{:04x} at address 0x{:03x} is not recognised, skipping.".format(
                APP_INTRO, self.opcode, self.debug_pc
            )
        )

    def debug(self, instruction):
        self.debugger.output(self, instruction)

    def _0nnn(self):
        opcode = self.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing families, so never look them up directly
            self._opcode_unsupported()
            return

        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        if self.live_debug:
            self.debug("CLS")

        self.framebuffer.clear()

    def _00EE(self):  # RET
        if self.live_debug:
            self.debug("RET")

        self.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        if self.live_debug:
            self.debug("JP 0x{:03x}".format(self.addr))

        self.pc = self.addr

    def _2nnn(self):  # CALL addr
        if self.live_debug:
            self.debug("CALL 0x{:03x}".format(self.addr))

        self.stack.push(self.pc)
        self.pc = self.addr

    def _3xkk(self):  # SE Vx, byte
        if self.live_debug:
            self.debug("SE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] == self.byte:
            self.inc_pc()

    def _4xkk(self):  # SNE Vx, byte
        if self.live_debug:
            self.debug("SNE V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        if self.v[self.vx] != self.byte:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.live_debug:
            self.debug("SE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] == self.v[self.vy]:
            self.inc_pc()

    def _6xkk(self):  # LD Vx, byte
        if self.live_debug:
            self.debug("LD V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        self.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        vx = self.vx
        byte = self.byte

        if self.live_debug:
            self.debug("ADD V{:01x}, 0x{:02x}".format(vx, byte))

        # No carry flag for this one
        byte += self.v[vx]
        self.v[vx] = byte & 0xFF

    def _8xy0(self):  # LD Vx, Vy
        if self.live_debug:
            self.debug("LD V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        if self.live_debug:
            self.debug("OR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] |= self.v[self.vy]

    def _8xy2(self):  # AND Vx, Vy
        if self.live_debug:
            self.debug("AND V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] &= self.v[self.vy]

    def _8xy3(self):  # XOR Vx, Vy
        if self.live_debug:
            self.debug("XOR V{:01x}, V{:01x}".format(self.vx, self.vy))

        self.v[self.vx] ^= self.v[self.vy]

    def _8xy4(self):  # ADD Vx, Vy
        vx = self.vx
        vy = self.vy

        if self.live_debug:
            self.debug("ADD V{:01x}, V{:01x}".format(vx, vy))

        val = self.v[vx] + self.v[vy]
        self.v[vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.v[self.vx] = val & 0xFF
        # Vf is set when NOT borrowing, and this should happen AFTER Vx is set, as sometimes VF is specified in the
        # parameters.
        self.v[0xF] = int(val >= 0)

    def _8xy5(self):  # SUB Vx, Vy
        if self.live_debug:
            self.debug("SUB V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vx] - self.v[self.vy])

    def _debug_8xy6_8xyE(self, direction):
        self.debug(
            "{} V{:01x}".format(direction, self.vx) if self.shift_quirks else
            "{} V{:01x}, V{:01x}".format(direction, self.vx, self.vy)
        )

    def _post_8xy6_8xyE(self, val, flag):
        if not self.shift_quirks:
            # Legacy behaviour shifts Vy itself, then copies it across
            self.v[self.vy] = val

        self.v[self.vx] = val
        self.v[0xF] = flag  # The whole byte gets set just for the flag

    def _8xy6(self):  # SHR Vx {, Vy}
        # Modern mode uses Vx.  Legacy mode uses Vy.
        if self.live_debug:
            self._debug_8xy6_8xyE("SHR")

        val = self.v[self.vx if self.shift_quirks else self.vy]
        self._post_8xy6_8xyE(val >> 1, val & 1)

    def _8xy7(self):  # SUBN Vx, Vy
        if self.live_debug:
            self.debug("SUBN V{:01x}, V{:01x}".format(self.vx, self.vy))

        self._post_8xy5_8xy7(self.v[self.vy] - self.v[self.vx])

    def _8xyE(self):  # SHL Vx {, Vy}
        # Modern mode uses Vx.  Legacy mode uses Vy.
        if self.live_debug:
            self._debug_8xy6_8xyE("SHL")

        val = self.v[self.vx if self.shift_quirks else self.vy]
        self._post_8xy6_8xyE((val << 1) & 0xFF, val >> 7)

    def _9xy0(self):  # SNE Vx, Vy
        if self.live_debug:
            self.debug("SNE V{:01x}, V{:01x}".format(self.vx, self.vy))

        if self.v[self.vx] != self.v[self.vy]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        if self.live_debug:
            self.debug("LD I, 0x{:03x}".format(self.addr))

        self.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        if self.live_debug:
            self.debug("JP V0, 0x{:03x}".format(self.addr))

        # Not masked.  Landing past the top of memory is a fault, caught after execution.
        self.pc = self.v[0] + self.addr

    def _Cxkk(self):  # RND Vx, byte
        if self.live_debug:
            self.debug("RND V{:01x}, 0x{:02x}".format(self.vx, self.byte))

        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[self.vx] = self.rng.randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        # Main sprite drawing routine.  A height of zero draws nothing.
        height = self.nibble

        if self.live_debug:
            self.debug("DRW V{:01x}, V{:01x}, 0x{:01x}".format(self.vx, self.vy, height))

        # Read the whole sprite first, so an out-of-range index faults before anything is drawn
        sprite = self.ram.read_block(self.i, height) if height else b""

        # No wrapping.  Anything past the right or bottom edges is trimmed by the framebuffer.
        vx_pos = self.v[self.vx]
        vy_pos = self.v[self.vy]
        collided = False

        for y, spr_data in enumerate(sprite):
            scr_y = y + vy_pos

            for x in range(8):
                if spr_data & (0x80 >> x):
                    if self.framebuffer.xor_pixel(x + vx_pos, scr_y):
                        # Don't stop drawing.  The flag covers the whole sprite.
                        collided = True

        self.v[0xF] = int(collided)
        self.framebuffer.mark_damaged()

    def _Ex9E(self):  # SKP Vx
        if self.live_debug:
            self.debug("SKP V{:01x}".format(self.vx))

        if self.keypad.is_key_down(self.v[self.vx]):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if self.live_debug:
            self.debug("SKNP V{:01x}".format(self.vx))

        if not self.keypad.is_key_down(self.v[self.vx]):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        if self.live_debug:
            self.debug("LD V{:01x}, DT".format(self.vx))

        self.v[self.vx] = self.timers.get_delay()

    def _Fx0A(self):  # LD Vx, K
        if self.live_debug:
            self.debug("LD V{:01x}, K".format(self.vx))

        # The wait is never spun on here.  The program counter is wound back so this instruction runs again once the
        # keypad latch has written the key into Vx, and the CPU sits in the AWAITING_KEY state until then.
        if self.keypad.take_fulfilled():
            self.state = STATE_RUNNING
            return

        self.keypad.begin_wait(self.vx)
        self.state = STATE_AWAITING_KEY
        self.dec_pc()

    def _Fx15(self):  # LD DT, Vx
        if self.live_debug:
            self.debug("LD DT, V{:01x}".format(self.vx))

        self.timers.set_delay(self.v[self.vx])

    def _Fx18(self):  # LD ST, Vx
        if self.live_debug:
            self.debug("LD ST, V{:01x}".format(self.vx))

        ds = self.v[self.vx]
        # Allow the program to start the buzzer, or immediately stop it before the sound timer hits zero
        self.audio.enable_buzzer(ds > 0)
        self.timers.set_sound(ds)

    def _Fx1E(self):  # ADD I, Vx
        if self.live_debug:
            self.debug("ADD I, V{:01x}".format(self.vx))

        val = self.i + self.v[self.vx]
        self.i = val & MEM_TOP
        self.v[0xF] = int(val > MEM_TOP)  # Overflow is checked before truncating

    def _Fx29(self):  # LD F, Vx
        if self.live_debug:
            self.debug("LD F, V{:01x}".format(self.vx))

        self.i = FONT_LOC + FONT_GLYPH_SIZE * (self.v[self.vx] & 0xF)

    def _Fx33(self):  # LD B, Vx
        if self.live_debug:
            self.debug("LD B, V{:01x}".format(self.vx))

        val = self.v[self.vx]
        self.ram.write_block(self.i, bytes((
            val // 100,        # Most-significant digit
            (val // 10) % 10,  # Middle digit
            val % 10           # Least-significant digit
        )))

    def _Fx55(self):  # LD [I], Vx
        if self.live_debug:
            self.debug("LD [I], V{:01x}".format(self.vx))

        # Ensure with +1s that the final register is copied
        count = self.vx + 1
        self.ram.write_block(self.i, self.v[:count])
        self.i += count

    def _Fx65(self):  # LD Vx, [I]
        if self.live_debug:
            self.debug("LD V{:01x}, [I]".format(self.vx))

        count = self.vx + 1
        self.v[:count] = self.ram.read_block(self.i, count)
        self.i += count
