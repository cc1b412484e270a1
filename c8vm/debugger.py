#!/usr/bin/env python3

"""
CPU Debugger

If enabled, this will output information before each instruction executed:
    * All 16 of the [V] registers, starting with most significant (Vf) and
      reducing to least significant (V0)
    * I  - Index register
    * DT - Delay timer
    * ST - Sound timer
    * PC - Program counter
    * OP - OpCode number
    * IN - Decoded instruction

If a fault occurs, all of the above will be outputted, with the addition of:
    * State - Engine state
    * Stack - Stack contents

Problems that don't stop emulation, such as unknown opcodes, are reported
through here too.  Reports are printed to stderr and kept, so a host (or a
test) can inspect them afterwards.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import sys
from .constants import STATE_NAMES


class Debugger:
    def __init__(self, quiet=False):
        self.live = False
        self.quiet = quiet
        self.reports = []

    def debug(self, cpu, instruction, verbose=False):
        debug_str = (
            "V: 0x" + ("{:02x}" * 16) + " I: 0x{:04x} DT: 0x{:02x} ST: 0x{:02x} PC: 0x{:03x} OP: 0x{:04x} IN: {}"
        ).format(
            *[cpu.v[reg_num] for reg_num in range(15, -1, -1)] +
            [cpu.i, cpu.timers.get_delay(), cpu.timers.get_sound(), cpu.debug_pc, cpu.opcode, instruction]
        )

        if verbose:
            debug_str += "\nState: {}".format(STATE_NAMES[cpu.state])
            stack_items = cpu.stack.get_items()
            stack_str = (" 0x{:03x}" * len(stack_items)).format(*stack_items)
            debug_str += ("\nStack:{}").format(stack_str or " (Empty)")

        return debug_str

    def set_live(self, enabled):
        self.live = enabled

    def is_live(self):
        return self.live

    def output(self, cpu, instruction):
        print(self.debug(cpu, instruction))

    def report(self, message):
        self.reports.append(message)

        if not self.quiet:
            print(message, file=sys.stderr)

    def get_reports(self):
        return self.reports
