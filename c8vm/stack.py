#!/usr/bin/env python3

"""
Stack Emulator

The call stack lives outside of system RAM.  There is no specified location
for it, and the stack pointer is not exposed to the running program, so a
capacity-limited list is enough to fully emulate it.

The original hardware had no guard against pushing past the end of the stack
or popping from an empty one.  Here both raise StackError, which the CPU turns
into a fault rather than corrupting state.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class StackError(Exception):
    pass


class Stack:
    def __init__(self, size):
        self.items = []
        self.size = size

    def push(self, item):
        # Fetching the stack size with 'len' should be immediate, so no slow loop
        if len(self.items) >= self.size:
            raise StackError("Stack overflow")

        self.items.append(item)

    def pop(self):
        try:
            return self.items.pop()
        except IndexError:
            raise StackError("Stack underflow") from None

    def get_pointer(self):
        return len(self.items)

    def get_items(self):
        # For debugging
        return self.items
