#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

Plugins translate host keys into hex keys (0-F) through the keymap, then report
each key going down or up to the machine with set_key().  The machine's keypad
latch takes care of everything else, including waits for a keypress.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class InputsError(Exception):
    pass


def parse_keymap(keymap, force_lowercase=False):
    keymap_dict = {}
    keymap_split = keymap.split(",")

    if len(keymap_split) != 0x10:
        raise InputsError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

    for key_num, key_defined in enumerate(keymap_split):
        try:
            key_defined_ord = int(key_defined)
        except ValueError:
            raise InputsError("Defined keys are not all integer values") from None

        if force_lowercase:
            # If we are working with characters rather than keyscan codes, we should convert to lowercase
            key_defined_ord = ord(chr(key_defined_ord).lower())

        if key_defined_ord in keymap_dict:
            raise InputsError("Duplicate keys defined")

        keymap_dict[key_defined_ord] = key_num

    return keymap_dict


class Inputs:
    def __init__(self, keymap, renderer, machine, force_lowercase=False):
        self.keymap_dict = parse_keymap(keymap, force_lowercase)
        self.renderer = renderer
        self.machine = machine

    def process_messages(self):
        return False  # Don't exit the program

    def set_key(self, hex_key, pressed):
        self.machine.set_key(hex_key, pressed)

    def shutdown(self):
        pass
