#!/usr/bin/env python3

"""
Host I/O Functionality

Handles loading ROM binaries for later writing into RAM.  The system font is
small enough to live in the constants module instead of a file.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import MAX_ROM_SIZE


class LoadError(Exception):
    pass


class Loader:
    def load_binary(self, filename):
        try:
            with open(filename, "rb") as f:
                return f.read()
        except OSError as e:
            raise LoadError("Unable to read '{}': {}".format(filename, e.strerror or e)) from None

    def load_rom(self, filename):
        data = self.load_binary(filename)
        check_rom_size(data)
        return data


def check_rom_size(data):
    if len(data) > MAX_ROM_SIZE:
        raise LoadError(
            "ROM is {} bytes, but only {} bytes fit in memory after the program start address".format(
                len(data), MAX_ROM_SIZE
            )
        )
