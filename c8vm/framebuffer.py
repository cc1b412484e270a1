#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here, and are only drawn to the actual display (the host
rendering system) when the host loop finds the framebuffer has been damaged.
The host reads a snapshot, which clears the damaged flag, and hands it to
whichever renderer plugin is in use.

Programs for this system cannot write directly into video RAM.  Instead,
sprites are drawn onto a single monochrome plane using an XOR method.  Any set
pixel that gets unset by an XOR is reported as a collision.

There is no wraparound.  Pixels landing outside the 64x32 grid are dropped.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import VID_WIDTH, VID_HEIGHT
from .ram import RAM


class FramebufferError(Exception):
    pass


class Framebuffer:
    def __init__(self, vid_width=VID_WIDTH, vid_height=VID_HEIGHT):
        if vid_width <= 0 or vid_height <= 0:
            raise FramebufferError("Display size must be positive")

        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.plane = RAM()
        self.plane.resize(self.vid_size)
        self.damaged = False

    def clear(self):
        self.plane.clear()
        self.damaged = True

    def xor_pixel(self, x, y):
        # Returns True on collision, False otherwise, or None if the pixel is off-screen and was dropped
        if x < 0 or y < 0 or x >= self.vid_width or y >= self.vid_height:
            return None

        vram_loc = x + y * self.vid_width
        pixel = self.plane.read(vram_loc)
        self.plane.write(vram_loc, pixel ^ 1)
        self.damaged = True

        return pixel != 0

    def get_pixel(self, x, y):
        return self.plane.read(x + y * self.vid_width)

    def mark_damaged(self):
        self.damaged = True

    def is_damaged(self):
        return self.damaged

    def read(self):
        # Snapshot of every pixel (0 or 1), row by row.  Reading counts as a redraw, so damage is cleared.
        self.damaged = False
        return bytes(self.plane.mem)

    def get_vid_size(self):
        return self.vid_width, self.vid_height
