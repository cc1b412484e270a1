#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws frames onto an SDL window surface via PyGame.  Each frame is built in an
RGB buffer at the emulated screen size (64x32), then stretched with 'Nearest
Neighbour' scaling to fill a window of twice the height in width.  Pixels are
never drawn more than once per frame.

Unset pixels are drawn in a dark grey rather than pure black, and set pixels in
white.  Either colour can be overridden with a palette.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase
from ..constants import APP_NAME

DEFAULT_PALETTE = 0x232323, 0xFFFFFF  # Background, foreground


def parse_palette(pygame_palette):
    """Returns the RGB bytes for both pixel states, given something like '000000,33FF66'.

    Supplying only one colour overrides the background and keeps the default foreground.
    """
    colours = list(DEFAULT_PALETTE)

    if pygame_palette is not None:
        palette_split = pygame_palette.split(",")

        if len(palette_split) > len(colours):
            raise RendererError("Too many palette colours defined.")

        for colour_num, colour_hex in enumerate(palette_split):
            if len(colour_hex) != 6:
                raise RendererError("Palette colours must all be 6 hex digits long.")

            try:
                colours[colour_num] = int(colour_hex, 16)
            except ValueError:
                raise RendererError("Invalid palette colour defined.") from None

    return [colour.to_bytes(3, "big") for colour in colours]


class Renderer(RendererBase):
    def __init__(self, scale=None, pygame_palette=None, smoothing=0, **kwargs):
        if scale is None:
            scale = 512  # Default window width

        # Parse before opening a window, so a bad palette doesn't leave one behind
        self.rgb_map = parse_palette(pygame_palette)
        self.rgb_buffer = None
        self.smoothing = smoothing
        self.window_size = (scale, scale // 2)

        pygame.display.init()
        self.window = pygame.display.set_mode(self.window_size)

        super().__init__(scale)
        self.set_title(APP_NAME)

    def set_resolution(self, width, height):
        super().set_resolution(width, height)

        # Start with every pixel in the background colour, and show it straight away
        self.rgb_buffer = memoryview(bytearray(self.rgb_map[0] * (width * height)))
        self.refresh_display(True)

    def set_pixel(self, x, y, colour):
        # Update RGB buffer in-place to minimise allocations and PyGame calls
        offset = (x + y * self.width) * 3
        self.rgb_buffer[offset:offset + 3] = self.rgb_map[colour]

    def refresh_display(self, content_changed=False):
        if not content_changed or not self.rgb_buffer:
            return

        # Much faster than very frequent PixelArray updates
        frame = pygame.image.frombuffer(self.rgb_buffer, (self.width, self.height), "RGB")

        for _ in range(self.smoothing):
            frame = pygame.transform.scale2x(frame)

        self.window.blit(pygame.transform.scale(frame, self.window_size), (0, 0))
        pygame.display.flip()

    def set_title(self, title):
        pygame.display.set_caption(title)
        super().set_title(title)

    def shutdown(self):
        # PyGame currently segfaults if display.quit is called via __del__
        pygame.display.quit()
        super().shutdown()
