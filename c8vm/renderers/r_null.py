#!/usr/bin/env python3

"""
Null Renderer Plugin

This serves as a base class for other rendering plugins.

The host loop calls draw_frame() with a framebuffer snapshot whenever the
screen has been damaged.  Each pixel is passed to set_pixel(), then the
display is refreshed.

This module can be used on its own as a Renderer plugin if you only want to see
debug output.  Without a renderer, performance data will also not be shown.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RendererError(Exception):
    pass


class Renderer:
    def __init__(self, scale=None, **kwargs):  # pylint: disable=unused-argument
        self.scale = 1 if scale is None else scale
        self.frames_drawn = 0
        self.title = ""
        self.set_resolution(0, 0)

    def set_resolution(self, width, height):
        self.width = width
        self.height = height

    def draw_frame(self, pixels):
        width = self.width

        if len(pixels) != width * self.height:
            raise RendererError("Frame size does not match the display resolution")

        for location, pixel in enumerate(pixels):
            self.set_pixel(location % width, location // width, pixel)

        self.refresh_display(True)
        self.frames_drawn += 1

    def set_pixel(self, x, y, colour):  # pylint: disable=unused-argument
        pass

    def refresh_display(self, content_changed=False):
        pass

    def set_title(self, title):
        self.title = title

    def shutdown(self):
        pass
