#!/usr/bin/env python3

"""
Curses Renderer Plugin

Draws frames in a standard Linux-style TTY Terminal, the Windows Command
Prompt, or PowerShell.  Each set pixel is drawn as inverted spaces, stretched
horizontally by the scale so the screen keeps roughly the right aspect ratio.

The top line of the terminal is used for the title bar, which shows the
performance report.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import curses
import _curses
from .r_null import Renderer as RendererBase


class Renderer(RendererBase):
    def __init__(self, scale=None, curses_cursor_mode=0, **kwargs):
        if scale is None:
            scale = 2  # Default horizontal stretch if not supplied, or set to default

        self.pixel_char = " " * scale
        self.pad = None
        self.refresh_needed = False
        self.last_screen_height = -1
        self.last_screen_width = -1
        self.cursor_mode = curses_cursor_mode
        self.screen = curses.initscr()
        curses.curs_set(self.cursor_mode)
        curses.noecho()
        curses.cbreak()
        super().__init__(scale)

    def set_resolution(self, width, height):
        adjusted_width = width * self.scale + 1

        # We have to allow one extra character, presumably for the cursor, otherwise we can't write the furthest
        # bottom-right pixel.  The extra row at the top holds the title.
        self.pad = curses.newpad(height + 1, adjusted_width)
        super().set_resolution(width, height)

    def set_pixel(self, x, y, colour):
        self.pad.addstr(y + 1, x * self.scale, self.pixel_char, curses.A_REVERSE if colour else curses.A_NORMAL)

    def refresh_display(self, content_changed=False):
        if content_changed:
            self.refresh_needed = True

        screen_height, screen_width = self.screen.getmaxyx()  # This doesn't seem to ever change/work on Windows?!

        if screen_height != self.last_screen_height or screen_width != self.last_screen_width:
            # Screen resolution changed (or this is the first refresh), so redraw everything
            self.screen.clear()

            if hasattr(curses, "resizeterm"):
                # This doesn't work on Windows
                curses.resizeterm(screen_height, screen_width)

            self.screen.refresh()
            self.last_screen_height = screen_height
            self.last_screen_width = screen_width
            self.refresh_needed = True

        # Delta update.  Also paints the pad straight after a resize.
        if self.refresh_needed and self.pad:
            self.pad.refresh(0, 0, 0, 0, screen_height - 1, screen_width - 1)
            self.refresh_needed = False

    def set_title(self, title):
        if self.pad:
            title_len = len(title)
            line_len = self.width * self.scale

            if line_len > title_len:
                self.pad.addstr(0, 0, title + " " * (line_len - title_len), curses.A_REVERSE)
                self.refresh_needed = True

        super().set_title(title)

    def shutdown(self):
        if self.pad:
            del self.pad
            self.pad = None

        curses.nocbreak()
        curses.echo()

        if self.cursor_mode != 1:
            try:
                curses.curs_set(1)
            except _curses.error:
                pass

        curses.endwin()
        super().shutdown()

    # No Superclass for these Curses-specific methods

    def get_curses_screen(self):
        return self.screen
