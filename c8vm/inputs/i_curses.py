#!/usr/bin/env python3

"""
Curses TTY Terminal Input Plugin

Uses a thread to trap Terminal inputs and redirects them to the emulator.  Note
that standard TTY Terminals only understand characters, they do not know when
an actual key is 'pressed' or 'released'.

Instead, a key is assumed to be held for a short time after each character
arrives.  Keyboard repeats keep extending that time, so holding a key down
reads as one long press.  Once the time runs out with no further characters,
the key is released.  Each key therefore still goes through a proper press and
release, which the keypad latch needs to satisfy a wait for a keypress.

We will also quit if ESC (char 27) or CTRL+C (char 3) is detected.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import queue
from threading import Thread
from time import time
from .i_null import Inputs as InputsBase

# How long a key counts as held after its last character
KEYBOARD_FAKE_KEYDOWN_TIME = 0.2

QUIT_CHARS = 3, 27  # CTRL+C, ESC


def input_thread(quit_queue, key_queue, keymap_dict, curses_screen):
    # Only queues are shared with the main thread
    while quit_queue.empty():
        # Blocks until a character arrives.  As a daemon thread, it won't hold up the program quitting.
        char = curses_screen.getch()

        if char < 0:
            continue

        char = ord(chr(char).lower())

        if char in QUIT_CHARS:
            key_queue.put(None)
            return

        hex_key = keymap_dict.get(char)

        if hex_key is None:
            continue

        try:
            key_queue.put(hex_key, block=False)
        except queue.Full:
            pass  # Repeats arrive faster than they are needed


class Inputs(InputsBase):
    def __init__(self, keymap, renderer, machine):
        super().__init__(keymap, renderer, machine, force_lowercase=True)

        self.release_times = {}  # Hex key -> time it should be released, for keys currently held
        self.quit_queue = queue.Queue(1)
        self.key_queue = queue.Queue(16)
        self.thread = Thread(
            target=input_thread,
            args=(self.quit_queue, self.key_queue, self.keymap_dict, renderer.get_curses_screen()),
            daemon=True
        )
        self.thread.start()

    def process_messages(self):
        now = time()

        while True:
            try:
                hex_key = self.key_queue.get(block=False)
            except queue.Empty:
                break

            if hex_key is None:
                return True

            if hex_key not in self.release_times:
                self.set_key(hex_key, True)

            self.release_times[hex_key] = now + KEYBOARD_FAKE_KEYDOWN_TIME

        for hex_key, release_time in list(self.release_times.items()):
            if release_time <= now:
                del self.release_times[hex_key]
                self.set_key(hex_key, False)

        return False

    def shutdown(self):
        # The thread only notices once another key arrives, so don't wait for it
        try:
            self.quit_queue.put(None, block=False)
        except queue.Full:
            pass

        super().shutdown()
