#!/usr/bin/env python3

"""
Delay and Sound Timers

Both timers count down at 60Hz of real (wall-clock) time, however many
instructions the CPU manages in between.  The host loop feeds in the elapsed
time once per step, and each timer keeps the timestamp of its own last
decrement.

Time is kept in whole microseconds.  Summing float seconds would let an
interval of exactly 1/60s compare as fractionally short, losing decrements.
Each decrement moves the timestamp on by exactly one interval, so a late tick
doesn't push the following decrements back.

A timer still drops by at most one per tick.  If the host lags by more than a
whole interval, the timestamp is brought up to date rather than catching up
with a burst of decrements.  When the sound timer runs out, the tick reports
it so the buzzer can be switched off.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import TIMER_INTERVAL_US


def _advance(last, clock):
    # Timestamp of a decrement due at 'last + interval', seen at 'clock'
    last += TIMER_INTERVAL_US
    return clock if clock - last >= TIMER_INTERVAL_US else last


class Timers:
    def __init__(self):
        self.clock = 0    # Accumulated wall time in microseconds
        self.dt = 0       # Delay timer
        self.ds = 0       # Sound timer
        self.dt_last = 0
        self.ds_last = 0

    def set_delay(self, value):
        self.dt = value & 0xFF
        self.dt_last = self.clock

    def set_sound(self, value):
        self.ds = value & 0xFF
        self.ds_last = self.clock

    def get_delay(self):
        return self.dt

    def get_sound(self):
        return self.ds

    def tick(self, elapsed):
        # 'elapsed' is in seconds.  Returns True if the sound timer has just reached zero, i.e. the tone should stop.
        clock = self.clock + max(0, round(elapsed * 1000000))
        self.clock = clock
        sound_stopped = False

        if self.dt > 0 and clock - self.dt_last >= TIMER_INTERVAL_US:
            self.dt -= 1
            self.dt_last = _advance(self.dt_last, clock)

        if self.ds > 0 and clock - self.ds_last >= TIMER_INTERVAL_US:
            self.ds -= 1
            self.ds_last = _advance(self.ds_last, clock)
            sound_stopped = self.ds == 0

        return sound_stopped
