#!/usr/bin/env python3

"""
Host Loop

Drives a Machine in real time.  On every pass it:
    1. Polls the input plugin (at 60Hz, as checking more often is slow)
    2. Ticks the timers with the wall time elapsed since the previous pass
    3. Steps the CPU once
    4. Hands the framebuffer to the renderer if it has been damaged, or just
       refreshes the renderer otherwise (again, no more than 60Hz)
    5. Waits for the next step, if a step rate was set

While the CPU is waiting for a keypress, the loop carries on as normal.  The
steps do nothing, but inputs are still polled and timers still run down.

The loop ends when the input plugin asks to quit, or the CPU faults.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from .constants import APP_NAME, DEFAULT_STEPS_PER_SECOND, DISPLAY_INTERVAL, STATE_FAULTED


class Runner:
    def __init__(self, machine, renderer, inputs, steps_per_second=None, clock=perf_counter):
        self.machine = machine
        self.renderer = renderer
        self.inputs = inputs
        self.clock = clock

        if steps_per_second is None:
            steps_per_second = DEFAULT_STEPS_PER_SECOND

        # User can specify 0 for uncapped
        self.core_interval = None if steps_per_second <= 0 else 1.0 / steps_per_second

        # Performance-related vars
        self.next_display_update_time = 0
        self.next_input_time = 0
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0
        self.next_perf_report_time = 0

        # Match the display to the emulated screen before anything is drawn
        self.renderer.set_resolution(*machine.framebuffer.get_vid_size())
        self.report_perf()

    def run(self, max_steps=None):
        machine = self.machine
        clock = self.clock
        last_time = clock()
        steps = 0

        while max_steps is None or steps < max_steps:
            this_time = clock()  # Do this first for maximum precision

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = int(this_time) + 1.0
                self.report_perf(self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            if this_time >= self.next_input_time:
                if self.inputs.process_messages():
                    return machine.get_state()

                self.next_input_time = this_time + DISPLAY_INTERVAL

            machine.tick(this_time - last_time)
            last_time = this_time
            state = machine.step()
            steps += 1

            if state == STATE_FAULTED:
                # Show whatever was drawn before the fault
                self.refresh_display()
                return state

            # Prevent unnecessary display rendering in excess of host frame rate.  With no new frame, the renderer
            # still gets a plain refresh at that rate (terminal resizes, title updates).
            if this_time >= self.next_display_update_time:
                self.next_display_update_time = this_time + DISPLAY_INTERVAL

                if not self.refresh_display():
                    self.renderer.refresh_display()

            if self.core_interval is not None:
                # Wait for next CPU instruction.  Do this last for maximum precision (takes into account time spent on
                # this instruction)
                next_time = this_time + self.core_interval

                while clock() < next_time:  # Unfortunately we have to do this to get the timing right
                    pass

            self.perf_counter_ops += 1

        return machine.get_state()

    def refresh_display(self):
        # Returns True if a new frame was drawn
        if not self.machine.is_screen_damaged():
            return False

        self.renderer.draw_frame(self.machine.read_screen())
        self.perf_counter_fps += 1
        return True

    def report_perf(self, fps=0, ops=0):
        self.renderer.set_title("{} - {} FPS, {} OPS".format(APP_NAME, fps, ops))
