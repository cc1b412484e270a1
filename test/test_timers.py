#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.timers import Timers


class TestTimers(unittest.TestCase):
    def setUp(self):
        self.timers = Timers()

    def test_timers_paced_by_wall_time(self):
        self.timers.set_delay(10)

        # Lots of ticks in under a millisecond shouldn't decrement at all
        for _ in range(1000):
            self.timers.tick(0.000001)

        self.assertEqual(10, self.timers.get_delay())

        # One tick after 20ms decrements exactly once
        self.timers.tick(0.02)
        self.assertEqual(9, self.timers.get_delay())

    def test_timers_no_catch_up(self):
        self.timers.set_delay(10)
        self.timers.tick(1.0)
        self.assertEqual(9, self.timers.get_delay())

    def test_timers_independent(self):
        self.timers.set_delay(5)
        self.timers.tick(0.01)
        self.timers.set_sound(5)
        self.timers.tick(0.01)
        # Delay timer has seen 20ms, sound timer only 10ms
        self.assertEqual(4, self.timers.get_delay())
        self.assertEqual(5, self.timers.get_sound())
        self.timers.tick(0.01)
        self.assertEqual(4, self.timers.get_delay())
        self.assertEqual(4, self.timers.get_sound())

    def test_timers_saturate(self):
        self.timers.set_delay(1)
        self.timers.tick(0.02)
        self.timers.tick(0.02)
        self.timers.tick(0.02)
        self.assertEqual(0, self.timers.get_delay())

    def test_timers_sound_stop(self):
        self.timers.set_sound(2)
        self.assertFalse(self.timers.tick(0.02))
        self.assertEqual(1, self.timers.get_sound())
        self.assertTrue(self.timers.tick(0.02))
        self.assertEqual(0, self.timers.get_sound())
        # Only signalled on the transition
        self.assertFalse(self.timers.tick(0.02))

    def test_timers_byte_values(self):
        self.timers.set_delay(0x1FF)
        self.assertEqual(0xFF, self.timers.get_delay())

    def _decrements_in(self, ticks, elapsed):
        self.timers.set_delay(0xFF)
        self.timers.set_sound(0xFF)

        for _ in range(ticks):
            self.timers.tick(elapsed)

        return 0xFF - self.timers.get_delay(), 0xFF - self.timers.get_sound()

    def test_timers_sustained_rate_at_timer_frequency(self):
        # A host looping at exactly 60Hz should see a decrement on every single tick
        self.assertEqual((60, 60), self._decrements_in(60, 1 / 60))

    def test_timers_sustained_rate_over_four_seconds(self):
        self.assertEqual((240, 240), self._decrements_in(240, 1 / 60))

    def test_timers_sustained_rate_at_step_frequencies(self):
        for hz in 120, 720, 1000:
            with self.subTest(hz=hz):
                self.timers = Timers()
                dt_count, ds_count = self._decrements_in(hz, 1 / hz)
                self.assertAlmostEqual(60, dt_count, delta=1)
                self.assertAlmostEqual(60, ds_count, delta=1)

    def test_timers_late_tick_keeps_schedule(self):
        # A tick arriving late doesn't delay the decrements after it
        self.timers.set_delay(10)
        self.timers.tick(0.025)
        self.assertEqual(9, self.timers.get_delay())
        self.timers.tick(0.01)
        self.assertEqual(8, self.timers.get_delay())
