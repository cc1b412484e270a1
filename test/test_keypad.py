#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.keypad import Keypad


class TestKeypad(unittest.TestCase):
    def setUp(self):
        self.registers = memoryview(bytearray(16))
        self.keypad = Keypad(self.registers)

    def test_keypad_key_state(self):
        self.assertFalse(self.keypad.is_key_down(0xA))
        self.keypad.set_key(0xA, True)
        self.assertTrue(self.keypad.is_key_down(0xA))
        self.keypad.set_key(0xA, False)
        self.assertFalse(self.keypad.is_key_down(0xA))

    def test_keypad_out_of_range(self):
        self.keypad.set_key(0x10, True)
        self.keypad.set_key(-1, True)
        self.assertFalse(self.keypad.is_key_down(0x10))
        self.assertFalse(any(self.keypad.key_down))

    def test_keypad_wait_satisfied_by_press(self):
        self.keypad.begin_wait(3)
        self.assertTrue(self.keypad.is_waiting())
        self.keypad.set_key(9, True)
        self.assertFalse(self.keypad.is_waiting())
        self.assertEqual(9, self.registers[3])
        self.assertTrue(self.keypad.take_fulfilled())
        self.assertFalse(self.keypad.take_fulfilled())

    def test_keypad_wait_ignores_held_key(self):
        self.keypad.set_key(5, True)
        self.keypad.begin_wait(2)
        self.keypad.set_key(5, True)  # Still held, not a fresh press
        self.assertTrue(self.keypad.is_waiting())
        self.keypad.set_key(5, False)  # Releases don't count either
        self.assertTrue(self.keypad.is_waiting())
        self.keypad.set_key(5, True)
        self.assertFalse(self.keypad.is_waiting())
        self.assertEqual(5, self.registers[2])

    def test_keypad_wait_ignores_out_of_range(self):
        self.keypad.begin_wait(0)
        self.keypad.set_key(0x10, True)
        self.assertTrue(self.keypad.is_waiting())
