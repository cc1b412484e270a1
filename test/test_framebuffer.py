#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.framebuffer import Framebuffer, FramebufferError


class TestFrameBuffer(unittest.TestCase):
    def setUp(self):
        self.framebuffer = Framebuffer(4, 5)

    def test_framebuffer_default_size(self):
        self.assertEqual((64, 32), Framebuffer().get_vid_size())
        self.assertEqual(2048, len(Framebuffer().read()))

    def test_framebuffer_bad_size(self):
        self.assertRaises(FramebufferError, Framebuffer, 0, 32)

    def test_framebuffer_writes(self):
        fb = self.framebuffer
        self.assertFalse(fb.xor_pixel(0, 0))
        self.assertEqual("0100000000000000000000000000000000000000", fb.plane.mem.hex())
        self.assertFalse(fb.xor_pixel(1, 1))
        self.assertEqual("0100000000010000000000000000000000000000", fb.plane.mem.hex())
        self.assertEqual(1, fb.get_pixel(1, 1))

        # Unsetting a set pixel is a collision
        self.assertTrue(fb.xor_pixel(0, 0))
        self.assertEqual("0000000000010000000000000000000000000000", fb.plane.mem.hex())

    def test_framebuffer_no_wrapping(self):
        fb = self.framebuffer

        for x, y in (4, 0), (0, 5), (4, 5), (-1, 0), (200, 200):
            self.assertIsNone(fb.xor_pixel(x, y))

        self.assertEqual("00" * 20, fb.plane.mem.hex())
        self.assertFalse(fb.is_damaged())

    def test_framebuffer_damage(self):
        fb = self.framebuffer
        self.assertFalse(fb.is_damaged())
        fb.xor_pixel(3, 4)
        self.assertTrue(fb.is_damaged())
        snapshot = fb.read()
        self.assertFalse(fb.is_damaged())
        self.assertEqual(1, snapshot[19])

        # Snapshots are copies
        fb.xor_pixel(3, 4)
        self.assertEqual(1, snapshot[19])

    def test_framebuffer_clear(self):
        fb = self.framebuffer
        fb.xor_pixel(2, 2)
        fb.read()
        fb.clear()
        self.assertTrue(fb.is_damaged())
        self.assertEqual("00" * 20, fb.plane.mem.hex())
