#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import os
import tempfile
import unittest
from chip8vm import parse_args
from c8vm import main, StartupError
from c8vm.constants import DEFAULT_KEYMAP


class TestCommandLine(unittest.TestCase):
    def test_cli_defaults(self):
        args = vars(parse_args(["game.ch8"]))
        self.assertEqual("game.ch8", args["filename"])
        self.assertIsNone(args["compat"])
        self.assertIsNone(args["clock_speed"])
        self.assertIsNone(args["renderer"])
        self.assertEqual(DEFAULT_KEYMAP, args["keymap"])
        self.assertFalse(args["debug"])

    def test_cli_options(self):
        args = vars(parse_args(["game.ch8", "-m", "legacy", "-c", "0", "-r", "null", "-d"]))
        self.assertEqual("legacy", args["compat"])
        self.assertEqual(0, args["clock_speed"])
        self.assertEqual("null", args["renderer"])
        self.assertTrue(args["debug"])

    def test_main_missing_rom(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            args = vars(parse_args([os.path.join(temp_dir, "NoFile.ch8"), "-r", "null"]))
            self.assertRaises(StartupError, main, args)
