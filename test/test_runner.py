#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from c8vm.constants import DEFAULT_KEYMAP, STATE_RUNNING, STATE_AWAITING_KEY, STATE_FAULTED
from c8vm.debugger import Debugger
from c8vm.inputs.i_null import Inputs, InputsError, parse_keymap
from c8vm.machine import Machine
from c8vm.renderers.r_null import Renderer, RendererError
from c8vm.runner import Runner


def _program(*opcodes):
    return b"".join(opcode.to_bytes(2, "big") for opcode in opcodes)


class FakeClock:
    # Moves on by a fixed amount every time it is read
    def __init__(self, step=0.001):
        self.time = 0.0
        self.step = step

    def __call__(self):
        self.time += self.step
        return self.time


class CountingRenderer(Renderer):
    def __init__(self, **kwargs):
        self.refreshes = 0
        super().__init__(**kwargs)

    def refresh_display(self, content_changed=False):
        self.refreshes += 1


class QuittingInputs(Inputs):
    def __init__(self, keymap, renderer, machine, quit_after):
        super().__init__(keymap, renderer, machine)
        self.polls = 0
        self.quit_after = quit_after

    def process_messages(self):
        self.polls += 1
        return self.polls > self.quit_after


class TestRunner(unittest.TestCase):
    def _make_runner(self, *opcodes, inputs_class=Inputs, renderer_class=Renderer, **inputs_kwargs):
        self.machine = Machine.initialize(_program(*opcodes), debugger=Debugger(quiet=True))
        self.renderer = renderer_class()
        self.inputs = inputs_class(DEFAULT_KEYMAP, self.renderer, self.machine, **inputs_kwargs)
        return Runner(self.machine, self.renderer, self.inputs, steps_per_second=0, clock=FakeClock())

    def test_runner_sets_resolution(self):
        self._make_runner(0x1200)
        self.assertEqual((64, 32), (self.renderer.width, self.renderer.height))
        self.assertEqual("C8VM - 0 FPS, 0 OPS", self.renderer.title)

    def test_runner_draws_frames(self):
        # LD V0, 0x0A; LD F, V0; DRW V0, V0, 5; CLS; JP 0x204
        runner = self._make_runner(0x600A, 0xF029, 0xD005, 0x00E0, 0x1204)
        self.assertEqual(STATE_RUNNING, runner.run(max_steps=200))
        self.assertGreater(self.renderer.frames_drawn, 0)
        self.assertEqual(STATE_RUNNING, self.machine.get_state())

    def test_runner_no_frames_when_undamaged(self):
        runner = self._make_runner(0x1200)
        runner.run(max_steps=100)
        self.assertEqual(0, self.renderer.frames_drawn)

    def test_runner_refreshes_while_awaiting_key(self):
        # LD V0, 0x01; DRW V0, V0, 1; LD V1, K
        runner = self._make_runner(0x6001, 0xD001, 0xF10A, renderer_class=CountingRenderer)
        self.assertEqual(STATE_AWAITING_KEY, runner.run(max_steps=500))
        self.assertEqual(1, self.renderer.frames_drawn)

        # The renderer keeps being refreshed at the display rate (roughly 30 times in half a second)
        self.assertGreater(self.renderer.refreshes, 20)

    def test_runner_stops_on_fault(self):
        # LD V0, 0x01; DRW V0, V0, 1; RET (nothing to return to)
        runner = self._make_runner(0x6001, 0xD001, 0x00EE)
        self.assertEqual(STATE_FAULTED, runner.run(max_steps=100))
        self.assertEqual(1, self.renderer.frames_drawn)  # Last frame still shown

    def test_runner_stops_on_quit(self):
        runner = self._make_runner(0x1200, inputs_class=QuittingInputs, quit_after=2)
        self.assertEqual(STATE_RUNNING, runner.run(max_steps=100000))
        self.assertEqual(3, self.inputs.polls)

    def test_runner_key_wait_runs_timers(self):
        # LD V0, 0x05; LD DT, V0; LD V1, K
        runner = self._make_runner(0x6005, 0xF015, 0xF10A)
        self.assertEqual(STATE_AWAITING_KEY, runner.run(max_steps=500))
        self.assertEqual(0x204, self.machine.cpu.pc)
        self.assertLess(self.machine.timers.get_delay(), 5)

    def test_runner_paced(self):
        self.machine = Machine.initialize(_program(0x1200), debugger=Debugger(quiet=True))
        self.renderer = Renderer()
        clock = FakeClock(0.0001)
        runner = Runner(self.machine, self.renderer, Inputs(DEFAULT_KEYMAP, self.renderer, self.machine),
                        steps_per_second=100, clock=clock)
        runner.run(max_steps=10)
        # Ten steps at 100 per second take (roughly) a tenth of a second
        self.assertGreaterEqual(clock.time, 0.1)


class TestPlugins(unittest.TestCase):
    def test_parse_keymap(self):
        keymap = parse_keymap(DEFAULT_KEYMAP)
        self.assertEqual(16, len(keymap))
        self.assertEqual(0x0, keymap[120])  # x
        self.assertEqual(0xF, keymap[118])  # v

    def test_parse_keymap_lowercase(self):
        keymap = parse_keymap("88" + DEFAULT_KEYMAP[3:], force_lowercase=True)
        self.assertEqual(0x0, keymap[120])

    def test_parse_keymap_bad(self):
        self.assertRaises(InputsError, parse_keymap, "1,2,3")
        self.assertRaises(InputsError, parse_keymap, "a" + DEFAULT_KEYMAP[3:])
        self.assertRaises(InputsError, parse_keymap, "49" + DEFAULT_KEYMAP[3:])  # Duplicate of key 1

    def test_inputs_forward_keys(self):
        machine = Machine.initialize(b"", debugger=Debugger(quiet=True))
        inputs = Inputs(DEFAULT_KEYMAP, Renderer(), machine)
        inputs.set_key(0x7, True)
        self.assertTrue(machine.keypad.is_key_down(0x7))
        inputs.set_key(0x7, False)
        self.assertFalse(machine.keypad.is_key_down(0x7))

    def test_renderer_draw_frame(self):
        renderer = Renderer()
        renderer.set_resolution(2, 2)
        renderer.draw_frame(b"\x00\x01\x01\x00")
        self.assertEqual(1, renderer.frames_drawn)
        self.assertRaises(RendererError, renderer.draw_frame, b"\x00")
