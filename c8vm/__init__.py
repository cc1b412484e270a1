#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .audio.a_null import Audio
from .constants import APP_INTRO, APP_COPYRIGHT, COMPAT_MODERN, STATE_FAULTED
from .cpu import CPUError
from .debugger import Debugger
from .hostio import Loader, LoadError
from .machine import Machine
from .runner import Runner


class StartupError(Exception):
    pass


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))

    opt_renderer = args["renderer"]
    auto_select_renderer = opt_renderer is None  # If necessary, try PyGame first, then Curses.

    # flake8: noqa: F401
    if auto_select_renderer or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame
        except ImportError:
            if auto_select_renderer:
                opt_renderer = "curses"
            else:
                raise StartupError(
                    "PyGame does not appear to be installed."
                )
        else:
            opt_renderer = "pygame"
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer

    if opt_renderer == "curses":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import curses
        except ImportError:
            if auto_select_renderer:
                raise StartupError(
                    "Neither PyGame nor Curses (or Windows-Curses) appear to be installed."
                )

            raise StartupError(
                "Curses (or Windows-Curses) does not appear to be installed."
            )
        else:
            from .inputs.i_curses import Inputs
            from .renderers.r_curses import Renderer

    if opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer

    # Read ROM binary.  Anything unreadable or too large stops us here, before the machine exists.
    try:
        rom = Loader().load_rom(args["filename"])
    except LoadError as e:
        raise StartupError(str(e)) from None

    # Set up debugger and live output if necessary
    debugger = Debugger()
    debugger.set_live(args["debug"])

    compat_mode = args["compat"] or COMPAT_MODERN
    audio = Audio()
    machine = Machine.initialize(rom, compat_mode, audio=audio, debugger=debugger)

    # Set up a new rendering system
    renderer = Renderer(
        scale=args["scale"],
        pygame_palette=args["pygame_palette"],
        curses_cursor_mode=args["curses_cursor_mode"],
        smoothing=args["smoothing"]
    )

    # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
    inputs = Inputs(args["keymap"], renderer, machine)
    runner = Runner(machine, renderer, inputs, steps_per_second=args["clock_speed"])

    try:
        state = runner.run()
    finally:
        # The loop has ended, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        audio.shutdown()
        inputs.shutdown()
        renderer.shutdown()

    if state == STATE_FAULTED:
        raise CPUError(
            "Emulation halted.\n\n{}Debug info:\n{}\n\n{}".format(
                APP_INTRO, debugger.debug(machine.cpu, "???", verbose=True), machine.get_fault_reason()
            )
        )
