#!/usr/bin/env python3

"""
Null Audio Plugin

Serves as a base class for other Audio plugins.  Receives the buzzer on/off
signals from the CPU (the buzzer stops when the sound timer reaches zero), but
makes no sound itself.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class Audio:
    def __init__(self):
        # Buzzer should be disabled (not playing sounds) by default
        self.buzzer_enabled = False

    def enable_buzzer(self, enabled):
        # The buzzer should play sounds when the sound timer is >0
        self.buzzer_enabled = enabled

    def is_buzzer_enabled(self):
        return self.buzzer_enabled

    def shutdown(self):
        pass
