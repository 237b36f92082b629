"""chip8vm: CHIP-8 virtual machine.

Supports:
  - The standard CHIP-8 instruction set (0NNN machine-code calls excepted)
  - Quirk presets for divergent interpreters (modern, COSMAC VIP, SUPER-CHIP)
  - Injected audio/input drivers (no platform dependencies in the core)
  - Headless runner and command-line debug dumps

Architecture:
  Machine holds all interpreter state and executes one instruction per
  cycle(). The host ticks timers with decr_timers() at 60 Hz, polls the
  display and dirty flag, and supplies key state through an InputDriver.
"""

__version__ = '0.3.0'

from .errors import Chip8Error, RomLoadError, RomTooLargeError, UnknownQuirksError
from .quirks import Quirks, PRESETS
from .drivers import (AudioDriver, InputDriver, NullAudio, NullInput,
                      KeypadInput, TerminalBell, Drivers, DEFAULT_KEYMAP)
from .machine import Machine
from .rom import load_rom
from .runner import run
