"""Platform capabilities the machine consumes: audio signaling and key input.

The machine never touches a platform API directly. It is handed a
``Drivers`` bundle at construction and calls through these interfaces:

    AudioDriver.start_beep() / stop_beep()    Sound timer on / off
    InputDriver.key_pressed()                 Currently held key 0-F, or None

Null implementations are provided for tests and headless runs;
``KeypadInput`` and ``TerminalBell`` are live adapters a host can drive.
"""

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional

# Conventional QWERTY layout for the 4x4 COSMAC VIP hex keypad:
#
#   1 2 3 C        1 2 3 4
#   4 5 6 D   <-   Q W E R
#   7 8 9 E        A S D F
#   A 0 B F        Z X C V
#
# Insertion order is the priority used when several keys are held.
DEFAULT_KEYMAP = {
    '1': 0x1, '2': 0x2, '3': 0x3, '4': 0xC,
    'q': 0x4, 'w': 0x5, 'e': 0x6, 'r': 0xD,
    'a': 0x7, 's': 0x8, 'd': 0x9, 'f': 0xE,
    'z': 0xA, 'x': 0x0, 'c': 0xB, 'v': 0xF,
}


class AudioDriver(ABC):
    """Start/stop signaling for the sound timer buzzer."""

    @abstractmethod
    def start_beep(self):
        ...

    @abstractmethod
    def stop_beep(self):
        ...


class InputDriver(ABC):
    """Keypad query."""

    @abstractmethod
    def key_pressed(self) -> Optional[int]:
        """Return the held key (0x0-0xF), or None when nothing is held."""
        ...


class NullAudio(AudioDriver):
    def start_beep(self):
        pass

    def stop_beep(self):
        pass


class NullInput(InputDriver):
    def key_pressed(self) -> Optional[int]:
        return None


class KeypadInput(InputDriver):
    """Keypad fed by host key events.

    The host calls ``press``/``release`` with its own key names; the
    keymap translates them. When several mapped keys are held, the one
    earliest in the keymap wins.
    """

    def __init__(self, keymap: Optional[Dict[str, int]] = None):
        self._keymap = dict(DEFAULT_KEYMAP if keymap is None else keymap)
        for name, value in self._keymap.items():
            if not 0 <= value <= 0xF:
                raise ValueError(f"Key '{name}' maps to ${value:X}, must be 0-F")
        self._held = set()

    @property
    def keymap(self) -> Dict[str, int]:
        return dict(self._keymap)

    def press(self, name: str):
        """Mark a host key as held. Unmapped keys are ignored."""
        if name in self._keymap:
            self._held.add(name)

    def release(self, name: str):
        self._held.discard(name)

    def release_all(self):
        self._held.clear()

    def key_pressed(self) -> Optional[int]:
        for name, value in self._keymap.items():
            if name in self._held:
                return value
        return None


class TerminalBell(AudioDriver):
    """Rings the terminal bell when a beep starts.

    There is no tone to stop; ``stop_beep`` only clears ``beeping``.
    """

    def __init__(self, stream=None):
        self._stream = stream
        self.beeping = False

    def start_beep(self):
        if not self.beeping:
            stream = self._stream or sys.stdout
            stream.write('\a')
            stream.flush()
        self.beeping = True

    def stop_beep(self):
        self.beeping = False


@dataclass
class Drivers:
    """Capability bundle handed to a machine for its whole lifetime."""
    audio: AudioDriver = field(default_factory=NullAudio)
    input: InputDriver = field(default_factory=NullInput)

    @classmethod
    def noop(cls) -> 'Drivers':
        """Silent audio, no keys ever pressed."""
        return cls(NullAudio(), NullInput())
