"""Load CHIP-8 program images from disk.

A .ch8 file is a bare big-endian bytecode blob with no header; it is
loaded verbatim at $200.
"""

import os

from .constants import MAX_ROM_SIZE
from .errors import RomLoadError, RomTooLargeError


def load_rom(path: str) -> bytes:
    """Read a program image.

    Raises:
        RomLoadError if the file is missing, unreadable or empty
        RomTooLargeError if it is longer than the program area
    """
    if not os.path.isfile(path):
        raise RomLoadError(f"File not found: {path}")

    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read '{path}': {e}")

    if not data:
        raise RomLoadError(f"Program file is empty: {path}")
    if len(data) > MAX_ROM_SIZE:
        raise RomTooLargeError(
            f"'{os.path.basename(path)}' is {len(data):,} bytes, "
            f"max {MAX_ROM_SIZE:,} bytes")
    return data
