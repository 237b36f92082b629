"""Error types for chip8vm."""


class Chip8Error(Exception):
    """Base error for chip8vm."""
    pass


class RomLoadError(Chip8Error):
    """Failed to read a program image."""
    pass


class RomTooLargeError(Chip8Error):
    """Program image does not fit between the program start and the end of memory."""
    pass


class UnknownQuirksError(Chip8Error):
    """No quirks preset with the requested name."""
    pass
