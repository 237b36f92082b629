"""CHIP-8 memory map, display geometry and timing constants.

Memory map:
    $000-$04F   Unused (interpreter area on the original hardware)
    $050-$09F   Font glyphs 0-F, 5 bytes each
    $200-$FFF   Program image
"""

MEMORY_SIZE = 4096
ADDRESS_MASK = MEMORY_SIZE - 1

# Hex digit glyphs, 4 pixels wide (high nibble), 5 rows tall
FONT = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])
FONT_START = 0x050
GLYPH_SIZE = 5

PROGRAM_START = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START   # 3584 bytes

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32

NUM_REGISTERS = 16
FLAG_REGISTER = 0xF    # VF: carry / borrow / collision

CYCLES_PER_SECOND = 700   # Default instruction rate
TIMER_HZ = 60             # Delay and sound timer decay rate
