"""CHIP-8 virtual machine: state plus the fetch/decode/execute step.

State:
    memory      4 KB, font at $050, program at $200
    display     64x32 booleans, numpy array indexed [row, column]
    V0-VF       8-bit registers; VF doubles as carry/borrow/collision flag
    I           16-bit index register
    pc          Address of the next instruction
    stack       Return addresses (unbounded)
    dt, st      Delay and sound timers, decremented by the host at 60 Hz

The host drives two independent steps: ``cycle()`` executes one
instruction, ``decr_timers()`` ticks both timers. The host reads
``display`` and ``is_dirty`` to render, and resets ``is_dirty`` itself.

Malformed input never stops the machine: unknown opcodes and returns with
an empty stack are logged and execution continues at the next instruction.
"""

import logging
from typing import Optional

import numpy as np

from .constants import (MEMORY_SIZE, ADDRESS_MASK, FONT, FONT_START, GLYPH_SIZE,
                        PROGRAM_START, MAX_ROM_SIZE, DISPLAY_WIDTH, DISPLAY_HEIGHT,
                        NUM_REGISTERS, FLAG_REGISTER)
from .drivers import Drivers
from .errors import RomTooLargeError
from .quirks import Quirks

logger = logging.getLogger(__name__)

VF = FLAG_REGISTER


class Machine:
    """A CHIP-8 interpreter instance."""

    def __init__(self, quirks: Quirks, drivers: Drivers, seed: Optional[int] = None):
        self.memory = bytearray(MEMORY_SIZE)
        self.memory[FONT_START:FONT_START + len(FONT)] = FONT
        self.display = np.zeros((DISPLAY_HEIGHT, DISPLAY_WIDTH), dtype=bool)
        self.pc = PROGRAM_START
        self.index = 0
        self.stack = []

        self.dt = 0
        self.st = 0
        self.registers = bytearray(NUM_REGISTERS)

        self.is_dirty = False

        self.quirks = quirks
        self.drivers = drivers
        self._rng = np.random.default_rng(seed)

        # First-nibble dispatch; groups 0, 8, E and F decode further
        self._ops = {
            0x0: self._op_0nnn,
            0x1: self._op_jump,
            0x2: self._op_call,
            0x3: self._op_skip_eq_imm,
            0x4: self._op_skip_ne_imm,
            0x5: self._op_skip_eq_reg,
            0x6: self._op_load_imm,
            0x7: self._op_add_imm,
            0x8: self._op_alu,
            0x9: self._op_skip_ne_reg,
            0xA: self._op_load_index,
            0xB: self._op_jump_offset,
            0xC: self._op_random,
            0xD: self._op_draw,
            0xE: self._op_key_skip,
            0xF: self._op_misc,
        }

    @classmethod
    def from_rom(cls, rom: bytes, quirks: Optional[Quirks] = None,
                 drivers: Optional[Drivers] = None,
                 seed: Optional[int] = None) -> 'Machine':
        """Build a machine with ``rom`` loaded at the program start address.

        Args:
            rom: Raw program image (.ch8)
            quirks: Interpreter quirks (default: modern CHIP-8)
            drivers: Audio and input capabilities (default: no-op)
            seed: Seed for CXNN random numbers, for reproducible runs

        Raises:
            RomTooLargeError if the image does not fit in memory
        """
        if len(rom) > MAX_ROM_SIZE:
            raise RomTooLargeError(
                f"Program is {len(rom)} bytes; at most {MAX_ROM_SIZE} bytes "
                f"fit between ${PROGRAM_START:03X} and the end of memory")

        machine = cls(quirks if quirks is not None else Quirks.modern_chip8(),
                      drivers if drivers is not None else Drivers.noop(),
                      seed=seed)
        machine.memory[PROGRAM_START:PROGRAM_START + len(rom)] = rom
        return machine

    # ── Timers ──

    def decr_timers(self):
        """Tick the delay and sound timers once (60 Hz cadence)."""
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1
            if self.st == 0:
                self.drivers.audio.stop_beep()

    # ── Fetch / decode / execute ──

    def cycle(self):
        """Execute one instruction."""
        instr = (self.memory[self.pc & ADDRESS_MASK] << 8) | \
            self.memory[(self.pc + 1) & ADDRESS_MASK]
        self.pc = (self.pc + 2) & 0xFFFF
        self._ops[instr >> 12](instr)

    def _unknown(self, instr: int):
        logger.error("Unknown instruction: %04X", instr)

    def _skip(self):
        self.pc = (self.pc + 2) & 0xFFFF

    def _op_0nnn(self, instr):
        if instr == 0x00E0:
            # Clear the display
            self.display.fill(False)
            self.is_dirty = True
        elif instr == 0x00EE:
            # Return from subroutine
            if self.stack:
                self.pc = self.stack.pop()
            else:
                logger.warning("Attempted to return from a subroutine with an "
                               "empty stack at $%03X", self.pc - 2)
        else:
            # 0NNN machine code routines are not supported
            self._unknown(instr)

    def _op_jump(self, instr):
        self.pc = instr & 0x0FFF

    def _op_call(self, instr):
        self.stack.append(self.pc)
        self.pc = instr & 0x0FFF

    def _op_skip_eq_imm(self, instr):
        if self.registers[(instr >> 8) & 0xF] == instr & 0xFF:
            self._skip()

    def _op_skip_ne_imm(self, instr):
        if self.registers[(instr >> 8) & 0xF] != instr & 0xFF:
            self._skip()

    def _op_skip_eq_reg(self, instr):
        if instr & 0xF != 0:
            self._unknown(instr)
            return
        if self.registers[(instr >> 8) & 0xF] == self.registers[(instr >> 4) & 0xF]:
            self._skip()

    def _op_skip_ne_reg(self, instr):
        if instr & 0xF != 0:
            self._unknown(instr)
            return
        if self.registers[(instr >> 8) & 0xF] != self.registers[(instr >> 4) & 0xF]:
            self._skip()

    def _op_load_imm(self, instr):
        self.registers[(instr >> 8) & 0xF] = instr & 0xFF

    def _op_add_imm(self, instr):
        # Wraps; VF untouched
        x = (instr >> 8) & 0xF
        self.registers[x] = (self.registers[x] + (instr & 0xFF)) & 0xFF

    def _op_load_index(self, instr):
        self.index = instr & 0x0FFF

    def _op_jump_offset(self, instr):
        x = (instr >> 8) & 0xF if self.quirks.jump_uses_vx else 0
        self.pc = (instr & 0x0FFF) + self.registers[x]

    def _op_random(self, instr):
        x = (instr >> 8) & 0xF
        self.registers[x] = int(self._rng.integers(0, 256)) & instr & 0xFF

    # ── 8XYN: register-to-register arithmetic ──

    def _op_alu(self, instr):
        x = (instr >> 8) & 0xF
        y = (instr >> 4) & 0xF
        op = instr & 0xF
        v = self.registers
        vx, vy = v[x], v[y]

        if op == 0x0:
            v[x] = vy
        elif op == 0x1:
            v[x] = vx | vy
        elif op == 0x2:
            v[x] = vx & vy
        elif op == 0x3:
            v[x] = vx ^ vy
        elif op == 0x4:
            total = vx + vy
            v[x] = total & 0xFF
            v[VF] = 1 if total > 0xFF else 0
        elif op == 0x5:
            # VF = NOT borrow
            v[x] = (vx - vy) & 0xFF
            v[VF] = 1 if vx >= vy else 0
        elif op == 0x7:
            v[x] = (vy - vx) & 0xFF
            v[VF] = 1 if vy >= vx else 0
        elif op == 0x6:
            if self.quirks.shift_uses_vy:
                vx = vy
            v[x] = vx >> 1
            v[VF] = vx & 0x01
        elif op == 0xE:
            if self.quirks.shift_uses_vy:
                vx = vy
            v[x] = (vx << 1) & 0xFF
            v[VF] = (vx & 0x80) >> 7
        else:
            self._unknown(instr)

    # ── DXYN: sprite drawing ──

    def _op_draw(self, instr):
        x0 = self.registers[(instr >> 8) & 0xF] % DISPLAY_WIDTH
        y0 = self.registers[(instr >> 4) & 0xF] % DISPLAY_HEIGHT
        n = instr & 0xF

        self.registers[VF] = 0
        self.is_dirty = True

        # Clip at the right and bottom edges, no wraparound
        height = min(n, DISPLAY_HEIGHT - y0)
        width = min(8, DISPLAY_WIDTH - x0)
        if height == 0:
            return

        rows = np.array([self.memory[(self.index + i) & ADDRESS_MASK]
                         for i in range(height)], dtype=np.uint8)
        sprite = np.unpackbits(rows[:, np.newaxis], axis=1)[:, :width].astype(bool)

        target = self.display[y0:y0 + height, x0:x0 + width]
        if np.any(target & sprite):
            self.registers[VF] = 1
        target ^= sprite

    # ── EX9E / EXA1: key skips ──

    def _op_key_skip(self, instr):
        low = instr & 0xFF
        if low not in (0x9E, 0xA1):
            self._unknown(instr)
            return
        pressed = self.drivers.input.key_pressed() == self.registers[(instr >> 8) & 0xF]
        if pressed == (low == 0x9E):
            self._skip()

    # ── FXNN: timers, index, memory blocks, key wait ──

    def _op_misc(self, instr):
        x = (instr >> 8) & 0xF
        low = instr & 0xFF
        v = self.registers

        if low == 0x07:
            v[x] = self.dt
        elif low == 0x0A:
            # Blocks by re-running this instruction until a key is held
            key = self.drivers.input.key_pressed()
            if key is None:
                self.pc = (self.pc - 2) & 0xFFFF
            else:
                logger.debug("Key pressed: %X", key)
                v[x] = key & 0xF
        elif low == 0x15:
            self.dt = v[x]
        elif low == 0x18:
            self.st = v[x]
        elif low == 0x1E:
            result = (self.index + v[x]) & 0xFFFF
            self.index = result
            # Holds for every 16-bit result, so VF is 1 whenever the quirk is on
            if (result <= 0x0FFF or result >= 0x1000) and self.quirks.index_add_sets_vf:
                v[VF] = 1
        elif low == 0x29:
            self.index = FONT_START + (v[x] & 0xF) * GLYPH_SIZE
        elif low == 0x33:
            value = v[x]
            self.memory[self.index & ADDRESS_MASK] = value // 100
            self.memory[(self.index + 1) & ADDRESS_MASK] = (value // 10) % 10
            self.memory[(self.index + 2) & ADDRESS_MASK] = value % 10
        elif low == 0x55:
            for i in range(x + 1):
                self.memory[(self.index + i) & ADDRESS_MASK] = v[i]
            if self.quirks.load_store_increments_index:
                self.index = (self.index + x + 1) & 0xFFFF
        elif low == 0x65:
            for i in range(x + 1):
                v[i] = self.memory[(self.index + i) & ADDRESS_MASK]
            if self.quirks.load_store_increments_index:
                self.index = (self.index + x + 1) & 0xFFFF
        else:
            self._unknown(instr)

    # ── Debug observables ──

    def debug_state(self) -> dict:
        """Snapshot of the register file, pc, I, stack and timers."""
        return {
            'registers': list(self.registers),
            'pc': self.pc,
            'index': self.index,
            'stack': list(self.stack),
            'dt': self.dt,
            'st': self.st,
        }

    def format_debug_info(self, cycle: Optional[int] = None) -> str:
        """Human-readable dump of ``debug_state()``."""
        state = self.debug_state()
        title = f"CYCLE {cycle}" if cycle is not None else "MACHINE"
        regs = state['registers']
        lines = [f"=====BEGIN DEBUG INFO FOR {title}====="]
        for row in range(0, NUM_REGISTERS, 8):
            lines.append('  ' + '  '.join(f"V{i:X}=${regs[i]:02X}"
                                          for i in range(row, row + 8)))
        lines.append(f"  PC=${state['pc']:03X}  I=${state['index']:03X}  "
                     f"DT={state['dt']}  ST={state['st']}")
        stack = ' '.join(f"${addr:03X}" for addr in state['stack']) or '(empty)'
        lines.append(f"  Stack: {stack}")
        lines.append(f"======END DEBUG INFO FOR {title}======")
        return '\n'.join(lines)

    def render_text(self, on: str = '#', off: str = '.') -> str:
        """Display as text, one line per pixel row."""
        return '\n'.join(''.join(on if px else off for px in row)
                         for row in self.display)
