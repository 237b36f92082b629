"""chip8vm CLI: run a CHIP-8 program headless and dump machine state.

Usage:
    chip8vm game.ch8                       Run 700 cycles (~1 s), print state
    chip8vm game.ch8 -c 21                 Run exactly 21 instructions
    chip8vm game.ch8 -q cosmac             COSMAC VIP quirks
    chip8vm game.ch8 --log-cycle 10        Also dump state after cycle 10

Pipeline:
    1. Load ROM
    2. Build machine with the chosen quirks
    3. Run N cycles, ticking timers at 60 Hz of emulated time
    4. Print debug info and the display
"""

import argparse
import logging
import sys
import time

from rich.console import Console
from rich.logging import RichHandler

from .constants import CYCLES_PER_SECOND
from .drivers import Drivers
from .errors import Chip8Error
from .machine import Machine
from .quirks import Quirks, PRESETS
from .rom import load_rom
from .runner import run as run_machine


def setup_logging(level: int = logging.WARNING):
    """Route library logging through a rich console handler on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True,
                              show_path=False)],
        force=True,
    )


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='chip8vm',
        description='Run a CHIP-8 program headless and print machine state.',
        epilog="""Examples:
  chip8vm ibm-logo.ch8 -c 21          Run 21 instructions
  chip8vm game.ch8 -q superchip       SUPER-CHIP quirks
  chip8vm game.ch8 --no-display       Registers only""")

    parser.add_argument('rom', help='Program image (.ch8)')
    parser.add_argument('-c', '--cycles', type=int, default=CYCLES_PER_SECOND,
                        help=f'Instructions to execute (default: {CYCLES_PER_SECOND})')
    parser.add_argument('-q', '--quirks', choices=PRESETS, default='modern',
                        help='Interpreter quirks preset (default: modern)')
    parser.add_argument('-r', '--rate', type=int, default=CYCLES_PER_SECOND,
                        help=f'Emulated instructions per second, sets timer '
                             f'pacing (default: {CYCLES_PER_SECOND})')
    parser.add_argument('--log-cycle', type=int, default=None, metavar='N',
                        help='Also print debug info after cycle N')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for CXNN')
    parser.add_argument('--no-display', action='store_true',
                        help='Do not print the display')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Debug logging')

    args = parser.parse_args(argv)

    if args.cycles < 0:
        parser.error(f"--cycles must be >= 0, got {args.cycles}")
    if args.rate <= 0:
        parser.error(f"--rate must be positive, got {args.rate}")

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    try:
        return run(args)
    except Chip8Error as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nUnexpected error: {type(e).__name__}: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2


def run(args) -> int:
    """Load, run and report."""
    t0 = time.time()

    rom = load_rom(args.rom)
    print(f"Loaded: {args.rom} ({len(rom):,} bytes)")

    machine = Machine.from_rom(rom, Quirks.from_name(args.quirks),
                               Drivers.noop(), seed=args.seed)
    print(f"Quirks: {args.quirks}")

    def log_cycle(m, n):
        if n == args.log_cycle:
            print(m.format_debug_info(n))

    executed = run_machine(machine, args.cycles, cycles_per_second=args.rate,
                           on_cycle=log_cycle if args.log_cycle else None)

    print(machine.format_debug_info(executed))
    if not args.no_display:
        print(machine.render_text())

    elapsed = time.time() - t0
    print(f"{executed:,} cycles in {elapsed:.3f}s")
    return 0
