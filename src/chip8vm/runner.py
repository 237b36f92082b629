"""Headless host loop.

Runs a machine for a fixed number of instructions, ticking the timers at
the ratio of instruction rate to timer rate. Nothing sleeps: the run is
deterministic for a given program, seed and input.
"""

from .constants import CYCLES_PER_SECOND, TIMER_HZ


def run(machine, cycles: int, cycles_per_second: int = CYCLES_PER_SECOND,
        timer_hz: int = TIMER_HZ, on_cycle=None) -> int:
    """Execute ``cycles`` instructions on ``machine``.

    Timers are decremented once every ``cycles_per_second / timer_hz``
    instructions. A sound timer going from 0 to nonzero across an
    instruction starts the beep, and an instruction that zeroes a running
    sound timer stops it. A timer that runs out is stopped by the machine.

    Args:
        machine: Machine to step
        cycles: Number of instructions to execute
        cycles_per_second: Instruction rate being emulated
        timer_hz: Timer decay rate
        on_cycle: Optional callback(machine, n) after each instruction (n is 1-based)

    Returns:
        Number of instructions executed

    Raises:
        ValueError for a negative cycle count or a non-positive rate
    """
    if cycles < 0:
        raise ValueError(f"cycles must be >= 0, got {cycles}")
    if cycles_per_second <= 0 or timer_hz <= 0:
        raise ValueError("cycles_per_second and timer_hz must be positive")

    ticks = 0

    for n in range(1, cycles + 1):
        st_before = machine.st
        machine.cycle()
        if st_before == 0 and machine.st > 0:
            machine.drivers.audio.start_beep()
        elif st_before > 0 and machine.st == 0:
            machine.drivers.audio.stop_beep()

        if on_cycle is not None:
            on_cycle(machine, n)

        # Integer arithmetic: one emulated second gives exactly timer_hz ticks
        due = n * timer_hz // cycles_per_second
        while ticks < due:
            machine.decr_timers()
            ticks += 1

    return cycles
