"""Interpreter quirks: behaviors that historical CHIP-8 interpreters disagree on.

Each toggle selects one side of a single ambiguity. A ``Quirks`` record is
chosen once when a machine is built and never changes afterwards.
"""

from dataclasses import dataclass

from .errors import UnknownQuirksError


@dataclass(frozen=True)
class Quirks:
    """Immutable set of interpreter quirk toggles.

    Attributes:
        shift_uses_vy: 8XY6 / 8XYE first copy VY into VX, then shift VX.
            The COSMAC VIP did this; CHIP-48 and SUPER-CHIP shift VX in place.
        load_store_increments_index: FX55 / FX65 leave I pointing just past
            the last register copied (I += X + 1). Later interpreters leave
            I unchanged.
        index_add_sets_vf: FX1E sets VF to 1. The Amiga interpreter flagged
            overflow past the addressable range; the test it used is kept
            as-is and is true for every sum, so with this on VF is always 1.
        jump_uses_vx: BNNN jumps to NNN + VX, where X is the high nibble of
            NNN (CHIP-48 / SUPER-CHIP "BXNN"). Off means NNN + V0.
    """
    shift_uses_vy: bool = True
    load_store_increments_index: bool = False
    index_add_sets_vf: bool = True
    jump_uses_vx: bool = False

    @classmethod
    def modern_chip8(cls) -> 'Quirks':
        """Behavior most modern CHIP-8 programs expect."""
        return cls(shift_uses_vy=True, load_store_increments_index=False,
                   index_add_sets_vf=True, jump_uses_vx=False)

    @classmethod
    def cosmac_vip(cls) -> 'Quirks':
        """The original 1977 COSMAC VIP interpreter."""
        return cls(shift_uses_vy=True, load_store_increments_index=True,
                   index_add_sets_vf=False, jump_uses_vx=False)

    @classmethod
    def superchip(cls) -> 'Quirks':
        """CHIP-48 / SUPER-CHIP 1.1 on HP-48 calculators."""
        return cls(shift_uses_vy=False, load_store_increments_index=False,
                   index_add_sets_vf=False, jump_uses_vx=True)

    @classmethod
    def from_name(cls, name: str) -> 'Quirks':
        """Look up a preset by name (see ``PRESETS``)."""
        try:
            factory = _PRESET_FACTORIES[name.lower()]
        except KeyError:
            raise UnknownQuirksError(
                f"Unknown quirks preset '{name}'. "
                f"Choose one of: {', '.join(PRESETS)}")
        return factory()


_PRESET_FACTORIES = {
    'modern': Quirks.modern_chip8,
    'cosmac': Quirks.cosmac_vip,
    'superchip': Quirks.superchip,
}

PRESETS = tuple(_PRESET_FACTORIES)
