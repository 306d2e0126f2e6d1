"""CHIP-8 instruction decoding."""

from typing import NamedTuple


class Instruction(NamedTuple):
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    family: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(raw):
    return Instruction(
        raw=raw,
        family=(raw & 0xF000) >> 12,
        x=(raw & 0x0F00) >> 8,
        y=(raw & 0x00F0) >> 4,
        n=raw & 0x000F,
        nn=raw & 0x00FF,
        nnn=raw & 0x0FFF,
    )
