"""A CHIP-8 virtual machine with a pyglet front end."""

from .cpu import Chip8
from .decode import Instruction, decode
from .errors import (Chip8Error, FetchOutOfBounds, InvalidKeyIndex, LoadError,
                     MemoryOutOfBounds, StackOverflow, StackUnderflow, UnknownOpcode)
from .loader import read_rom
from .state import ExecutionState, Status

__version__ = "0.1.0"

__all__ = [
    "Chip8", "Instruction", "decode", "read_rom", "ExecutionState", "Status",
    "Chip8Error", "FetchOutOfBounds", "MemoryOutOfBounds", "StackOverflow",
    "StackUnderflow", "UnknownOpcode", "InvalidKeyIndex", "LoadError",
]
