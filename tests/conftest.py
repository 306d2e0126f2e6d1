"""Shared fixtures for the CHIP-8 interpreter tests."""
import pytest

from chip8vm import Chip8

RANDOM_BYTE = 0xAB


def program(*opcodes):
    """Pack 16-bit opcodes big-endian, the way ROMs store them."""
    return b"".join(op.to_bytes(2, "big") for op in opcodes)


@pytest.fixture
def beeps():
    return []


@pytest.fixture
def vm(beeps):
    return Chip8(random_byte=lambda: RANDOM_BYTE, on_beep=lambda: beeps.append(True))


@pytest.fixture
def execute(vm):
    """Write one opcode at the current PC and step it."""
    def _execute(opcode):
        vm.memory[vm.pc] = opcode >> 8
        vm.memory[vm.pc + 1] = opcode & 0xFF
        return vm.step()
    return _execute


@pytest.fixture
def run(vm):
    """Load a program at 0x200 and step once per instruction (or ``steps`` times)."""
    def _run(*opcodes, steps=None):
        vm.load(program(*opcodes))
        state = None
        for _ in range(len(opcodes) if steps is None else steps):
            state = vm.step()
        return state
    return _run
