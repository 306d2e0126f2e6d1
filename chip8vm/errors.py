"""Faults that halt the interpreter.

Every one of these is fatal: ``Chip8.step`` turns it into a Halted state
and the host decides whether to throw the machine away.
"""


class Chip8Error(Exception):
    """Base class for all interpreter faults."""


class FetchOutOfBounds(Chip8Error):
    def __init__(self, pc):
        self.pc = pc
        super().__init__("PC out of bounds: 0x%04X" % pc)


class MemoryOutOfBounds(Chip8Error):
    def __init__(self, address, length=1):
        self.address = address
        self.length = length
        super().__init__("memory access out of bounds: 0x%04X (+%d)" % (address, length))


class StackOverflow(Chip8Error):
    def __init__(self, pc):
        self.pc = pc
        super().__init__("Stack overflow on CALL at 0x%03X" % pc)


class StackUnderflow(Chip8Error):
    def __init__(self, pc):
        self.pc = pc
        super().__init__("Stack underflow on 00EE at 0x%03X" % pc)


class UnknownOpcode(Chip8Error):
    def __init__(self, opcode, pc):
        self.opcode = opcode
        self.pc = pc
        super().__init__("Unknown opcode: %04X at 0x%03X" % (opcode, pc))


class InvalidKeyIndex(Chip8Error):
    def __init__(self, key):
        self.key = key
        super().__init__("key index out of range: %d" % key)


class LoadError(Chip8Error):
    pass
