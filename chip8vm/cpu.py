# CHIP8 Virtual Machine:
# Input - 16 key states pushed in by the host and checked per cycle.
# Output - 64x32 display (array of pixels either on or off (0 || 1)) & a sound edge for the buzzer.
# CPU - Cowgod's CHIP8 Technical reference http://devernay.free.fr/hacks/chip8/C8TECH10.HTM#0.0
# Memory - 4096 bytes which includes the fonts and the inputted ROM.
#----------------------------------------------------------------------------------------------
# The machine knows nothing about windows, keyboards or speakers. The host calls step() at the
# CPU rate and tick() at 60Hz, pushes keys in with set_keys() and reads display/state back out.

import logging
import random

import numpy as np

from .constants import (DISPLAY_SIZE, FONT_START, FONTSET, GLYPH_SIZE, HEIGHT, KEY_COUNT,
                        MAX_ROM_SIZE, MEMORY_SIZE, PROGRAM_START, REGISTER_COUNT, STACK_SIZE,
                        WIDTH)
from .decode import decode
from .errors import (Chip8Error, FetchOutOfBounds, InvalidKeyIndex, LoadError,
                     MemoryOutOfBounds, StackOverflow, StackUnderflow, UnknownOpcode)
from .state import ExecutionState, Status

logger = logging.getLogger(__name__)


def _random_byte():
    return random.getrandbits(8)


class Chip8:

    def __init__(self, random_byte=None, on_beep=None):
        self.random_byte = random_byte or _random_byte
        self.on_beep = on_beep

        # ---- CPU state ----
        self.memory = bytearray(MEMORY_SIZE)
        self.vram = bytearray(DISPLAY_SIZE)
        self.V = [0] * REGISTER_COUNT
        self.I = 0
        self.pc = PROGRAM_START

        self.stack = np.zeros(STACK_SIZE, dtype=np.uint16)
        self.sp = 0

        self.keys = np.zeros(KEY_COUNT, dtype=np.uint8)
        self.delay = 0
        self.sound = 0

        self.state = ExecutionState.running()
        self._resume_state = None
        self.should_draw = True
        self.cycle_count = 0

        # Load fontset into memory
        self.memory[FONT_START:FONT_START + len(FONTSET)] = bytes(FONTSET)

        # dispatch table
        self.opcodes = [
            (0xFFFF, 0x00E0, self.op_CLS),
            (0xFFFF, 0x00EE, self.op_RET),

            (0xF000, 0x1000, self.op_JP),
            (0xF000, 0x2000, self.op_CALL),
            (0xF000, 0x3000, self.op_SE_Vx_nn),
            (0xF000, 0x4000, self.op_SNE_Vx_nn),
            (0xF00F, 0x5000, self.op_SE_Vx_Vy),
            (0xF000, 0x6000, self.op_LD_Vx_nn),
            (0xF000, 0x7000, self.op_ADD_Vx_nn),

            (0xF00F, 0x8000, self.op_LD_Vx_Vy),
            (0xF00F, 0x8001, self.op_OR),
            (0xF00F, 0x8002, self.op_AND),
            (0xF00F, 0x8003, self.op_XOR),
            (0xF00F, 0x8004, self.op_ADD),
            (0xF00F, 0x8005, self.op_SUB),
            (0xF00F, 0x8006, self.op_SHR),
            (0xF00F, 0x8007, self.op_SUBN),
            (0xF00F, 0x800E, self.op_SHL),

            (0xF00F, 0x9000, self.op_SNE_Vx_Vy),
            (0xF000, 0xA000, self.op_LD_I),
            (0xF000, 0xB000, self.op_JP_V0),
            (0xF000, 0xC000, self.op_RND),
            (0xF000, 0xD000, self.op_DRW),

            (0xF0FF, 0xE09E, self.op_SKP),
            (0xF0FF, 0xE0A1, self.op_SKNP),

            (0xF0FF, 0xF007, self.op_LD_Vx_DT),
            (0xF0FF, 0xF00A, self.op_WAITKEY),
            (0xF0FF, 0xF015, self.op_LD_DT_Vx),
            (0xF0FF, 0xF018, self.op_LD_ST_Vx),
            (0xF0FF, 0xF01E, self.op_ADD_I_Vx),
            (0xF0FF, 0xF029, self.op_FONT),
            (0xF0FF, 0xF033, self.op_BCD),
            (0xF0FF, 0xF055, self.op_STORE),
            (0xF0FF, 0xF065, self.op_LOAD),
        ]

        # opcodes grouped by their high nibble so a lookup only scans one family
        self.funcmap = {}
        for mask, pattern, handler in self.opcodes:
            self.funcmap.setdefault(pattern >> 12, []).append((mask, pattern, handler))

    # ---- Load ROM ----
    def load(self, rom):
        """Copy a raw ROM blob into memory at 0x200.

        Blobs that do not fit below the end of memory are rejected with
        ``LoadError`` and the machine is halted.
        """
        rom = bytes(rom)
        if len(rom) > MAX_ROM_SIZE:
            err = LoadError("ROM is %d bytes, at most %d fit in memory" % (len(rom), MAX_ROM_SIZE))
            self.halt(err)
            raise err
        self.memory[PROGRAM_START:PROGRAM_START + len(rom)] = rom
        logger.info("Loaded %d byte ROM at 0x%03X", len(rom), PROGRAM_START)

    # ---- Input ----
    def set_keys(self, keys):
        keys = list(keys)
        if len(keys) != KEY_COUNT:
            raise ValueError("expected %d key states, got %d" % (KEY_COUNT, len(keys)))
        self.keys[:] = [1 if k else 0 for k in keys]

    def press(self, key):
        self._check_key(key)
        self.keys[key] = 1

    def release(self, key):
        self._check_key(key)
        self.keys[key] = 0

    # ---- Execution control ----
    def pause(self):
        if self.state.status in (Status.PAUSED, Status.HALTED):
            return
        self._resume_state = self.state
        self.state = ExecutionState.paused()
        logger.info("Paused at 0x%03X", self.pc)

    def resume(self):
        if self.state.status is not Status.PAUSED:
            return
        self.state = self._resume_state or ExecutionState.running()
        self._resume_state = None
        logger.info("Resumed at 0x%03X", self.pc)

    def halt(self, error):
        self.state = ExecutionState.halted(error)
        logger.error("Halted: %s", error)

    # ---- Cycle ----
    def step(self):
        """Execute exactly one instruction and return the resulting state.

        Paused and halted machines execute nothing. A pending draw/clear
        signal from the previous step is dropped back to running first.
        Faults never escape: they become ``Halted(error)``.
        """
        if self.state.status in (Status.PAUSED, Status.HALTED):
            return self.state
        if self.state.is_pending:
            self.state = ExecutionState.running()

        try:
            ins = self.fetch()
            handler = self.lookup(ins)
            logger.debug("%03X: %04X %s", self.pc, ins.raw, handler.__name__)
            handler(ins)
        except Chip8Error as e:
            self.halt(e)
        else:
            self.cycle_count += 1
        return self.state

    def fetch(self):
        # guard pc bounds
        if self.pc < 0 or self.pc + 1 >= MEMORY_SIZE:
            raise FetchOutOfBounds(self.pc)
        return decode((self.memory[self.pc] << 8) | self.memory[self.pc + 1])

    def lookup(self, ins):
        for mask, pattern, handler in self.funcmap.get(ins.family, ()):
            if (ins.raw & mask) == pattern:
                return handler
        raise UnknownOpcode(ins.raw, self.pc)

    # ---- timers ----
    def tick(self):
        """Decrement both timers once; the host calls this at 60Hz."""
        if self.state.status in (Status.PAUSED, Status.HALTED):
            return
        if self.delay > 0:
            self.delay -= 1
        if self.sound > 0:
            self.sound -= 1
            if self.sound == 0:
                logger.debug("Sound plays!")
                if self.on_beep is not None:
                    self.on_beep()

    # ---- Snapshots ----
    @property
    def display(self):
        return bytes(self.vram)

    def frame(self):
        """Display as a (HEIGHT, WIDTH) uint8 array, row 0 at the top."""
        return np.frombuffer(self.vram, dtype=np.uint8).reshape(HEIGHT, WIDTH).copy()

    @property
    def registers(self):
        return tuple(self.V)

    @property
    def error(self):
        return self.state.error

    # ---- helpers ----
    def _advance(self, skip=False):
        self.pc += 4 if skip else 2

    def _check_range(self, address, length=1):
        if address < 0 or address + length > MEMORY_SIZE:
            raise MemoryOutOfBounds(address, length)

    def _check_key(self, key):
        if not 0 <= key < KEY_COUNT:
            raise InvalidKeyIndex(key)

    # ---- Opcode Handlers ----

    # 00E0 - Clear the display
    def op_CLS(self, ins):
        self.vram[:] = bytes(DISPLAY_SIZE)
        self.state = ExecutionState.clear_pending()
        self.should_draw = True
        self._advance()

    # 00EE - Return from subroutine
    def op_RET(self, ins):
        if self.sp == 0:
            raise StackUnderflow(self.pc)
        self.sp -= 1
        self.pc = int(self.stack[self.sp]) + 2
        logger.debug("Return to 0x%03X", self.pc)

    # 1nnn - Jump to address nnn
    def op_JP(self, ins):
        self.pc = ins.nnn

    # 2nnn - Call subroutine at nnn
    def op_CALL(self, ins):
        if self.sp >= STACK_SIZE:
            raise StackOverflow(self.pc)
        self.stack[self.sp] = self.pc
        self.sp += 1
        self.pc = ins.nnn
        logger.debug("Call subroutine at 0x%03X", ins.nnn)

    # 3xnn - Skip next instruction if Vx == nn
    def op_SE_Vx_nn(self, ins):
        self._advance(self.V[ins.x] == ins.nn)

    # 4xnn - Skip next instruction if Vx != nn
    def op_SNE_Vx_nn(self, ins):
        self._advance(self.V[ins.x] != ins.nn)

    # 5xy0 - Skip next instruction if Vx == Vy
    def op_SE_Vx_Vy(self, ins):
        self._advance(self.V[ins.x] == self.V[ins.y])

    # 6xnn - Set Vx = nn
    def op_LD_Vx_nn(self, ins):
        self.V[ins.x] = ins.nn
        self._advance()

    # 7xnn - Add immediate, wraps, VF untouched
    def op_ADD_Vx_nn(self, ins):
        self.V[ins.x] = (self.V[ins.x] + ins.nn) & 0xFF
        self._advance()

    # 8xy0..8xyE - Math and logic operations between two registers
    def op_LD_Vx_Vy(self, ins):
        self.V[ins.x] = self.V[ins.y]
        self._advance()

    def op_OR(self, ins):
        self.V[ins.x] |= self.V[ins.y]
        self._advance()

    def op_AND(self, ins):
        self.V[ins.x] &= self.V[ins.y]
        self._advance()

    def op_XOR(self, ins):
        self.V[ins.x] ^= self.V[ins.y]
        self._advance()

    def op_ADD(self, ins):
        total = self.V[ins.x] + self.V[ins.y]
        self.V[0xF] = 1 if total > 0xFF else 0
        self.V[ins.x] = total & 0xFF
        self._advance()

    def op_SUB(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[0xF] = 1 if vx >= vy else 0
        self.V[ins.x] = (vx - vy) & 0xFF
        self._advance()

    def op_SHR(self, ins):
        vx = self.V[ins.x]
        self.V[0xF] = vx & 1
        self.V[ins.x] = vx >> 1
        self._advance()

    def op_SUBN(self, ins):
        vx, vy = self.V[ins.x], self.V[ins.y]
        self.V[0xF] = 1 if vy >= vx else 0
        self.V[ins.x] = (vy - vx) & 0xFF
        self._advance()

    def op_SHL(self, ins):
        vx = self.V[ins.x]
        self.V[0xF] = (vx >> 7) & 1
        self.V[ins.x] = (vx << 1) & 0xFF
        self._advance()

    # 9xy0 - Skip next instruction if Vx != Vy
    def op_SNE_Vx_Vy(self, ins):
        self._advance(self.V[ins.x] != self.V[ins.y])

    # Annn - Set I = nnn
    def op_LD_I(self, ins):
        self.I = ins.nnn
        self._advance()

    # Bnnn - Jump to nnn + V0 (16-bit wrap, bad targets fail on the next fetch)
    def op_JP_V0(self, ins):
        self.pc = (ins.nnn + self.V[0]) & 0xFFFF
        logger.debug("Jump to address V0 + %03X = %04X", ins.nnn, self.pc)

    # Cxnn - Vx = random byte AND nn
    def op_RND(self, ins):
        self.V[ins.x] = (self.random_byte() & 0xFF) & ins.nn
        self._advance()

    # Dxyn - XOR an n-row sprite from memory[I] onto the display at (Vx, Vy)
    def op_DRW(self, ins):
        px = self.V[ins.x]
        py = self.V[ins.y]
        self.V[0xF] = 0
        if ins.n:
            self._check_range(self.I, ins.n)

        collision = 0
        for row in range(ins.n):
            ty = py + row
            if ty >= HEIGHT:
                break
            sprite = self.memory[self.I + row]
            base = ty * WIDTH
            for bit in range(8):
                tx = px + bit
                if tx >= WIDTH:
                    break
                if sprite & (0x80 >> bit):
                    index = base + tx
                    collision |= self.vram[index]
                    self.vram[index] ^= 1

        self.V[0xF] = collision
        self.state = ExecutionState.draw_pending()
        self.should_draw = True
        self._advance()
        logger.debug("Drew sprite, collision=%d", collision)

    # Ex9E / ExA1 - Skip next instruction if key Vx is pressed / not pressed
    def op_SKP(self, ins):
        key = self.V[ins.x]
        self._check_key(key)
        self._advance(bool(self.keys[key]))

    def op_SKNP(self, ins):
        key = self.V[ins.x]
        self._check_key(key)
        self._advance(not self.keys[key])

    # Fx07..Fx65 - timers, memory, I, and key input
    def op_LD_Vx_DT(self, ins):
        self.V[ins.x] = self.delay
        self._advance()

    def op_WAITKEY(self, ins):
        # lowest pressed key wins; with none pressed PC stays put and we report Blocked
        for key in range(KEY_COUNT):
            if self.keys[key]:
                self.V[ins.x] = key
                self.state = ExecutionState.running()
                self._advance()
                return
        self.state = ExecutionState.blocked(ins.x)

    def op_LD_DT_Vx(self, ins):
        self.delay = self.V[ins.x]
        self._advance()

    def op_LD_ST_Vx(self, ins):
        self.sound = self.V[ins.x]
        self._advance()

    def op_ADD_I_Vx(self, ins):
        self.I = (self.I + self.V[ins.x]) & 0xFFFF
        self._advance()

    def op_FONT(self, ins):
        self.I = FONT_START + self.V[ins.x] * GLYPH_SIZE
        self._advance()

    def op_BCD(self, ins):
        self._check_range(self.I, 3)
        v = self.V[ins.x]
        self.memory[self.I] = v // 100
        self.memory[self.I + 1] = (v // 10) % 10
        self.memory[self.I + 2] = v % 10
        self._advance()

    def op_STORE(self, ins):
        self._check_range(self.I, ins.x + 1)
        self.memory[self.I:self.I + ins.x + 1] = bytes(self.V[:ins.x + 1])
        self._advance()

    def op_LOAD(self, ins):
        self._check_range(self.I, ins.x + 1)
        self.V[:ins.x + 1] = list(self.memory[self.I:self.I + ins.x + 1])
        self._advance()
