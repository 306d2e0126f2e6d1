import logging
import sys
from pathlib import Path

import pyglet

from . import config
from .cpu import Chip8
from .errors import LoadError
from .loader import read_rom
from .window import Chip8Window


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv or len(argv) > 2:
        print("Usage: python -m chip8vm <rom-file> [cpu-hz]")
        return 1

    logging.basicConfig(level=config.LOG_LEVEL, format="[%(levelname)s] %(name)s: %(message)s")

    cpu_hz = int(argv[1]) if len(argv) > 1 else config.cpu_hz
    vm = Chip8()
    try:
        vm.load(read_rom(argv[0]))
    except LoadError as e:
        print("Load error:", e)
        return 1

    window = Chip8Window(vm, title="CHIP-8 Emulator - %s" % Path(argv[0]).stem, cpu_hz=cpu_hz)
    pyglet.app.run()
    return window.exit_code


if __name__ == "__main__":
    sys.exit(main())
