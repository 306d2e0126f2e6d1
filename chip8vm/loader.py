import logging
from pathlib import Path

from .constants import MAX_ROM_SIZE
from .errors import LoadError

logger = logging.getLogger(__name__)


def read_rom(path):
    """Read a raw ROM blob (no header) from disk."""
    logger.info("Loading ROM: %s", path)
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise LoadError("cannot read ROM %s: %s" % (path, e)) from e
    if len(data) > MAX_ROM_SIZE:
        raise LoadError("ROM %s is %d bytes, at most %d fit in memory" % (path, len(data), MAX_ROM_SIZE))
    return data
