"""Read-only memory mapping of object files."""

from __future__ import annotations

import mmap
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

from atosym.utils.logging import get_logger

log = get_logger(__name__)

Buffer = Union[mmap.mmap, bytes]


@contextmanager
def open_and_map(path: str | Path) -> Generator[Buffer, None, None]:
    """Map *path* read-only for the duration of the block.

    ``OSError`` from opening or mapping propagates unchanged. Empty files
    cannot be mapped and are yielded as ``b""``.
    """
    with open(path, "rb") as f:
        if Path(path).stat().st_size == 0:
            yield b""
            return
        mapped = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        try:
            yield mapped
        finally:
            try:
                mapped.close()
            except BufferError:
                # A memoryview into the map is still referenced (e.g. from a
                # traceback); the mapping is released when that view is.
                log.debug("mmap_close_deferred", path=str(path))
