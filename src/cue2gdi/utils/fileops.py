"""Scoped file copy and write helpers."""

import os
import shutil
from pathlib import Path
from typing import BinaryIO

COPY_CHUNK_SIZE = 2352 * 448  # ~1 MiB, whole sectors


def copy_from_offset(source: BinaryIO, destination: Path, offset: int = 0) -> int:
    """Copy an open binary stream from ``offset`` to end-of-file.

    The destination is created (or truncated) and closed before returning,
    on success or failure. The caller owns ``source``.

    Args:
        source: Readable, seekable binary stream
        destination: File to create
        offset: Byte offset to start reading from

    Returns:
        Number of bytes written

    Raises:
        OSError: If the stream cannot be read or the destination written
    """
    source.seek(offset)
    with open(destination, "wb") as dst:
        shutil.copyfileobj(source, dst, COPY_CHUNK_SIZE)
        dst.flush()
        return dst.tell()


def write_text_atomic(path: Path, text: str) -> None:
    """Write text through a temporary sibling file and replace ``path``.

    Readers never observe a partially written file.

    Raises:
        OSError: If the file cannot be written
    """
    temp_path = path.parent / f".{path.name}.tmp"
    try:
        with open(temp_path, "w", encoding="ascii", newline="\n") as f:
            f.write(text)
        os.replace(temp_path, path)
    except OSError:
        if temp_path.exists():
            temp_path.unlink()
        raise
