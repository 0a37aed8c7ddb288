"""Byte-level copy and move — the shell's file utility companions.

These are the plain sequential-I/O tools that sit next to the shell:

- ``copy_file(src, dst)`` opens ``src`` read-only and ``dst`` for
  writing (created if absent, truncated otherwise), then moves bytes in
  fixed-size chunks.  A short write is an error, never silently ignored.
- ``move_file(src, dst)`` is a copy followed by removing ``src``.

Both work on raw descriptors (``os.open`` / ``os.read`` / ``os.write``)
rather than Python file objects, so every write is checked exactly as
the kernel reports it.
"""

import argparse
import os
import sys
from collections.abc import Sequence

from nanosh.redirection import OUTPUT_FILE_MODE

CHUNK_SIZE = 100
_DST_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_TRUNC


class ShortWriteError(OSError):
    """Raise when fewer bytes were written than were read."""


def copy_file(
    src: str | os.PathLike[str],
    dst: str | os.PathLike[str],
    *,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Copy the bytes of *src* into *dst*.

    Args:
        src: File to read.
        dst: File to create or truncate.
        chunk_size: Bytes transferred per read/write pair.

    Returns:
        The number of bytes copied.

    Raises:
        OSError: If either file cannot be opened or read.
        ShortWriteError: If a write transfers fewer bytes than requested.

    """
    if chunk_size <= 0:
        msg = f"chunk_size must be positive, got {chunk_size}"
        raise ValueError(msg)

    src_fd = os.open(src, os.O_RDONLY)
    try:
        dst_fd = os.open(dst, _DST_FLAGS, OUTPUT_FILE_MODE)
        try:
            total = 0
            while chunk := os.read(src_fd, chunk_size):
                written = os.write(dst_fd, chunk)
                if written != len(chunk):
                    msg = f"write failed: {written} of {len(chunk)} bytes written to {dst}"
                    raise ShortWriteError(msg)
                total += written
        finally:
            os.close(dst_fd)
    finally:
        os.close(src_fd)
    return total


def move_file(
    src: str | os.PathLike[str],
    dst: str | os.PathLike[str],
    *,
    chunk_size: int = CHUNK_SIZE,
) -> int:
    """Copy *src* to *dst*, then remove *src*.

    Returns:
        The number of bytes copied.

    Raises:
        OSError: If the copy fails, or *src* cannot be removed.

    """
    total = copy_file(src, dst, chunk_size=chunk_size)
    os.unlink(src)
    return total


def _run(prog: str, action: str, argv: Sequence[str] | None) -> None:
    parser = argparse.ArgumentParser(prog=prog, description=f"{action.capitalize()} a file.")
    parser.add_argument("source", help="File to read.")
    parser.add_argument("destination", help="File to create or overwrite.")
    args = parser.parse_args(argv)

    operation = copy_file if action == "copy" else move_file
    try:
        operation(args.source, args.destination)
    except OSError as exc:
        sys.stderr.write(f"{prog}: {exc}\n")
        raise SystemExit(1) from exc
    raise SystemExit(0)


def cp_main(argv: Sequence[str] | None = None) -> None:
    """Entry point for ``nanosh-cp SRC DST``."""
    _run("nanosh-cp", "copy", argv)


def mv_main(argv: Sequence[str] | None = None) -> None:
    """Entry point for ``nanosh-mv SRC DST``."""
    _run("nanosh-mv", "move", argv)
