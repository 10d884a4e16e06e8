"""File operations for graph pages.

Reads run on the event loop's default executor so that scanning a graph
suspends at each file read. Writes replace the target atomically with the
temp-file-rename pattern; concurrent writers get last-write-wins.
"""

import asyncio
import os
from functools import partial
from pathlib import Path

import structlog

logger = structlog.get_logger()


async def read_text(path: Path) -> str:
    """
    Read a UTF-8 text file without blocking the event loop.

    Args:
        path: File to read

    Returns:
        File content

    Raises:
        OSError: On file I/O errors
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(path.read_text, encoding="utf-8"))


def atomic_write(path: Path, content: str) -> None:
    """
    Atomically write content to file with temp-file-rename pattern.

    1. Write to temporary file in the same directory
    2. fsync to ensure data is on disk
    3. Atomic rename to replace original file

    Args:
        path: Target file path
        content: Content to write

    Raises:
        OSError: On file I/O errors
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory ensures same filesystem for atomic rename
    temp_path = path.parent / f".{path.name}.tmp.{os.getpid()}"

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # On POSIX systems, this is atomic even if target exists
        temp_path.replace(path)

        logger.debug(
            "atomic_write_success",
            path=str(path),
            size=len(content)
        )

    except Exception as e:
        if temp_path.exists():
            temp_path.unlink()
        logger.error(
            "atomic_write_failed",
            path=str(path),
            error=str(e)
        )
        raise


async def write_text(path: Path, content: str) -> None:
    """Run atomic_write() on the default executor."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, atomic_write, path, content)
