"""Low-level stream access shared by the loaders.

Files may be plain or gzip/bgzip compressed. Compression is detected from the
gzip magic bytes rather than the file extension, so ``.gz`` names are not
required and uncompressed files named ``.gz`` still load.
"""

import gzip
import re
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

from loguru import logger

from ngsread.io.errors import CorruptDataError, StreamOpenError, TruncatedInputError

GZIP_MAGIC = b"\x1f\x8b"

# Fields are delimited by spaces and tabs only
_DELIMITERS = re.compile(r"[ \t]+")


def is_gzipped(path: Path) -> bool:
    """Return True if the file starts with the gzip magic bytes."""
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


@contextmanager
def open_stream(path: Path, operation: str) -> Iterator[BinaryIO]:
    """Open a possibly-compressed input file for binary reading.

    The handle is closed on every exit path, including errors raised by the
    caller while reading.

    Args:
        path: Input file path.
        operation: Loader operation name, used in error messages.

    Yields:
        Binary file handle that transparently decompresses gzip input.

    Raises:
        StreamOpenError: If the file does not exist or cannot be read.
        TruncatedInputError: If compressed input ends mid-stream.
        CorruptDataError: If compressed input cannot be decompressed.
    """
    path = Path(path)
    try:
        compressed = is_gzipped(path)
        handle = gzip.open(path, "rb") if compressed else open(path, "rb")
    except OSError as e:
        raise StreamOpenError(operation, f"cannot open {path} ({e})") from e

    logger.debug(f"Opened {path} ({'gzip' if compressed else 'plain'})")
    try:
        yield handle
    except EOFError as e:
        raise TruncatedInputError(
            operation, f"compressed file {path} ended early"
        ) from e
    except (gzip.BadGzipFile, zlib.error) as e:
        raise CorruptDataError(operation, f"cannot decompress {path} ({e})") from e
    finally:
        handle.close()


def read_line(handle: BinaryIO) -> str | None:
    """Read the next line with its trailing newline removed.

    Returns:
        Line content, or None at end of stream.
    """
    raw = handle.readline()
    if not raw:
        return None
    return raw.decode(errors="replace").rstrip("\r\n")


def read_exact(handle: BinaryIO, n_bytes: int) -> bytes:
    """Read up to ``n_bytes``; a shorter result means the stream ended."""
    return handle.read(n_bytes)


def at_end(handle: BinaryIO) -> bool:
    """Check for trailing data by attempting to read one more byte."""
    return handle.read(1) == b""


def tokenize(line: str) -> list[str]:
    """Split a line on spaces and tabs, dropping empty fields."""
    return [field for field in _DELIMITERS.split(line) if field]


def log_skipped_header(operation: str, line: str, sites_read: int) -> None:
    """Report a header line that is being skipped.

    A header after data rows usually means the declared site count is wrong,
    so it is flagged with a warning but not treated as fatal.
    """
    logger.info("Header found! Skipping line...")
    if sites_read > 0:
        logger.warning(
            f"{operation}: header found but not on first line. Is this an error? "
            f"Line: {line!r}"
        )
