"""Streaming reader for gzip-compressed backup archives.

A backup archive is a gzip stream holding a sequence of JSON objects, one per
file, written back to back (optionally separated by whitespace)::

    {"Path": "a/1.txt", "Meta": {...}}
    {"Path": "b/2.txt", "Meta": {...}}

Records are decoded lazily, one object at a time, so an archive of any size is
read with a small buffer. Malformed input is reported as soon as it is seen;
a record is never buffered past a fixed size limit.
"""

import gzip
import io
import json
import logging
import math
import os
import re
import zlib
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from pydantic import ValidationError

from cbfsrestore.core.constants import MAX_RECORD_SIZE, READ_CHUNK_SIZE
from cbfsrestore.core.errors import (
    ArchiveDecodeError,
    ArchiveError,
    ArchiveNotFoundError,
    ArchiveOpenError,
)
from cbfsrestore.schemas.records import ArchiveRecord

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s*")
_STREAM_ERRORS = (OSError, EOFError, zlib.error)
_INCOMPLETE_TAIL = 64


class ArchiveReader:
    """Decompress a backup archive and iterate over its records.

    The record sequence can be consumed exactly once, in archive order.
    """

    def __init__(self, source: BinaryIO, owns_source: bool = False,
                 chunk_size: int = READ_CHUNK_SIZE,
                 max_record_size: int = MAX_RECORD_SIZE):
        """Wrap ``source`` and check that it is a readable gzip stream.

        Args:
            source: Binary stream positioned at the start of the archive
            owns_source: Close ``source`` when the reader is closed
            chunk_size: Number of characters decoded per read
            max_record_size: Largest single record, in characters, the reader
                will buffer before giving up on it

        Raises:
            ArchiveOpenError: If the stream is empty or not gzip-compressed
        """
        self._source = source
        self._owns_source = owns_source
        self._chunk_size = max(1, int(chunk_size))
        self._max_record_size = int(max_record_size)
        self._consumed = False
        self.records_read = 0

        self._gzip = gzip.GzipFile(fileobj=source, mode="rb")
        try:
            head = self._gzip.peek(1)
        except _STREAM_ERRORS as e:
            self.close()
            raise ArchiveOpenError(f"Error uncompressing restore file: {e}") from e
        if not head and _stream_position(source) == 0:
            self.close()
            raise ArchiveOpenError("Error uncompressing restore file: archive is empty")

        self._text = io.TextIOWrapper(self._gzip, encoding="utf-8", newline="")

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __iter__(self) -> Iterator[ArchiveRecord]:
        if self._consumed:
            raise ArchiveError("Archive records can only be read once")
        self._consumed = True
        return self._records()

    def close(self):
        text = getattr(self, "_text", None)
        if text is not None:
            text.close()
        else:
            self._gzip.close()
        if self._owns_source:
            self._source.close()

    def _read_chunk(self) -> str:
        try:
            return self._text.read(self._chunk_size)
        except (UnicodeDecodeError, *_STREAM_ERRORS) as e:
            raise ArchiveDecodeError(
                f"Error reading backup file: {e}", self.records_read + 1
            ) from e

    def _records(self) -> Iterator[ArchiveRecord]:
        decoder = json.JSONDecoder(parse_constant=_reject_constant,
                                   parse_float=_parse_finite_float)
        buf = ""
        pos = 0
        eof = False

        while True:
            pos = _WHITESPACE.match(buf, pos).end()
            if pos == len(buf):
                if eof:
                    return
                buf, pos = self._read_chunk(), 0
                eof = not buf
                continue

            try:
                value, end = decoder.raw_decode(buf, pos)
            except json.JSONDecodeError as e:
                if eof or not _is_incomplete(e, buf):
                    raise ArchiveDecodeError(
                        f"Error reading backup file: {e}", self.records_read + 1
                    ) from e
                # The record continues in the next chunk.
                if len(buf) - pos > self._max_record_size:
                    raise ArchiveDecodeError(
                        f"Error reading backup file: record exceeds "
                        f"{self._max_record_size} characters",
                        self.records_read + 1,
                    ) from e
                chunk = self._read_chunk()
                eof = not chunk
                buf, pos = buf[pos:] + chunk, 0
                continue
            except ValueError as e:
                raise ArchiveDecodeError(
                    f"Error reading backup file: {e}", self.records_read + 1
                ) from e

            record = self._to_record(value)
            pos = end
            self.records_read += 1
            yield record

    def _to_record(self, value) -> ArchiveRecord:
        index = self.records_read + 1
        if not isinstance(value, dict):
            raise ArchiveDecodeError(
                f"Error reading backup file: expected an object, got {type(value).__name__}",
                index,
            )
        try:
            return ArchiveRecord.model_validate(value)
        except ValidationError as e:
            raise ArchiveDecodeError(f"Error reading backup file: {e}", index) from e


def open_archive(path: Union[str, Path], chunk_size: int = READ_CHUNK_SIZE) -> ArchiveReader:
    """Open the archive file at ``path`` for reading.

    Raises:
        ArchiveNotFoundError: If the file does not exist
        ArchiveOpenError: If the file cannot be opened or decompressed
    """
    path = Path(path)
    if not path.exists():
        raise ArchiveNotFoundError(f"Archive file '{path}' not found")
    try:
        source = open(path, "rb")
    except OSError as e:
        raise ArchiveOpenError(f"Error opening restore file: {e}") from e

    logger.debug(f"Opened archive {path} ({os.path.getsize(path)} bytes)")
    return ArchiveReader(source, owns_source=True, chunk_size=chunk_size)


def _is_incomplete(error: json.JSONDecodeError, buf: str) -> bool:
    """True if ``error`` may be cured by appending more input to ``buf``."""
    if error.msg.startswith("Unterminated string"):
        return True
    # A cut-off literal, number or escape fails within its last few characters.
    return len(buf) - error.pos <= _INCOMPLETE_TAIL


def _reject_constant(name: str):
    raise ValueError(f"invalid number {name}")


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value) or math.isnan(value):
        raise ValueError(f"number {text} is out of range")
    return value


def _stream_position(source: BinaryIO) -> int:
    try:
        return source.tell()
    except (OSError, AttributeError):
        return -1
