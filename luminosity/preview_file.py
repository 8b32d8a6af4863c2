"""
Reader for the .lrprev preview container files in a catalog's
Previews.lrdata directory.

Each .lrprev file holds a sequence of sections, one per cached preview
resolution, in ascending order of size. Every section starts with a
header:

    4 bytes   marker, always "AgHg"
    2 bytes   header length (includes the marker and this field)
    1 byte    version
    1 byte    kind
    8 bytes   payload length
    8 bytes   padding after the payload
    n bytes   NUL-terminated name, n = header length - 24

followed by the JPEG payload and the padding. Integers are big-endian.
"""

import os
import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from .errors import CorruptFormat
from .logging_setup import get_logger

logger = get_logger(__name__)

PREVIEW_HEADER_MARKER = b"AgHg"

# Length of the marker plus the fixed header fields
PREVIEW_HEADER_FIXED_LENGTH = 24

_FIXED_HEADER = struct.Struct(">HBBQQ")


@dataclass(frozen=True)
class PreviewHeader:
    """Offset and size of one preview image embedded in a .lrprev file."""
    header_length: int
    version: int
    kind: int
    length: int
    padding: int
    name: str
    data_offset: int


def _read_marker(stream: BinaryIO) -> bool:
    """
    Read and validate a section marker. Returns False on a clean end of
    stream.
    """
    marker = stream.read(len(PREVIEW_HEADER_MARKER))
    if not marker:
        return False
    if len(marker) < len(PREVIEW_HEADER_MARKER):
        raise CorruptFormat(f"Not enough bytes for marker at offset {stream.tell() - len(marker)}")
    if marker != PREVIEW_HEADER_MARKER:
        raise CorruptFormat(f"Unknown marker {marker!r} at offset {stream.tell() - len(marker)}")
    return True


def _read_header(stream: BinaryIO, size: int) -> Optional[PreviewHeader]:
    if not _read_marker(stream):
        return None

    fixed = stream.read(_FIXED_HEADER.size)
    if len(fixed) < _FIXED_HEADER.size:
        raise CorruptFormat("Truncated preview header")
    header_length, version, kind, length, padding = _FIXED_HEADER.unpack(fixed)

    name_length = header_length - PREVIEW_HEADER_FIXED_LENGTH
    if name_length < 0:
        raise CorruptFormat(f"Invalid preview header length {header_length}")

    raw_name = stream.read(name_length)
    if len(raw_name) < name_length:
        raise CorruptFormat("Truncated preview header name")
    name = raw_name.split(b"\x00", 1)[0].decode("utf-8", errors="replace")

    data_offset = stream.tell()
    if data_offset + length > size:
        raise CorruptFormat(
            f"Preview payload of {length} bytes at offset {data_offset} "
            f"runs past the end of the file ({size} bytes)")

    # Skip over the payload to the start of the next header; trailing
    # padding may be cut short at the end of the file
    stream.seek(min(data_offset + length + padding, size))

    return PreviewHeader(
        header_length=header_length,
        version=version,
        kind=kind,
        length=length,
        padding=padding,
        name=name,
        data_offset=data_offset,
    )


def parse_headers(stream: BinaryIO) -> List[PreviewHeader]:
    """
    Read the header of every section in a preview container, in file
    order. The stream must be seekable; it is rewound to the start first.

    Raises:
        CorruptFormat: On a bad marker, a truncated header or a payload
            that runs past the end of the stream
    """
    size = stream.seek(0, os.SEEK_END)
    stream.seek(0)
    headers = []
    while True:
        header = _read_header(stream, size)
        if header is None:
            return headers
        headers.append(header)


class PreviewFile:
    """
    An open .lrprev file and its parsed sections. The file stays open
    until close() is called; use it as a context manager.
    """

    def __init__(self, path: str):
        self.path = path
        self._file = open(path, "rb")
        try:
            self.sections = parse_headers(self._file)
        except Exception:
            self._file.close()
            raise
        logger.debug(f"Parsed {len(self.sections)} preview sections from {path}")

    @property
    def closed(self) -> bool:
        return self._file is None or self._file.closed

    def largest(self) -> PreviewHeader:
        """The highest resolution preview, which is always the last section."""
        if not self.sections:
            raise CorruptFormat(f"No preview sections in {self.path}")
        return self.sections[-1]

    def read_data(self, header: PreviewHeader) -> bytes:
        """
        Read the raw JPEG payload for one section.

        Raises:
            IOError: If the file is closed or the payload is truncated
        """
        if self.closed:
            raise IOError(f"Preview file is not open: {self.path}")
        self._file.seek(header.data_offset)
        data = self._file.read(header.length)
        if len(data) < header.length:
            raise IOError(
                f"Short read from {self.path}: expected {header.length} bytes "
                f"at offset {header.data_offset}, got {len(data)}")
        return data

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
