"""
QRST Header Codec
=================

This module parses and validates the fixed 796-byte QRST header.

Header Layout
-------------
All integers are little-endian.

    Offset  Size    Description
    ------  ----    -----------
    0x000   4       Magic "QRST"
    0x004   4       Version (IEEE-754 float32 bit pattern)
    0x008   4       Checksum
    0x00C   1       Capacity code
    0x00D   1       Current volume
    0x00E   1       Volume count
    0x00F   96      Description
    0x04B   720     Disk label
    0x31B   1       Trailer (0 if version < 5, 2 if version >= 5)

The raw header bytes are the single source of truth: every field is a
view over `QRSTHeader.raw`, and the checksum and capacity setters patch
the raw buffer in place so a re-encoded file keeps every byte it was
loaded with.

The description and disk label fields overlap (0x4B-0x6E). Both views
read the shared bytes; when building a header the label is written last.

Version 5 files carry extended headers after the trailer. They are not
parsed.
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Optional
import logging
import struct

from qrst_tools.errors import BadMagicError, BadTrailerError, TruncatedHeaderError
from qrst_tools.qrst.geometry import Geometry, capacity_to_string, geometry_from_capacity

# Logger for this module
logger = logging.getLogger(__name__)


HEADER_LENGTH = 796
MAGIC = b"QRST"

VERSION_OFFSET = 0x04
CHECKSUM_OFFSET = 0x08
CAPACITY_OFFSET = 0x0C
CURRENT_VOLUME_OFFSET = 0x0D
VOLUME_COUNT_OFFSET = 0x0E
DESCRIPTION_OFFSET = 0x0F
DESCRIPTION_LENGTH = 96
DISK_LABEL_OFFSET = 0x4B
DISK_LABEL_LENGTH = 720
TRAILER_OFFSET = 0x31B

# Versions at or above this carry trailer 2 and a CRC-32 checksum
EXTENDED_VERSION = 5.0


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """
    Read up to `size` bytes, retrying short reads until EOF.

    Returns fewer than `size` bytes only when the stream is exhausted.
    """
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def expected_trailer(version: float) -> Optional[int]:
    """
    Trailer byte required for a header version.

    A NaN version is neither below nor at or above 5.0; it requires no
    particular trailer and None is returned.
    """
    if version >= EXTENDED_VERSION:
        return 2
    if version < EXTENDED_VERSION:
        return 0
    return None


@dataclass
class QRSTHeader:
    """
    The QRST file header.

    Attributes:
        raw: The 796 header bytes as read from (or written to) the file
    """
    raw: bytearray = field(repr=False)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_bytes(cls, data: bytes) -> "QRSTHeader":
        """
        Parse and validate a header from bytes.

        Args:
            data: At least 796 bytes; anything beyond the header is ignored

        Raises:
            TruncatedHeaderError: If fewer than 796 bytes are given
            BadMagicError: If the magic isn't "QRST"
            BadTrailerError: If the trailer doesn't match the version
        """
        if len(data) < HEADER_LENGTH:
            raise TruncatedHeaderError(HEADER_LENGTH, len(data))

        header = cls(raw=bytearray(data[:HEADER_LENGTH]))
        header.validate()
        return header

    @classmethod
    def new(
        cls,
        capacity: int,
        version: float = 1.0,
        description: bytes = b"",
        disk_label: bytes = b"",
        current_volume: int = 1,
        volume_count: int = 1,
    ) -> "QRSTHeader":
        """
        Build a fresh header with a zero checksum.

        Description and disk label are truncated or NUL-padded to their
        fixed field sizes. The label overlaps the description from 0x4B and
        is only written when given; a description with a label keeps its
        first 60 bytes.
        """
        raw = bytearray(HEADER_LENGTH)
        raw[0:4] = MAGIC
        raw[VERSION_OFFSET:VERSION_OFFSET + 4] = struct.pack("<f", version)
        raw[CAPACITY_OFFSET] = capacity
        raw[CURRENT_VOLUME_OFFSET] = current_volume
        raw[VOLUME_COUNT_OFFSET] = volume_count
        raw[DESCRIPTION_OFFSET:DESCRIPTION_OFFSET + DESCRIPTION_LENGTH] = (
            description[:DESCRIPTION_LENGTH].ljust(DESCRIPTION_LENGTH, b"\x00")
        )
        if disk_label:
            raw[DISK_LABEL_OFFSET:DISK_LABEL_OFFSET + DISK_LABEL_LENGTH] = (
                disk_label[:DISK_LABEL_LENGTH].ljust(DISK_LABEL_LENGTH, b"\x00")
            )
        header = cls(raw=raw)
        raw[TRAILER_OFFSET] = expected_trailer(header.version) or 0
        header.validate()
        return header

    def validate(self) -> None:
        """Check the magic and the version-dependent trailer."""
        if self.magic != MAGIC:
            raise BadMagicError(self.magic)

        expected = expected_trailer(self.version)
        if expected is not None and self.trailer != expected:
            raise BadTrailerError(self.version, self.trailer)

    def copy(self) -> "QRSTHeader":
        """Return a header with its own copy of the raw bytes."""
        return QRSTHeader(raw=bytearray(self.raw))

    def to_bytes(self) -> bytes:
        """Serialize the header to 796 bytes."""
        return bytes(self.raw)

    # =========================================================================
    # Field Views
    # =========================================================================

    @property
    def magic(self) -> bytes:
        return bytes(self.raw[0:4])

    @property
    def version(self) -> float:
        """Version number, the float32 reinterpretation of bytes 4-7."""
        return struct.unpack_from("<f", self.raw, VERSION_OFFSET)[0]

    @property
    def checksum_bytes(self) -> bytes:
        """The checksum field exactly as stored."""
        return bytes(self.raw[CHECKSUM_OFFSET:CHECKSUM_OFFSET + 4])

    @property
    def checksum(self) -> int:
        """The checksum field as a little-endian 32-bit integer."""
        return struct.unpack_from("<I", self.raw, CHECKSUM_OFFSET)[0]

    @checksum.setter
    def checksum(self, value: int) -> None:
        struct.pack_into("<I", self.raw, CHECKSUM_OFFSET, value & 0xFFFFFFFF)

    @property
    def capacity(self) -> int:
        return self.raw[CAPACITY_OFFSET]

    @capacity.setter
    def capacity(self, value: int) -> None:
        self.raw[CAPACITY_OFFSET] = value

    @property
    def current_volume(self) -> int:
        return self.raw[CURRENT_VOLUME_OFFSET]

    @property
    def volume_count(self) -> int:
        return self.raw[VOLUME_COUNT_OFFSET]

    @property
    def description(self) -> bytes:
        return bytes(self.raw[DESCRIPTION_OFFSET:DESCRIPTION_OFFSET + DESCRIPTION_LENGTH])

    @property
    def disk_label(self) -> bytes:
        return bytes(self.raw[DISK_LABEL_OFFSET:DISK_LABEL_OFFSET + DISK_LABEL_LENGTH])

    @property
    def trailer(self) -> int:
        return self.raw[TRAILER_OFFSET]

    @property
    def geometry(self) -> Geometry:
        """Disk geometry for the capacity code (all-zero if unknown)."""
        return geometry_from_capacity(self.capacity)

    @property
    def is_extended(self) -> bool:
        """True for version 5 and later files."""
        return self.version >= EXTENDED_VERSION

    def get_description(self) -> str:
        """Description as text, with NUL and space padding removed."""
        return self.description.rstrip(b"\x00 ").decode("latin-1")

    def get_capacity_label(self) -> str:
        """Capacity label, or a hex code for unknown capacities."""
        try:
            return capacity_to_string(self.capacity)
        except ValueError:
            return f"0x{self.capacity:02X}"


def parse_header(stream: BinaryIO) -> QRSTHeader:
    """
    Read and validate a QRST header from a binary stream.

    Exactly 796 bytes are consumed; the stream is left positioned at the
    first data record.

    Raises:
        TruncatedHeaderError: If the stream ends before 796 bytes
        BadMagicError: If the magic isn't "QRST"
        BadTrailerError: If the trailer doesn't match the version
    """
    data = read_exact(stream, HEADER_LENGTH)
    header = QRSTHeader.from_bytes(data)
    logger.debug(
        f"QRST header: version {header.version:g}, "
        f"capacity {header.get_capacity_label()}, "
        f"volume {header.current_volume}/{header.volume_count}"
    )
    if not header.geometry.is_supported:
        logger.warning(f"No disk geometry for capacity code {header.capacity}")
    return header
