"""
QRST Data Records
=================

After the header, a QRST file is a sequence of data records, one per
track, in no particular order.

Record Format
-------------
    Byte 0:   Cylinder
    Byte 1:   Head
    Byte 2:   Record type
    Byte 3+:  Type-specific payload

Record Types
------------
- 0 (raw): one track of data, stored verbatim
- 1 (blank): a single filler byte
- 2 (compressed): 16-bit little-endian length, then that many bytes of
  run-length compressed data (see rle.py)

Blank Tracks
------------
QRST.EXE writes a filler byte for blank tracks, but decoders have always
produced a zero-filled track and ignored it. That remains the default;
pass fill_blank=True to fill the track with the filler byte instead. The
filler is kept on the record either way, since the checksum uses it.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import BinaryIO, Iterator, Optional
import logging
import struct

from qrst_tools.errors import InvalidRecordTypeError, TruncatedRecordError
from qrst_tools.qrst.header import read_exact
from qrst_tools.qrst.rle import compress, decompress

# Logger for this module
logger = logging.getLogger(__name__)


RECORD_HEADER_LENGTH = 3


class RecordType(IntEnum):
    """Data record type identifiers."""
    RAW = 0
    BLANK = 1
    COMPRESSED = 2

    def get_description(self) -> str:
        """Get a human-readable name for the record type."""
        return self.name.lower()


@dataclass
class TrackRecord:
    """
    One track's worth of data in a QRST file.

    Attributes:
        cylinder: Cylinder index
        head: Head index
        record_type: How the track is stored on the wire
        data: The decoded track, always one track length long
        length: On-wire payload length of a compressed record
        filler: Filler byte of a blank record
    """
    cylinder: int
    head: int
    record_type: RecordType
    data: bytes = b""
    length: int = 0
    filler: int = 0

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def raw(cls, cylinder: int, head: int, data: bytes) -> "TrackRecord":
        """Create an uncompressed track record."""
        return cls(cylinder=cylinder, head=head, record_type=RecordType.RAW,
                   data=bytes(data))

    @classmethod
    def blank(cls, cylinder: int, head: int, track_length: int,
              filler: int = 0, fill_blank: bool = False) -> "TrackRecord":
        """Create a blank track record."""
        fill = filler if fill_blank else 0
        return cls(cylinder=cylinder, head=head, record_type=RecordType.BLANK,
                   data=bytes((fill,)) * track_length, filler=filler)

    @classmethod
    def compressed(cls, cylinder: int, head: int, data: bytes) -> "TrackRecord":
        """Create a run-length compressed track record."""
        data = bytes(data)
        return cls(cylinder=cylinder, head=head, record_type=RecordType.COMPRESSED,
                   data=data, length=len(compress(data)))

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_bytes(self) -> bytes:
        """Serialize the record in QRST format."""
        header = bytes((self.cylinder, self.head, self.record_type))

        if self.record_type == RecordType.RAW:
            return header + self.data
        if self.record_type == RecordType.BLANK:
            return header + bytes((self.filler,))
        if self.record_type == RecordType.COMPRESSED:
            payload = compress(self.data)
            return header + struct.pack("<H", len(payload)) + payload

        raise InvalidRecordTypeError(self.record_type)

    def get_size(self) -> int:
        """Get the on-wire size of this record in bytes."""
        if self.record_type == RecordType.RAW:
            return RECORD_HEADER_LENGTH + len(self.data)
        if self.record_type == RecordType.BLANK:
            return RECORD_HEADER_LENGTH + 1
        return len(self.to_bytes())

    def __repr__(self) -> str:
        return (
            f"TrackRecord(C:{self.cylinder:02d} H:{self.head} "
            f"{RecordType(self.record_type).get_description()}, {len(self.data)} bytes)"
        )


# =============================================================================
# Reading
# =============================================================================

def read_record(
    stream: BinaryIO,
    track_length: int,
    fill_blank: bool = False,
) -> Optional[TrackRecord]:
    """
    Read the next data record from a stream.

    Args:
        stream: Binary stream positioned at a record boundary
        track_length: Decoded size of one track
        fill_blank: Fill blank tracks with their filler byte instead of zeros

    Returns:
        The decoded record, or None at a clean end of input

    Raises:
        TruncatedRecordError: If the input ends inside the record
        InvalidRecordTypeError: If the type byte is unknown
        DecompressionLengthMismatchError: If a compressed track doesn't
            expand to track_length bytes
    """
    header = read_exact(stream, RECORD_HEADER_LENGTH)
    if not header:
        return None
    if len(header) != RECORD_HEADER_LENGTH:
        raise TruncatedRecordError(
            f"bad data record header: {len(header)} of {RECORD_HEADER_LENGTH} bytes"
        )

    cylinder, head, type_byte = header
    try:
        record_type = RecordType(type_byte)
    except ValueError:
        raise InvalidRecordTypeError(type_byte) from None

    if record_type == RecordType.RAW:
        data = read_exact(stream, track_length)
        if len(data) != track_length:
            raise TruncatedRecordError(
                f"short read in raw track C:{cylinder} H:{head} "
                f"({len(data)} of {track_length} bytes)"
            )
        return TrackRecord.raw(cylinder, head, data)

    if record_type == RecordType.BLANK:
        filler = read_exact(stream, 1)
        if not filler:
            raise TruncatedRecordError(
                f"missing filler byte in blank track C:{cylinder} H:{head}"
            )
        return TrackRecord.blank(cylinder, head, track_length,
                                 filler=filler[0], fill_blank=fill_blank)

    length_bytes = read_exact(stream, 2)
    if len(length_bytes) != 2:
        raise TruncatedRecordError(
            f"missing length in compressed track C:{cylinder} H:{head}"
        )
    length = struct.unpack("<H", length_bytes)[0]
    payload = read_exact(stream, length)
    if len(payload) != length:
        raise TruncatedRecordError(
            f"not enough data in compressed track C:{cylinder} H:{head} "
            f"({len(payload)} of {length} bytes)"
        )

    return TrackRecord(
        cylinder=cylinder,
        head=head,
        record_type=RecordType.COMPRESSED,
        data=decompress(payload, track_length),
        length=length,
    )


def iter_records(
    stream: BinaryIO,
    track_length: int,
    fill_blank: bool = False,
) -> Iterator[TrackRecord]:
    """
    Yield data records until the stream ends at a record boundary.

    Records are yielded in stream order.
    """
    count = 0
    while True:
        record = read_record(stream, track_length, fill_blank=fill_blank)
        if record is None:
            break
        logger.debug(f"Record {count}: {record!r}")
        count += 1
        yield record
