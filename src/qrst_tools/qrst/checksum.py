"""
QRST Checksum Calculations
==========================

Weighted Sum (versions below 5)
-------------------------------
The header checksum is the sum of all bytes on the disk, each multiplied
by its offset on the disk, kept as a wrapping 32-bit value. It is
computed per data record and the record checksums are summed:

- Raw and compressed tracks: each byte of the decoded track times
  (position in track + track offset).
- Blank tracks: the filler byte times each offset the track covers,
  whether or not the decoded track was filled with it.

For records that don't overlap this equals the flat weighted sum over
the assembled image, image_checksum().

CRC-32 (version 5 and later)
----------------------------
Version 5 files checksum the compressed data with CRC-32 instead. That
scheme is not implemented; verification of such files is skipped with a
warning.

Reference
---------
- http://fileformats.archiveteam.org/wiki/Quick_Release_Sector_Transfer
"""

from dataclasses import dataclass
from operator import mul
from typing import TYPE_CHECKING, Iterable
import logging

from qrst_tools.errors import ChecksumMismatchError, InvalidRecordTypeError
from qrst_tools.qrst.geometry import Geometry
from qrst_tools.qrst.records import RecordType, TrackRecord

if TYPE_CHECKING:
    from qrst_tools.qrst.parser import QRSTFile

# Logger for this module
logger = logging.getLogger(__name__)


CHECKSUM_MASK = 0xFFFFFFFF


def weighted_sum(data: bytes, base: int = 0) -> int:
    """
    Sum of data[i] * (i + base), wrapped to 32 bits.

    Example:
        >>> weighted_sum(bytes([1, 2, 3]), base=10)
        68
    """
    return sum(map(mul, data, range(base, base + len(data)))) & CHECKSUM_MASK


def record_checksum(record: TrackRecord, geometry: Geometry) -> int:
    """
    Calculate the checksum contribution of one data record.

    Raises:
        OutOfRangeError: If the record lies outside the geometry
        InvalidRecordTypeError: If the record type is unknown
    """
    offset = geometry.track_offset(record.head, record.cylinder)

    if record.record_type in (RecordType.RAW, RecordType.COMPRESSED):
        return weighted_sum(record.data[:geometry.track_length], offset)

    if record.record_type == RecordType.BLANK:
        # filler * (offset + ... + offset + track_length - 1)
        length = geometry.track_length
        span = length * (2 * offset + length - 1) // 2
        return (record.filler * span) & CHECKSUM_MASK

    raise InvalidRecordTypeError(record.record_type)


def calculate_checksum(records: Iterable[TrackRecord], geometry: Geometry) -> int:
    """Sum the record checksums of a file, wrapped to 32 bits."""
    checksum = 0
    for record in records:
        checksum = (checksum + record_checksum(record, geometry)) & CHECKSUM_MASK
    return checksum


def image_checksum(image: bytes) -> int:
    """Weighted sum over a whole assembled disk image."""
    return weighted_sum(image, 0)


@dataclass
class ChecksumResult:
    """
    Result of checking a file's checksum.

    Attributes:
        stored: Checksum declared in the header
        calculated: Checksum computed from the data records
        supported: False when the file's checksum scheme isn't implemented
    """
    stored: int
    calculated: int
    supported: bool = True

    @property
    def is_valid(self) -> bool:
        return self.supported and self.stored == self.calculated


def analyze_checksum(qrst_file: "QRSTFile") -> ChecksumResult:
    """Compute a file's checksum without raising on a mismatch."""
    header = qrst_file.header
    if header.is_extended:
        return ChecksumResult(stored=header.checksum, calculated=0, supported=False)

    calculated = calculate_checksum(qrst_file.records, header.geometry)
    return ChecksumResult(stored=header.checksum, calculated=calculated)


def verify_checksum(qrst_file: "QRSTFile") -> None:
    """
    Verify a file's checksum against its header.

    Raises:
        ChecksumMismatchError: If the computed checksum differs
    """
    result = analyze_checksum(qrst_file)
    if not result.supported:
        logger.warning(
            f"Checksum verification skipped: version {qrst_file.header.version:g} "
            f"files use CRC-32"
        )
        return

    if not result.is_valid:
        raise ChecksumMismatchError(result.stored, result.calculated)

    logger.debug(f"Checksum OK: {result.calculated:08X}")
