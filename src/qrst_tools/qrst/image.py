"""
Disk Image Assembly
===================

assemble() scatters the data records of a QRST file into a raw,
sector-linear disk image. disassemble() is the inverse, splitting an
image back into one record per track; it is used when a file is resized
to a different capacity.

Assembly
--------
The image starts zero-filled, so tracks with no record read as zeros.
Records are applied in file order and a later record for the same track
overwrites an earlier one. The image is always exactly disk_size bytes:
any part of a track that would land beyond the end is dropped.
"""

from typing import TYPE_CHECKING, Iterable
import logging

from qrst_tools.qrst.geometry import Geometry
from qrst_tools.qrst.records import TrackRecord

if TYPE_CHECKING:
    from qrst_tools.qrst.parser import QRSTFile

# Logger for this module
logger = logging.getLogger(__name__)


# Filler byte QRST.EXE writes for blank tracks
DEFAULT_FILLER = 0xF6


def assemble_records(records: Iterable[TrackRecord], geometry: Geometry) -> bytes:
    """
    Build a disk image from data records.

    Raises:
        OutOfRangeError: If a record lies outside the geometry
    """
    size = geometry.disk_size
    buffer = bytearray(size)

    for record in records:
        offset = geometry.track_offset(record.head, record.cylinder)
        if offset >= size:
            logger.debug(f"Dropping {record!r}: offset {offset} is past end of disk")
            continue
        end = min(offset + len(record.data), size)
        buffer[offset:end] = record.data[:end - offset]

    return bytes(buffer)


def assemble(qrst_file: "QRSTFile") -> bytes:
    """
    Build the raw disk image for a QRST file.

    Example:
        >>> image = assemble(load_file("DIAGS80B._01"))
        >>> Path("DIAGS80B._01.img").write_bytes(image)
    """
    image = assemble_records(qrst_file.records, qrst_file.header.geometry)
    logger.info(f"Assembled {len(image)} byte image from {len(qrst_file.records)} records")
    return image


def disassemble(
    image: bytes,
    geometry: Geometry,
    filler: int = DEFAULT_FILLER,
    fill_blank: bool = False,
) -> list[TrackRecord]:
    """
    Split a disk image into track records.

    Tracks are taken from the front of the image, cylinder by cylinder and
    head by head (cylinders 0..cylinders, heads 0..heads). A final partial
    track is zero-padded. Once the image runs out, the remaining tracks
    become blank records with the given filler byte.

    Args:
        image: Raw disk image
        geometry: Target disk geometry
        filler: Filler byte for blank records
        fill_blank: Fill blank records' data with the filler byte

    Returns:
        One record per track, in disk order
    """
    track_length = geometry.track_length
    records = []
    pos = 0

    for cylinder in range(geometry.cylinders + 1):
        for head in range(geometry.heads + 1):
            if pos < len(image):
                data = image[pos:pos + track_length].ljust(track_length, b"\x00")
                records.append(TrackRecord.raw(cylinder, head, data))
                pos += track_length
            else:
                records.append(TrackRecord.blank(cylinder, head, track_length,
                                                 filler=filler, fill_blank=fill_blank))

    logger.debug(f"Disassembled {min(pos, len(image))} bytes into {len(records)} records")
    return records
