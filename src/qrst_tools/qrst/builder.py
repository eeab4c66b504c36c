"""
QRST File Builder
=================

This module creates QRST files from raw disk images and re-encodes
existing files for a larger disk capacity.

QRSTBuilder
-----------
Encodes a raw image track by track. Each track is stored as:
- a blank record, if the track is all zeros
- a compressed record, if compression is enabled and saves space
- a raw record otherwise

The header checksum is computed from the finished records.

Resizing
--------
resize() assembles a file's image, patches the capacity byte of a copy
of the original header, and splits the image into tracks of the new
geometry. Only growing is supported: there is no policy for discarding
tracks that would not fit on a smaller disk, so shrinking always raises
UnsupportedShrinkError.

Usage Examples
--------------
Packing a raw 720K image:
    >>> builder = QRSTBuilder(capacity=Capacity.SIZE_720K, description=b"DIAGS")
    >>> builder.build_to_file(Path("disk.img").read_bytes(), "DISK._01")

Growing a 720K file to 1.44M:
    >>> bigger = resize(load_file("DIAGS80B._01"), Capacity.SIZE_1440K)
    >>> Path("DIAGS144._01").write_bytes(bigger.to_bytes())
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union
import io
import logging

from qrst_tools.config import CodecConfig, get_default_config
from qrst_tools.errors import UnsupportedCapacityError, UnsupportedShrinkError
from qrst_tools.qrst.geometry import Geometry, geometry_from_capacity
from qrst_tools.qrst.header import CAPACITY_OFFSET, QRSTHeader, parse_header
from qrst_tools.qrst.parser import QRSTFile
from qrst_tools.qrst.records import TrackRecord
from qrst_tools.qrst.rle import compress

# Logger for this module
logger = logging.getLogger(__name__)


def iter_tracks(geometry: Geometry) -> Iterator[tuple[int, int]]:
    """
    Yield (cylinder, head) for every track of a disk, in image order.

    Covers the disk_size bytes of the image exactly once.
    """
    for cylinder in range(geometry.cylinders):
        for head in range(geometry.heads):
            yield cylinder, head


def encode_track(cylinder: int, head: int, data: bytes,
                 compress_tracks: bool = True) -> TrackRecord:
    """Choose the smallest record encoding for one track."""
    if not any(data):
        return TrackRecord.blank(cylinder, head, len(data), filler=0)

    if compress_tracks:
        # compressed record: 2 length bytes + payload
        if 2 + len(compress(data)) < len(data):
            return TrackRecord.compressed(cylinder, head, data)

    return TrackRecord.raw(cylinder, head, data)


# =============================================================================
# QRST Builder
# =============================================================================

@dataclass
class QRSTBuilder:
    """
    Builds QRST files from raw disk images.

    Attributes:
        capacity: Capacity code of the disk (must have a known geometry)
        version: Header version; below 5.0 so the weighted checksum applies
        description: Description field (up to 96 bytes; 60 with a disk label)
        disk_label: Disk label field (up to 720 bytes)
        current_volume: Volume number of this file
        volume_count: Number of volumes in the set
        compress_tracks: Compress tracks when it saves space

    Example:
        >>> builder = QRSTBuilder(capacity=Capacity.SIZE_1440K)
        >>> qrst_file = builder.build(image)
        >>> data = qrst_file.to_bytes()
    """
    capacity: int
    version: float = 1.0
    description: bytes = b""
    disk_label: bytes = b""
    current_volume: int = 1
    volume_count: int = 1
    compress_tracks: bool = True

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        if not geometry_from_capacity(self.capacity).is_supported:
            raise UnsupportedCapacityError(self.capacity)

    @classmethod
    def from_config(cls, capacity: int, config: Optional[CodecConfig] = None,
                    **kwargs) -> "QRSTBuilder":
        """Create a builder using the configured compression setting."""
        config = config or get_default_config()
        kwargs.setdefault("compress_tracks", config.compress_tracks)
        return cls(capacity=capacity, **kwargs)

    @property
    def geometry(self) -> Geometry:
        return geometry_from_capacity(self.capacity)

    def build(self, image: bytes) -> QRSTFile:
        """
        Encode a raw disk image.

        Images shorter than the disk are zero-padded.

        Raises:
            UnsupportedShrinkError: If the image is larger than the disk
        """
        geometry = self.geometry
        if len(image) > geometry.disk_size:
            raise UnsupportedShrinkError(
                len(image), geometry.disk_size,
                f"image ({len(image)} bytes) exceeds disk size ({geometry.disk_size} bytes)",
            )

        header = QRSTHeader.new(
            self.capacity,
            version=self.version,
            description=self.description,
            disk_label=self.disk_label,
            current_volume=self.current_volume,
            volume_count=self.volume_count,
        )
        qrst_file = QRSTFile(header=header)

        image = bytes(image).ljust(geometry.disk_size, b"\x00")
        track_length = geometry.track_length
        for cylinder, head in iter_tracks(geometry):
            offset = geometry.track_offset(head, cylinder)
            qrst_file.records.append(
                encode_track(cylinder, head, image[offset:offset + track_length],
                             compress_tracks=self.compress_tracks)
            )

        qrst_file.update_checksum()

        size = sum(record.get_size() for record in qrst_file.records)
        logger.info(
            f"Built QRST file: {len(qrst_file.records)} records, "
            f"{size + len(header.raw)} bytes for a {geometry.disk_size} byte disk"
        )
        return qrst_file

    def build_bytes(self, image: bytes) -> bytes:
        """Encode a raw disk image and serialize it."""
        return self.build(image).to_bytes()

    def build_to_file(self, image: bytes, filepath: Union[str, Path]) -> int:
        """
        Encode a raw disk image and write it to disk.

        Returns:
            Number of bytes written
        """
        filepath = Path(filepath)
        data = self.build_bytes(image)
        filepath.write_bytes(data)
        return len(data)


# =============================================================================
# Resizing
# =============================================================================

def resize(
    qrst_file: QRSTFile,
    capacity: int,
    config: Optional[CodecConfig] = None,
) -> QRSTFile:
    """
    Re-encode a QRST file for a different (larger or equal) capacity.

    The new header is a copy of the original raw header with the capacity
    byte patched, re-read through parse_header() so the usual checks
    apply. The assembled image is then split into raw records under the
    new geometry, padded with blank records, and the checksum recomputed.

    Raises:
        UnsupportedCapacityError: If the new capacity has no geometry
        UnsupportedShrinkError: If the new disk is smaller than the old one
    """
    config = config or get_default_config()
    image = qrst_file.assemble()

    raw = bytearray(qrst_file.header.raw)
    raw[CAPACITY_OFFSET] = capacity
    header = parse_header(io.BytesIO(raw))

    old_size = qrst_file.header.geometry.disk_size
    new_geometry = header.geometry
    if not new_geometry.is_supported:
        raise UnsupportedCapacityError(capacity)
    if new_geometry.disk_size < old_size:
        raise UnsupportedShrinkError(old_size, new_geometry.disk_size)

    resized = QRSTFile(header=header)
    resized.disassemble(image, filler=config.disassemble_filler,
                        fill_blank=config.fill_blank_tracks)
    resized.update_checksum()

    logger.info(
        f"Resized {qrst_file.header.get_capacity_label()} -> "
        f"{header.get_capacity_label()}: {len(resized.records)} records"
    )
    return resized
