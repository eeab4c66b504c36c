"""
QRST Disk Geometry
==================

This module maps QRST capacity codes to the physical disk layout and
computes the linear byte offset of a track in a raw disk image.

Capacity Codes
--------------
The capacity byte (offset 0x0C of the header) identifies the disk format:

    Code    Label
    ----    -----
    0       unknown
    1       360K
    2       1.2M
    3       720K
    4       1.4M
    5       160K
    6       180K
    7       320K

Only 720K, 1.44M and 320K disks have a known geometry. Every other code
maps to the all-zero geometry, which callers must treat as "unsupported".

Head and Cylinder Limits
------------------------
The `heads` and `cylinders` fields hold the largest head and cylinder
index the format uses, not a count. Range checks in track_offset()
accept both limits, and disassembly visits heads 0..heads and cylinders
0..cylinders inclusive.

Reference
---------
- http://fileformats.archiveteam.org/wiki/Quick_Release_Sector_Transfer
"""

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType

from qrst_tools.errors import InvalidOffsetError, OutOfRangeError


class Capacity(IntEnum):
    """Capacity codes stored in the QRST header."""
    UNKNOWN = 0
    SIZE_360K = 1
    SIZE_1200K = 2
    SIZE_720K = 3
    SIZE_1440K = 4
    SIZE_160K = 5
    SIZE_180K = 6
    SIZE_320K = 7

    def get_label(self) -> str:
        """Get the human-readable capacity label."""
        return _CAPACITY_LABELS[self]


_CAPACITY_LABELS = {
    Capacity.UNKNOWN: "unknown",
    Capacity.SIZE_360K: "360K",
    Capacity.SIZE_1200K: "1.2M",
    Capacity.SIZE_720K: "720K",
    Capacity.SIZE_1440K: "1.4M",
    Capacity.SIZE_160K: "160K",
    Capacity.SIZE_180K: "180K",
    Capacity.SIZE_320K: "320K",
}


def capacity_to_string(capacity: int) -> str:
    """
    Return the label for a capacity code.

    Args:
        capacity: The capacity byte from the header

    Returns:
        A label such as "720K" or "1.4M"

    Raises:
        ValueError: If the code is not a known capacity

    Example:
        >>> capacity_to_string(3)
        '720K'
    """
    try:
        return Capacity(capacity).get_label()
    except ValueError:
        raise ValueError(f"invalid capacity code: {capacity}") from None


@dataclass(frozen=True)
class Geometry:
    """
    Disk geometry as far as the QRST format cares about it.

    Attributes:
        heads: Largest head index
        cylinders: Largest cylinder index
        sector_size: Bytes per sector
        sectors_per_track: Sectors in one track
        disk_size: Size of the raw disk image in bytes
    """
    heads: int = 0
    cylinders: int = 0
    sector_size: int = 0
    sectors_per_track: int = 0
    disk_size: int = 0

    @property
    def track_length(self) -> int:
        """Size of one data track in bytes."""
        return self.sector_size * self.sectors_per_track

    @property
    def is_supported(self) -> bool:
        """False for the all-zero geometry of an unknown capacity."""
        return self != UNSUPPORTED_GEOMETRY

    def track_offset(self, head: int, cylinder: int) -> int:
        """
        Compute the start of a track given a head and cylinder.

        Args:
            head: Head index, 0..heads
            cylinder: Cylinder index, 0..cylinders

        Returns:
            Byte offset of the track in the raw disk image

        Raises:
            OutOfRangeError: If head or cylinder is outside the geometry
            InvalidOffsetError: If the computed offset is negative
        """
        if head < 0 or head > self.heads:
            raise OutOfRangeError("head", head, self.heads)
        if cylinder < 0 or cylinder > self.cylinders:
            raise OutOfRangeError("cylinder", cylinder, self.cylinders)

        offset = (cylinder * self.heads + head) * self.sectors_per_track * self.sector_size
        if offset < 0:
            raise InvalidOffsetError(f"negative track offset {offset} (H:{head} C:{cylinder})")
        return offset


UNSUPPORTED_GEOMETRY = Geometry()


def _preset(heads: int, cylinders: int, sectors_per_track: int,
            sector_size: int = 512) -> Geometry:
    return Geometry(
        heads=heads,
        cylinders=cylinders,
        sector_size=sector_size,
        sectors_per_track=sectors_per_track,
        disk_size=heads * cylinders * sectors_per_track * sector_size,
    )


# Capacity code -> geometry. Read-only; built once at import.
GEOMETRY_FROM_CAPACITY = MappingProxyType({
    Capacity.UNKNOWN: UNSUPPORTED_GEOMETRY,
    Capacity.SIZE_720K: _preset(heads=1, cylinders=79, sectors_per_track=9),
    Capacity.SIZE_1440K: _preset(heads=1, cylinders=79, sectors_per_track=18),
    Capacity.SIZE_320K: _preset(heads=1, cylinders=39, sectors_per_track=8),
})


def geometry_from_capacity(capacity: int) -> Geometry:
    """
    Look up the geometry for a capacity code.

    Unlisted codes return the all-zero geometry instead of raising.
    """
    return GEOMETRY_FROM_CAPACITY.get(capacity, UNSUPPORTED_GEOMETRY)
