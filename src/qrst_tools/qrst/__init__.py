"""
QRST Disk Image Handling
========================

This module provides support for QRST (Quick Release Sector Transfer)
files. Compaq used QRST to distribute disk images of its diagnostic
software; QRST.EXE or QRST5.EXE was supplied with the images to write
them back to a floppy drive.

Overview
--------
A QRST file is a 796-byte header followed by one data record per track.
Tracks are stored raw, as a single filler byte (blank), or run-length
compressed. This module provides:
- **load / load_file**: Read a QRST file (header + records)
- **assemble**: Build the raw, sector-linear disk image
- **QRSTBuilder**: Create a QRST file from a raw image
- **resize**: Re-encode a QRST file for a larger disk
- **Checksum utilities**: Compute and verify the header checksum

Quick Start
-----------
Dumping a QRST file to a raw image:

    >>> from qrst_tools.qrst import load_file
    >>> qrst_file = load_file("DIAGS80B._01")
    >>> Path("DIAGS80B._01.img").write_bytes(qrst_file.assemble())

Packing a raw image:

    >>> from qrst_tools.qrst import QRSTBuilder, Capacity
    >>> builder = QRSTBuilder(capacity=Capacity.SIZE_1440K)
    >>> builder.build_to_file(image, "DISK._01")

Reference
---------
- http://fileformats.archiveteam.org/wiki/Quick_Release_Sector_Transfer
"""

# =============================================================================
# Public API Exports
# =============================================================================

# Disk geometry
from qrst_tools.qrst.geometry import (
    Capacity,
    Geometry,
    GEOMETRY_FROM_CAPACITY,
    UNSUPPORTED_GEOMETRY,
    capacity_to_string,
    geometry_from_capacity,
)

# Header codec
from qrst_tools.qrst.header import (
    HEADER_LENGTH,
    MAGIC,
    QRSTHeader,
    parse_header,
)

# Run-length codec
from qrst_tools.qrst.rle import compress, decompress

# Data records
from qrst_tools.qrst.records import (
    RecordType,
    TrackRecord,
    read_record,
    iter_records,
)

# Checksum utilities
from qrst_tools.qrst.checksum import (
    ChecksumResult,
    analyze_checksum,
    calculate_checksum,
    image_checksum,
    record_checksum,
    verify_checksum,
    weighted_sum,
)

# Image assembly
from qrst_tools.qrst.image import (
    DEFAULT_FILLER,
    assemble,
    assemble_records,
    disassemble,
)

# Loader
from qrst_tools.qrst.parser import (
    QRSTFile,
    load,
    loads,
    load_file,
)

# Builder
from qrst_tools.qrst.builder import (
    QRSTBuilder,
    encode_track,
    iter_tracks,
    resize,
)

# =============================================================================
# Module-level __all__ for explicit exports
# =============================================================================

__all__ = [
    # Geometry
    "Capacity",
    "Geometry",
    "GEOMETRY_FROM_CAPACITY",
    "UNSUPPORTED_GEOMETRY",
    "capacity_to_string",
    "geometry_from_capacity",
    # Header
    "HEADER_LENGTH",
    "MAGIC",
    "QRSTHeader",
    "parse_header",
    # Run-length codec
    "compress",
    "decompress",
    # Records
    "RecordType",
    "TrackRecord",
    "read_record",
    "iter_records",
    # Checksum
    "ChecksumResult",
    "analyze_checksum",
    "calculate_checksum",
    "image_checksum",
    "record_checksum",
    "verify_checksum",
    "weighted_sum",
    # Image assembly
    "DEFAULT_FILLER",
    "assemble",
    "assemble_records",
    "disassemble",
    # Loader
    "QRSTFile",
    "load",
    "loads",
    "load_file",
    # Builder
    "QRSTBuilder",
    "encode_track",
    "iter_tracks",
    "resize",
]
