"""
QRST Tools - Compaq QRST Floppy Image Codec
===========================================

This package decodes QRST (Quick Release Sector Transfer) archives into
raw, sector-linear floppy disk images, and encodes raw images back into
QRST files.

Main Components
---------------
- **qrst**: The codec
    Header parsing, track records, run-length decompression, disk
    geometry, checksums, and image assembly/disassembly

- **cli**: Command-line tool (qrst)
    dump, info, verify, resize and pack commands

Quick Start
-----------
Convert a QRST file to a raw image:
    >>> from qrst_tools.qrst import load_file
    >>> qrst_file = load_file("DIAGS80B._01")
    >>> image = qrst_file.assemble()

Or use the command-line tool:
    $ qrst dump DIAGS80B._01
    $ qrst info DIAGS80B._01

Reference Documentation
-----------------------
- File format: http://fileformats.archiveteam.org/wiki/Quick_Release_Sector_Transfer
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from qrst_tools.errors import (
    QRSTError,
    QRSTFormatError,
    TruncatedHeaderError,
    BadMagicError,
    BadTrailerError,
    TruncatedRecordError,
    InvalidRecordTypeError,
    DecompressionLengthMismatchError,
    GeometryError,
    OutOfRangeError,
    InvalidOffsetError,
    UnsupportedCapacityError,
    ChecksumMismatchError,
    ResizeError,
    UnsupportedShrinkError,
)

from qrst_tools.config import CodecConfig

from qrst_tools.qrst import (
    Capacity,
    Geometry,
    QRSTHeader,
    RecordType,
    TrackRecord,
    QRSTFile,
    QRSTBuilder,
    capacity_to_string,
    geometry_from_capacity,
    parse_header,
    decompress,
    read_record,
    assemble,
    disassemble,
    load,
    loads,
    load_file,
    resize,
)

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "QRSTError",
    "QRSTFormatError",
    "TruncatedHeaderError",
    "BadMagicError",
    "BadTrailerError",
    "TruncatedRecordError",
    "InvalidRecordTypeError",
    "DecompressionLengthMismatchError",
    "GeometryError",
    "OutOfRangeError",
    "InvalidOffsetError",
    "UnsupportedCapacityError",
    "ChecksumMismatchError",
    "ResizeError",
    "UnsupportedShrinkError",
    # Configuration
    "CodecConfig",
    # Codec
    "Capacity",
    "Geometry",
    "QRSTHeader",
    "RecordType",
    "TrackRecord",
    "QRSTFile",
    "QRSTBuilder",
    "capacity_to_string",
    "geometry_from_capacity",
    "parse_header",
    "decompress",
    "read_record",
    "assemble",
    "disassemble",
    "load",
    "loads",
    "load_file",
    "resize",
]
