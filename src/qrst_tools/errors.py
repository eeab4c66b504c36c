"""
QRST Tools Error Hierarchy
==========================

This module defines the exception hierarchy for the QRST codec.
All exceptions inherit from QRSTError, allowing callers to catch every
codec-related error with a single except clause if desired.

Exception Hierarchy
-------------------
QRSTError (base)
├── QRSTFormatError (malformed container)
│   ├── TruncatedHeaderError - fewer than 796 header bytes
│   ├── BadMagicError - header does not start with "QRST"
│   ├── BadTrailerError - trailer byte does not match the version
│   ├── TruncatedRecordError - input ends in the middle of a record
│   ├── InvalidRecordTypeError - unknown record type byte
│   └── DecompressionLengthMismatchError - RLE output is not one track
├── GeometryError (disk layout)
│   ├── OutOfRangeError - head/cylinder outside the disk geometry
│   ├── InvalidOffsetError - computed track offset is negative
│   └── UnsupportedCapacityError - capacity code has no geometry
├── ChecksumMismatchError - computed checksum differs from the header
└── ResizeError (capacity changes)
    └── UnsupportedShrinkError - target disk is smaller than the source

All errors are terminal for the operation in progress. There is no
retry or partial recovery: a malformed record aborts the whole load.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class QRSTError(Exception):
    """
    Base exception for all QRST codec errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every codec-related error with a single except clause:

        try:
            qrst_file = load_file("DIAGS80B._01")
        except QRSTError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Container Format Exceptions
# =============================================================================

class QRSTFormatError(QRSTError):
    """
    Invalid QRST container format.

    Raised when reading a QRST file that:
    - Has a short or corrupt header
    - Contains a truncated or unknown data record
    - Contains compressed data that does not expand to one track
    """
    pass


class TruncatedHeaderError(QRSTFormatError):
    """The input ended before the fixed-size header was complete."""

    def __init__(self, expected: int, actual: int, message: str = ""):
        self.expected = expected
        self.actual = actual
        if not message:
            message = f"header is too short: expected {expected} bytes, got {actual}"
        super().__init__(message)


class BadMagicError(QRSTFormatError):
    """The header does not start with the "QRST" magic bytes."""

    def __init__(self, magic: bytes, message: str = ""):
        self.magic = magic
        if not message:
            message = f"bad magic in header: {magic!r}"
        super().__init__(message)


class BadTrailerError(QRSTFormatError):
    """
    The trailer byte does not match the header version.

    Version 1.x-4.x files carry a trailer of 0; version 5.0 and later
    carry a trailer of 2.
    """

    def __init__(self, version: float, trailer: int, message: str = ""):
        self.version = version
        self.trailer = trailer
        if not message:
            message = f"bad trailer in header: 0x{trailer:02X} for version {version:g}"
        super().__init__(message)


class TruncatedRecordError(QRSTFormatError):
    """The input ended in the middle of a data record."""
    pass


class InvalidRecordTypeError(QRSTFormatError):
    """A data record carries a type byte other than raw, blank or compressed."""

    def __init__(self, record_type: int, message: str = ""):
        self.record_type = record_type
        if not message:
            message = f"invalid data record type 0x{record_type:02X}"
        super().__init__(message)


class DecompressionLengthMismatchError(QRSTFormatError):
    """Run-length decoded data is not exactly one track long."""

    def __init__(self, expected: int, actual: int, message: str = ""):
        self.expected = expected
        self.actual = actual
        if not message:
            message = (
                f"decompressed data isn't a track length ({expected} != {actual})"
            )
        super().__init__(message)


# =============================================================================
# Geometry Exceptions
# =============================================================================

class GeometryError(QRSTError):
    """Base exception for disk geometry errors."""
    pass


class OutOfRangeError(GeometryError):
    """
    A head or cylinder falls outside the disk geometry.

    Attributes:
        axis: "head" or "cylinder"
        value: The offending index
        limit: The largest index the geometry accepts
    """

    def __init__(self, axis: str, value: int, limit: int, message: str = ""):
        self.axis = axis
        self.value = value
        self.limit = limit
        if not message:
            message = f"{axis} falls outside disk geometry ({value}/{limit})"
        super().__init__(message)


class InvalidOffsetError(GeometryError):
    """A computed track offset is negative."""
    pass


class UnsupportedCapacityError(GeometryError):
    """The capacity code has no known disk geometry."""

    def __init__(self, capacity: int, message: str = ""):
        self.capacity = capacity
        if not message:
            message = f"unsupported disk capacity code {capacity}"
        super().__init__(message)


# =============================================================================
# Checksum Exceptions
# =============================================================================

class ChecksumMismatchError(QRSTError):
    """
    Checksum verification failed.

    Raised when the weighted checksum computed over the data records
    doesn't match the checksum declared in the header. The file itself
    has still been decoded and can be inspected.
    """

    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        if not message:
            message = f"checksum mismatch: expected {expected:08X}, got {actual:08X}"
        super().__init__(message)


# =============================================================================
# Resize Exceptions
# =============================================================================

class ResizeError(QRSTError):
    """Base exception for capacity change errors."""
    pass


class UnsupportedShrinkError(ResizeError):
    """
    The target capacity is smaller than the source disk.

    Shrinking would need a truncation policy for the tracks that no
    longer fit; none is defined, so this is always fatal.
    """

    def __init__(self, old_size: int, new_size: int, message: str = ""):
        self.old_size = old_size
        self.new_size = new_size
        if not message:
            message = (
                f"shrinking images isn't supported ({old_size} -> {new_size} bytes)"
            )
        super().__init__(message)
