"""
QRST File Loader
================

This module reads QRST files: the header, then every data record up to
the end of the input. Loading does not assemble the disk image and, by
default, does not verify the checksum, so a file that fails its checksum
can still be inspected.

Usage Examples
--------------
Reading a QRST file and writing the raw image:
    >>> from qrst_tools.qrst import load_file
    >>> qrst_file = load_file("DIAGS80B._01")
    >>> print(f"{qrst_file.header.get_capacity_label()} QRST file loaded.")
    >>> Path("DIAGS80B._01.img").write_bytes(qrst_file.assemble())

Checking the checksum separately:
    >>> qrst_file.verify_checksum()   # raises ChecksumMismatchError
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union
import io
import logging

from qrst_tools.config import CodecConfig, get_default_config
from qrst_tools.errors import QRSTError, QRSTFormatError, UnsupportedCapacityError
from qrst_tools.qrst.checksum import (
    analyze_checksum,
    calculate_checksum,
    verify_checksum,
)
from qrst_tools.qrst.header import QRSTHeader, parse_header
from qrst_tools.qrst.image import DEFAULT_FILLER, assemble, disassemble
from qrst_tools.qrst.records import RecordType, TrackRecord, iter_records

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# QRST File
# =============================================================================

@dataclass
class QRSTFile:
    """
    A QRST file: one header and its data records.

    Attributes:
        header: The parsed header
        records: Data records in the order they appear in the file

    Example:
        >>> qrst_file = load_file("DIAGS80B._01")
        >>> print(f"Records: {len(qrst_file.records)}")
        >>> image = qrst_file.assemble()
    """
    header: QRSTHeader
    records: list[TrackRecord] = field(default_factory=list)

    def assemble(self) -> bytes:
        """Build the raw disk image."""
        return assemble(self)

    def disassemble(self, image: bytes, filler: int = DEFAULT_FILLER,
                    fill_blank: bool = False) -> None:
        """Replace the records with the tracks of a raw image."""
        self.records = disassemble(image, self.header.geometry,
                                   filler=filler, fill_blank=fill_blank)

    def checksum(self) -> int:
        """Compute the weighted checksum of the data records."""
        return calculate_checksum(self.records, self.header.geometry)

    def verify_checksum(self) -> None:
        """
        Verify the checksum declared in the header.

        Raises:
            ChecksumMismatchError: If the computed checksum differs
        """
        verify_checksum(self)

    def update_checksum(self) -> int:
        """Recompute the checksum and store it in the header."""
        self.header.checksum = self.checksum()
        return self.header.checksum

    def resize(self, capacity: int, config: Optional[CodecConfig] = None) -> "QRSTFile":
        """
        Return a copy of this file re-encoded for a larger capacity.

        See qrst_tools.qrst.builder.resize().
        """
        from qrst_tools.qrst.builder import resize
        return resize(self, capacity, config=config)

    def to_bytes(self) -> bytes:
        """Serialize the header and records in QRST format."""
        result = bytearray(self.header.to_bytes())
        for record in self.records:
            result.extend(record.to_bytes())
        return bytes(result)

    def get_info(self) -> dict[str, Any]:
        """
        Get summary information about the file.

        Returns:
            Dictionary with header fields, record counts and checksum status
        """
        counts = {record_type: 0 for record_type in RecordType}
        for record in self.records:
            counts[RecordType(record.record_type)] += 1

        analysis = analyze_checksum(self)
        if not analysis.supported:
            checksum_status = "not checked (CRC-32)"
        elif analysis.is_valid:
            checksum_status = "valid"
        else:
            checksum_status = f"MISMATCH (calculated: 0x{analysis.calculated:08X})"

        return {
            "version": self.header.version,
            "capacity": self.header.get_capacity_label(),
            "current_volume": self.header.current_volume,
            "volume_count": self.header.volume_count,
            "description": self.header.get_description(),
            "disk_size": self.header.geometry.disk_size,
            "track_length": self.header.geometry.track_length,
            "total_records": len(self.records),
            "raw_records": counts[RecordType.RAW],
            "blank_records": counts[RecordType.BLANK],
            "compressed_records": counts[RecordType.COMPRESSED],
            "checksum": f"0x{self.header.checksum:08X}",
            "checksum_status": checksum_status,
        }


# =============================================================================
# Loading
# =============================================================================

def load(
    stream: BinaryIO,
    config: Optional[CodecConfig] = None,
    verify: Optional[bool] = None,
) -> QRSTFile:
    """
    Read a QRST file from a binary stream.

    Args:
        stream: Binary stream positioned at the start of the file
        config: Codec configuration (default: get_default_config())
        verify: Verify the checksum after loading (default: from config)

    Returns:
        The loaded file; the disk image is not assembled

    Raises:
        QRSTFormatError: If the header or a record is malformed
        UnsupportedCapacityError: If the capacity code has no geometry
        ChecksumMismatchError: If verifying and the checksum differs
    """
    config = config or get_default_config()
    if verify is None:
        verify = config.verify_on_load

    try:
        header = parse_header(stream)
        geometry = header.geometry
        if not geometry.is_supported:
            raise UnsupportedCapacityError(header.capacity)

        qrst_file = QRSTFile(header=header)
        qrst_file.records.extend(
            iter_records(stream, geometry.track_length,
                         fill_blank=config.fill_blank_tracks)
        )
    except QRSTError as e:
        logger.error(f"Failed to load QRST file: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error loading QRST file: {e}")
        raise QRSTFormatError(f"Failed to load QRST file: {e}") from e

    logger.info(
        f"Loaded {header.get_capacity_label()} QRST file: "
        f"{len(qrst_file.records)} records"
    )

    if verify:
        qrst_file.verify_checksum()

    return qrst_file


def loads(data: bytes, config: Optional[CodecConfig] = None,
          verify: Optional[bool] = None) -> QRSTFile:
    """Read a QRST file from bytes."""
    return load(io.BytesIO(data), config=config, verify=verify)


def load_file(filepath: Union[str, Path], config: Optional[CodecConfig] = None,
              verify: Optional[bool] = None) -> QRSTFile:
    """
    Read a QRST file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        QRSTFormatError: If the file cannot be parsed
    """
    filepath = Path(filepath)
    with filepath.open("rb") as stream:
        return load(stream, config=config, verify=verify)
