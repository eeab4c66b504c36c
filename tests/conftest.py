"""
QRST Tools - Test Configuration
===============================

pytest configuration and fixtures shared by the QRST test modules.

It provides:
- ini options qrst_fill_blank / qrst_verify, read into CodecConfig
- the codec_config fixture (override it to swap the blank-track or
  checksum behaviour for a whole run)
- the qrst_sample marker: tests that need an authoritative QRST disk
  image are skipped unless QRST_SAMPLE points at one
- helpers for building synthetic QRST containers in memory
"""

import os
import struct
from pathlib import Path
from typing import Optional

import pytest

from qrst_tools.config import CodecConfig, set_default_config


# =============================================================================
# Synthetic Container Helpers
# =============================================================================

HEADER_LENGTH = 796


def make_header(
    capacity: int = 3,
    version: float = 1.0,
    checksum: int = 0,
    trailer: Optional[int] = None,
    magic: bytes = b"QRST",
    description: bytes = b"TEST DISK",
) -> bytes:
    """Build a raw 796-byte QRST header."""
    raw = bytearray(HEADER_LENGTH)
    raw[0:4] = magic
    raw[4:8] = struct.pack("<f", version)
    raw[8:12] = struct.pack("<I", checksum)
    raw[12] = capacity
    raw[13] = 1
    raw[14] = 1
    raw[15:15 + len(description)] = description
    if trailer is None:
        trailer = 2 if version >= 5.0 else 0
    raw[0x31B] = trailer
    return bytes(raw)


def raw_record(cylinder: int, head: int, data: bytes) -> bytes:
    return bytes((cylinder, head, 0)) + data


def blank_record(cylinder: int, head: int, filler: int = 0xF6) -> bytes:
    return bytes((cylinder, head, 1, filler))


def compressed_record(cylinder: int, head: int, payload: bytes) -> bytes:
    return bytes((cylinder, head, 2)) + struct.pack("<H", len(payload)) + payload


def track_pattern(index: int, length: int) -> bytes:
    """A recognisable, non-repeating track payload."""
    return bytes((index * 7 + i) & 0xFF for i in range(length))


# =============================================================================
# Pytest Hooks
# =============================================================================

def pytest_addoption(parser):
    """Register the codec ini options."""
    parser.addini("qrst_fill_blank", "Fill blank tracks with their filler byte", default="")
    parser.addini("qrst_verify", "Verify checksums while loading", default="")


def pytest_configure(config):
    """
    Register custom markers:
        qrst_sample: Test needs an authoritative QRST sample image
    """
    config.addinivalue_line(
        "markers", "qrst_sample: Test needs a QRST sample image (set QRST_SAMPLE)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip qrst_sample tests when no sample image is configured."""
    if os.environ.get("QRST_SAMPLE"):
        return

    skip_marker = pytest.mark.skip(reason="QRST_SAMPLE not set")
    for item in items:
        if "qrst_sample" in item.keywords:
            item.add_marker(skip_marker)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def codec_config(request) -> CodecConfig:
    """
    Fixture: Codec configuration for one test.

    Built from the pytest ini options and the environment, and installed
    as the package default for the duration of the test.
    """
    config = CodecConfig.from_pytest_config(request.config)
    set_default_config(config)
    yield config
    set_default_config(None)


@pytest.fixture
def zero_blank_config() -> CodecConfig:
    """Fixture: Configuration with zero-filled blank tracks."""
    return CodecConfig(fill_blank_tracks=False)


@pytest.fixture
def qrst_sample() -> Path:
    """Fixture: Path to the authoritative QRST sample image."""
    return Path(os.environ["QRST_SAMPLE"])
