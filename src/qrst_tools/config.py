"""
QRST Tools - Configuration
==========================

Codec configuration. Configuration can come from:
- Default values (defined here)
- Environment variables
- Pytest configuration (so a test run can swap the blank-track and
  checksum behaviour against an authoritative sample image)

Two behaviours of the format are not settled by any known sample, so
they are switches rather than constants:

- fill_blank_tracks: blank records carry a filler byte, but the decoded
  track has always been zero-filled. Set this to fill it with the filler
  byte instead.
- verify_on_load: loading and checksum verification are separate steps;
  set this to verify every file as it is loaded.
"""

from dataclasses import dataclass
from typing import Optional
import os


_TRUE_VALUES = ("1", "true", "yes", "on")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class CodecConfig:
    """
    Configuration for QRST decoding and encoding.

    Attributes:
        fill_blank_tracks: Fill blank tracks with their filler byte
            (default: False, zero-filled)
        verify_on_load: Verify the checksum while loading (default: False)
        disassemble_filler: Filler byte for blank records created when an
            image is split into tracks (default: 0xF6)
        compress_tracks: Compress tracks when encoding if it saves space
            (default: True)
    """

    fill_blank_tracks: bool = False
    verify_on_load: bool = False
    disassemble_filler: int = 0xF6
    compress_tracks: bool = True

    # ═══════════════════════════════════════════════════════════════════════════
    # FACTORY METHODS
    # ═══════════════════════════════════════════════════════════════════════════

    @classmethod
    def from_env(cls) -> "CodecConfig":
        """
        Create CodecConfig from environment variables.

        Environment variables (all optional):
            QRST_FILL_BLANK: Fill blank tracks with the filler byte (bool)
            QRST_VERIFY: Verify checksums while loading (bool)
            QRST_FILLER: Filler byte for disassembled blank tracks (integer)
            QRST_COMPRESS: Compress tracks when encoding (bool)

        Returns:
            CodecConfig with values from environment variables
        """
        config = cls()

        if fill_blank := os.environ.get("QRST_FILL_BLANK"):
            config.fill_blank_tracks = _parse_bool(fill_blank)

        if verify := os.environ.get("QRST_VERIFY"):
            config.verify_on_load = _parse_bool(verify)

        if filler := os.environ.get("QRST_FILLER"):
            try:
                value = int(filler, 0)
            except ValueError:
                pass  # Ignore invalid values
            else:
                if 0 <= value <= 0xFF:
                    config.disassemble_filler = value

        if compress := os.environ.get("QRST_COMPRESS"):
            config.compress_tracks = _parse_bool(compress)

        return config

    @classmethod
    def from_pytest_config(cls, pytest_config) -> "CodecConfig":
        """
        Create CodecConfig from pytest configuration.

        Reads from pytest.ini or pyproject.toml [tool.pytest.ini_options]:
            qrst_fill_blank = true
            qrst_verify = true

        Args:
            pytest_config: Pytest Config object

        Returns:
            CodecConfig with values from pytest configuration
        """
        config = cls.from_env()

        if hasattr(pytest_config, "getini"):
            if fill_blank := pytest_config.getini("qrst_fill_blank"):
                config.fill_blank_tracks = _parse_bool(fill_blank)

            if verify := pytest_config.getini("qrst_verify"):
                config.verify_on_load = _parse_bool(verify)

        return config


# ═══════════════════════════════════════════════════════════════════════════════
# DEFAULT CONFIGURATION INSTANCE
# ═══════════════════════════════════════════════════════════════════════════════

_default_config: Optional[CodecConfig] = None


def get_default_config() -> CodecConfig:
    """
    Get the default codec configuration.

    Creates from environment variables on first access.
    Can be overridden by calling set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = CodecConfig.from_env()
    return _default_config


def set_default_config(config: Optional[CodecConfig]) -> None:
    """
    Set the default codec configuration.

    Passing None makes the next get_default_config() re-read the
    environment.
    """
    global _default_config
    _default_config = config
