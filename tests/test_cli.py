"""
QRST CLI Tests
==============

Tests for the qrst command-line tool, run through click's CliRunner.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from qrst_tools.cli.errors import ExitCode
from qrst_tools.cli.qrst import CAPACITY, main
from qrst_tools.qrst import Capacity, QRSTBuilder, loads

from conftest import blank_record, make_header, raw_record, track_pattern


TRACK_720K = 9 * 512
DISK_720K = 79 * TRACK_720K


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def image_720k() -> bytes:
    return b"".join(track_pattern(c, TRACK_720K) for c in range(79))


@pytest.fixture
def qrst_path(tmp_path: Path, image_720k: bytes) -> Path:
    """A valid 720K QRST file on disk."""
    path = tmp_path / "DIAGS80B._01"
    QRSTBuilder(capacity=Capacity.SIZE_720K, description=b"DIAGS").build_to_file(
        image_720k, path
    )
    return path


@pytest.fixture
def bad_checksum_path(tmp_path: Path) -> Path:
    """A 720K QRST file whose header checksum is wrong."""
    path = tmp_path / "BADSUM._01"
    path.write_bytes(make_header(checksum=0x1234) + raw_record(0, 0, b"\x01" * TRACK_720K))
    return path


# =============================================================================
# General Options
# =============================================================================

class TestMain:
    """Tests for the top-level command group."""

    def test_help(self, runner: CliRunner):
        """Test that help lists the commands."""
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("dump", "info", "verify", "resize", "pack"):
            assert command in result.output

    def test_version(self, runner: CliRunner):
        """Test the version option."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output


class TestCapacityChoice:
    """Tests for the capacity parameter type."""

    @pytest.mark.parametrize("value,expected", [
        ("720K", Capacity.SIZE_720K),
        ("720k", Capacity.SIZE_720K),
        ("1.44M", Capacity.SIZE_1440K),
        ("1.4m", Capacity.SIZE_1440K),
        ("320K", Capacity.SIZE_320K),
        ("3", Capacity.SIZE_720K),
        ("0x7", Capacity.SIZE_320K),
    ])
    def test_convert(self, value, expected):
        """Test labels and codes."""
        assert CAPACITY.convert(value, None, None) == expected

    @pytest.mark.parametrize("value", ["360K", "2", "9", "big"])
    def test_rejects(self, runner: CliRunner, qrst_path: Path, tmp_path: Path, value):
        """Test that unknown or unsupported capacities are usage errors."""
        result = runner.invoke(main, [
            "resize", "-c", value, "-o", str(tmp_path / "out._01"), str(qrst_path),
        ])
        assert result.exit_code == 2


# =============================================================================
# Dump Command
# =============================================================================

class TestDump:
    """Tests for the dump command."""

    def test_dump(self, runner: CliRunner, qrst_path: Path, image_720k: bytes):
        """Test writing <file>.img next to the input."""
        result = runner.invoke(main, ["dump", str(qrst_path)])

        assert result.exit_code == 0
        assert "720K QRST file loaded." in result.output
        out_path = qrst_path.parent / "DIAGS80B._01.img"
        assert out_path.read_bytes() == image_720k

    def test_dump_output_directory(self, runner: CliRunner, qrst_path: Path,
                                   tmp_path: Path):
        """Test writing images into another directory."""
        out_dir = tmp_path / "images"
        result = runner.invoke(main, ["dump", "-o", str(out_dir), str(qrst_path)])

        assert result.exit_code == 0
        assert (out_dir / "DIAGS80B._01.img").stat().st_size == DISK_720K

    def test_dump_multiple(self, runner: CliRunner, qrst_path: Path,
                           bad_checksum_path: Path):
        """Test dumping several files; checksums aren't checked by default."""
        result = runner.invoke(main, ["dump", str(qrst_path), str(bad_checksum_path)])

        assert result.exit_code == 0
        assert result.output.count("QRST file loaded.") == 2
        assert (bad_checksum_path.parent / "BADSUM._01.img").exists()

    def test_dump_verify(self, runner: CliRunner, bad_checksum_path: Path):
        """Test that --verify rejects a bad checksum."""
        result = runner.invoke(main, ["dump", "--verify", str(bad_checksum_path)])

        assert result.exit_code == 1
        assert "checksum mismatch" in result.output
        assert not (bad_checksum_path.parent / "BADSUM._01.img").exists()

    def test_dump_bad_magic(self, runner: CliRunner, tmp_path: Path):
        """Test that a malformed file is a format error."""
        path = tmp_path / "BAD._01"
        path.write_bytes(make_header(magic=b"QRSS"))
        result = runner.invoke(main, ["dump", str(path)])

        assert result.exit_code == 1
        assert "Dump error" in result.output

    def test_dump_bad_trailer_message(self, runner: CliRunner, tmp_path: Path):
        """Test that the error line names the command and the bad field."""
        path = tmp_path / "TRAILER._01"
        path.write_bytes(make_header(version=1.0, trailer=2))
        result = runner.invoke(main, ["dump", str(path)])

        assert result.exit_code == ExitCode.FORMAT_ERROR
        assert "Dump error: bad trailer in header: 0x02 for version 1" in result.output

    def test_dump_missing_file(self, runner: CliRunner, tmp_path: Path):
        """Test that a missing input is a usage error."""
        result = runner.invoke(main, ["dump", str(tmp_path / "missing._01")])
        assert result.exit_code == 2

    def test_fill_blank(self, runner: CliRunner, tmp_path: Path):
        """Test the global blank-track switch."""
        path = tmp_path / "BLANK._01"
        path.write_bytes(make_header() + blank_record(0, 0, 0xF6))
        out_path = tmp_path / "BLANK._01.img"

        result = runner.invoke(main, ["--zero-blank", "dump", str(path)])
        assert result.exit_code == 0
        assert out_path.read_bytes()[:TRACK_720K] == bytes(TRACK_720K)

        result = runner.invoke(main, ["--fill-blank", "dump", str(path)])
        assert result.exit_code == 0
        assert out_path.read_bytes()[:TRACK_720K] == b"\xF6" * TRACK_720K


# =============================================================================
# Info and Verify Commands
# =============================================================================

class TestInfo:
    """Tests for the info command."""

    def test_info(self, runner: CliRunner, qrst_path: Path):
        """Test the information report."""
        result = runner.invoke(main, ["info", str(qrst_path)])

        assert result.exit_code == 0
        assert "Capacity:    720K" in result.output
        assert "Description: DIAGS" in result.output
        assert f"Image is {DISK_720K} bytes" in result.output
        assert "(valid)" in result.output

    def test_info_bad_checksum(self, runner: CliRunner, bad_checksum_path: Path):
        """Test that info reports a mismatch without failing."""
        result = runner.invoke(main, ["info", str(bad_checksum_path)])

        assert result.exit_code == 0
        assert "MISMATCH" in result.output


class TestVerify:
    """Tests for the verify command."""

    def test_verify_ok(self, runner: CliRunner, qrst_path: Path):
        result = runner.invoke(main, ["verify", str(qrst_path)])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_verify_mismatch(self, runner: CliRunner, qrst_path: Path,
                             bad_checksum_path: Path):
        """Test that one bad file fails the whole run."""
        result = runner.invoke(main, ["verify", str(qrst_path), str(bad_checksum_path)])

        assert result.exit_code == 1
        assert "OK" in result.output
        assert "MISMATCH (header 0x00001234" in result.output

    def test_verify_v5_skipped(self, runner: CliRunner, tmp_path: Path):
        """Test that version 5 files are skipped."""
        path = tmp_path / "V5._01"
        path.write_bytes(make_header(version=5.0, checksum=0x1234))
        result = runner.invoke(main, ["verify", str(path)])

        assert result.exit_code == 0
        assert "SKIPPED" in result.output


# =============================================================================
# Resize and Pack Commands
# =============================================================================

class TestResize:
    """Tests for the resize command."""

    def test_grow(self, runner: CliRunner, qrst_path: Path, tmp_path: Path):
        """Test growing a 720K file to 1.44M."""
        out_path = tmp_path / "DIAGS144._01"
        result = runner.invoke(main, [
            "resize", "-c", "1.44M", "-o", str(out_path), str(qrst_path),
        ])

        assert result.exit_code == 0
        assert "720K -> 1.4M" in result.output
        resized = loads(out_path.read_bytes(), verify=True)
        assert resized.header.capacity == Capacity.SIZE_1440K

    def test_shrink(self, runner: CliRunner, qrst_path: Path, tmp_path: Path):
        """Test that shrinking fails with a format error."""
        out_path = tmp_path / "SMALL._01"
        result = runner.invoke(main, [
            "resize", "-c", "320K", "-o", str(out_path), str(qrst_path),
        ])

        assert result.exit_code == 1
        assert "Resize error" in result.output
        assert not out_path.exists()


class TestPack:
    """Tests for the pack command."""

    def test_pack_then_dump(self, runner: CliRunner, tmp_path: Path, image_720k: bytes):
        """Test that a packed image dumps back unchanged."""
        image_path = tmp_path / "disk.img"
        image_path.write_bytes(image_720k)
        qrst_path = tmp_path / "DISK._01"

        result = runner.invoke(main, [
            "pack", "-c", "720K", "-d", "PACKED", "-o", str(qrst_path), str(image_path),
        ])
        assert result.exit_code == 0
        assert f"Created {qrst_path}" in result.output

        result = runner.invoke(main, ["dump", str(qrst_path)])
        assert result.exit_code == 0
        assert (tmp_path / "DISK._01.img").read_bytes() == image_720k
        assert loads(qrst_path.read_bytes()).header.get_description() == "PACKED"

    def test_pack_no_compress(self, runner: CliRunner, tmp_path: Path):
        """Test that --no-compress stores every non-empty track raw."""
        image_path = tmp_path / "disk.img"
        image_path.write_bytes(b"\xE5" * DISK_720K)
        qrst_path = tmp_path / "DISK._01"

        result = runner.invoke(main, [
            "pack", "-c", "720K", "--no-compress", "-o", str(qrst_path), str(image_path),
        ])
        assert result.exit_code == 0
        assert qrst_path.stat().st_size == 796 + 79 * (3 + TRACK_720K)

    def test_pack_image_too_large(self, runner: CliRunner, tmp_path: Path):
        """Test that an oversized image is rejected."""
        image_path = tmp_path / "disk.img"
        image_path.write_bytes(bytes(DISK_720K + 1))
        result = runner.invoke(main, [
            "pack", "-c", "720K", "-o", str(tmp_path / "DISK._01"), str(image_path),
        ])

        assert result.exit_code == 1
        assert "Pack error" in result.output
