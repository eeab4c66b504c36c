"""
qrst - QRST Disk Image Command-Line Interface
=============================================

This module implements the command-line interface for the QRST codec.
It converts QRST files to raw disk images and back.

Commands
--------
- **dump**: Write the raw disk image of each QRST file to <file>.img
- **info**: Show header information and image size
- **verify**: Verify the header checksum
- **resize**: Re-encode a QRST file for a larger disk
- **pack**: Create a QRST file from a raw disk image

Usage Examples
--------------
Dump a disk image:
    $ qrst dump DIAGS80B._01

Show file information:
    $ qrst info DIAGS80B._01

Grow a 720K file to 1.44M:
    $ qrst resize -c 1.44M -o DIAGS144._01 DIAGS80B._01

Pack a raw image:
    $ qrst pack -c 720K -o DISK._01 disk.img
"""

import logging
from pathlib import Path
from typing import Optional

import click

from qrst_tools import __version__
from qrst_tools.cli.errors import handle_cli_exception
from qrst_tools.config import CodecConfig
from qrst_tools.qrst import (
    Capacity,
    QRSTBuilder,
    analyze_checksum,
    geometry_from_capacity,
    load_file,
    resize,
)


# =============================================================================
# Capacity Parameter Type
# =============================================================================

class CapacityChoice(click.ParamType):
    """
    Click parameter type for disk capacity selection.

    Accepts a label (320K, 720K, 1.44M, case-insensitive) or a numeric
    capacity code.
    """
    name = "capacity"

    LABEL_MAP = {
        "320k": Capacity.SIZE_320K,
        "720k": Capacity.SIZE_720K,
        "1.4m": Capacity.SIZE_1440K,
        "1.44m": Capacity.SIZE_1440K,
        "1440k": Capacity.SIZE_1440K,
    }

    def convert(self, value: str, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> Capacity:
        """Convert a label or code to a Capacity."""
        if isinstance(value, Capacity):
            return value

        key = str(value).lower()
        if key in self.LABEL_MAP:
            return self.LABEL_MAP[key]

        try:
            capacity = Capacity(int(key, 0))
        except ValueError:
            self.fail(
                f"Invalid capacity '{value}'. "
                f"Choose from: {', '.join(self.LABEL_MAP.keys())}",
                param, ctx
            )

        if not geometry_from_capacity(capacity).is_supported:
            self.fail(f"Capacity {capacity.get_label()} has no known disk geometry",
                      param, ctx)
        return capacity


CAPACITY = CapacityChoice()


# =============================================================================
# CLI Context
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores verbosity and the codec configuration.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: CodecConfig = CodecConfig.from_env()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.option(
    "--fill-blank/--zero-blank",
    default=None,
    help="Fill blank tracks with their filler byte (default: zero-filled)",
)
@click.version_option(__version__, "--version", "-V", prog_name="qrst")
@pass_context
def main(ctx: Context, verbose: bool, fill_blank: Optional[bool]) -> None:
    """
    QRST disk image tool.

    Convert Compaq QRST (Quick Release Sector Transfer) files to raw
    floppy disk images and back.

    \b
    Commands:
      dump      Write raw disk images
      info      Show file information
      verify    Verify the header checksum
      resize    Re-encode for a larger disk
      pack      Create a QRST file from a raw image

    \b
    Examples:
      qrst dump DIAGS80B._01
      qrst info DIAGS80B._01
      qrst resize -c 1.44M -o DIAGS144._01 DIAGS80B._01
    """
    ctx.verbose = verbose
    if fill_blank is not None:
        ctx.config.fill_blank_tracks = fill_blank
    ctx.setup_logging()


# =============================================================================
# Dump Command
# =============================================================================

@main.command("dump")
@click.argument(
    "qrst_files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
)
@click.option(
    "-o", "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (default: next to each input file)",
)
@click.option(
    "--verify",
    is_flag=True,
    help="Verify the checksum before writing",
)
@pass_context
def cmd_dump(ctx: Context, qrst_files: tuple[Path, ...], output: Optional[Path],
             verify: bool) -> None:
    """
    Write the raw disk image of each QRST file.

    The image is written to <file>.img.

    \b
    Example:
      qrst dump DIAGS80B._01 DIAGS80B._02
    """
    try:
        if output is not None:
            output.mkdir(parents=True, exist_ok=True)

        for path in qrst_files:
            qrst_file = load_file(path, config=ctx.config, verify=verify)
            click.echo(f"{qrst_file.header.get_capacity_label()} QRST file loaded.")

            image = qrst_file.assemble()
            directory = output if output is not None else path.parent
            out_path = directory / f"{path.name}.img"
            out_path.write_bytes(image)

            if ctx.verbose:
                click.echo(f"  {len(image)} bytes -> {out_path}")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Dump")


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument(
    "qrst_files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
)
@pass_context
def cmd_info(ctx: Context, qrst_files: tuple[Path, ...]) -> None:
    """
    Show information about QRST files.

    \b
    Example:
      qrst info DIAGS80B._01

    \b
    Output includes:
      - Capacity and header version
      - Volume number and description
      - Record counts
      - Image size and checksum status
    """
    try:
        for path in qrst_files:
            qrst_file = load_file(path, config=ctx.config, verify=False)
            info = qrst_file.get_info()
            image = qrst_file.assemble()

            click.echo(f"QRST Information: {path}")
            click.echo("=" * 40)
            click.echo(f"Capacity:    {info['capacity']}")
            click.echo(f"Version:     {info['version']:g}")
            click.echo(f"Volume:      {info['current_volume']} of {info['volume_count']}")
            click.echo(f"Description: {info['description']}")
            click.echo()
            click.echo("Records:")
            click.echo(f"  Raw:         {info['raw_records']}")
            click.echo(f"  Blank:       {info['blank_records']}")
            click.echo(f"  Compressed:  {info['compressed_records']}")
            click.echo(f"  Total:       {info['total_records']}")
            click.echo()
            click.echo(f"Image is {len(image)} bytes")
            click.echo(f"Checksum:    {info['checksum']} ({info['checksum_status']})")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)


# =============================================================================
# Verify Command
# =============================================================================

@main.command("verify")
@click.argument(
    "qrst_files",
    nargs=-1,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
)
@pass_context
def cmd_verify(ctx: Context, qrst_files: tuple[Path, ...]) -> None:
    """
    Verify the checksum of QRST files.

    Exits non-zero if any file fails to load or fails its checksum.

    \b
    Example:
      qrst verify DIAGS80B._01
    """
    try:
        failed = 0
        for path in qrst_files:
            qrst_file = load_file(path, config=ctx.config, verify=False)
            result = analyze_checksum(qrst_file)
            if not result.supported:
                click.echo(f"{path}: SKIPPED (version {qrst_file.header.version:g} uses CRC-32)")
            elif result.is_valid:
                click.echo(f"{path}: OK (0x{result.calculated:08X})")
            else:
                failed += 1
                click.echo(
                    f"{path}: MISMATCH (header 0x{result.stored:08X}, "
                    f"calculated 0x{result.calculated:08X})"
                )

        if failed:
            raise click.exceptions.Exit(1)

    except click.exceptions.Exit:
        raise
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Verify")


# =============================================================================
# Resize Command
# =============================================================================

@main.command("resize")
@click.argument(
    "qrst_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-c", "--capacity",
    type=CAPACITY,
    required=True,
    help="Target capacity: 320K, 720K, 1.44M or a capacity code",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output QRST file path (required)",
)
@pass_context
def cmd_resize(ctx: Context, qrst_file: Path, capacity: Capacity, output: Path) -> None:
    """
    Re-encode a QRST file for a larger disk.

    Shrinking is not supported.

    \b
    Example:
      qrst resize -c 1.44M -o DIAGS144._01 DIAGS80B._01
    """
    try:
        source = load_file(qrst_file, config=ctx.config)
        resized = resize(source, capacity, config=ctx.config)
        data = resized.to_bytes()
        output.write_bytes(data)
        click.echo(
            f"Resized {source.header.get_capacity_label()} -> "
            f"{resized.header.get_capacity_label()}: {output} ({len(data)} bytes)"
        )

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Resize")


# =============================================================================
# Pack Command
# =============================================================================

@main.command("pack")
@click.argument(
    "image_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-c", "--capacity",
    type=CAPACITY,
    required=True,
    help="Disk capacity: 320K, 720K, 1.44M or a capacity code",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output QRST file path (required)",
)
@click.option(
    "-d", "--description",
    default="",
    help="Description stored in the header",
)
@click.option(
    "--compress/--no-compress",
    default=None,
    help="Compress tracks when it saves space (default: on)",
)
@pass_context
def cmd_pack(ctx: Context, image_file: Path, capacity: Capacity, output: Path,
             description: str, compress: Optional[bool]) -> None:
    """
    Create a QRST file from a raw disk image.

    \b
    Example:
      qrst pack -c 720K -o DISK._01 disk.img
    """
    try:
        options = {"description": description.encode("latin-1")}
        if compress is not None:
            options["compress_tracks"] = compress

        builder = QRSTBuilder.from_config(capacity, config=ctx.config, **options)
        bytes_written = builder.build_to_file(image_file.read_bytes(), output)
        click.echo(f"Created {output} ({capacity.get_label()}, {bytes_written} bytes)")

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose, error_type="Pack")


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
