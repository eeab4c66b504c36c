"""
QRST Tools Command-Line Interface
=================================

This package provides the qrst command-line tool:

- **dump**: Write raw disk images
- **info**: Show file information
- **verify**: Verify header checksums
- **resize**: Re-encode for a larger disk
- **pack**: Create a QRST file from a raw image

The tool is a Click-based CLI application with comprehensive help and
error reporting.
"""

__all__ = ["qrst"]
