"""
QRST Run-Length Codec
=====================

Compressed tracks (record type 2) use a plain run-length scheme:

    "The compressed data stream consists of alternating literal runs (a
    byte giving the length of the run, followed by that number of bytes
    data) and compressed runs (two bytes; first gives number of repeats,
    second gives byte to repeat)."

A stream is a sequence of (literal, repeat) segment pairs and may end
after either segment. Runs of length zero are legal and expand to
nothing. There are no escapes or back-references.

compress() is the matching encoder. QRST files are only ever decoded by
the loader; the encoder is used when re-encoding an image.
"""

from qrst_tools.errors import DecompressionLengthMismatchError

# Longest run one length byte can describe
MAX_RUN = 255

# Shortest run worth a repeat segment (a repeat segment costs 2 bytes)
MIN_REPEAT = 3


def decompress(data: bytes, expected_length: int) -> bytes:
    """
    Expand a run-length compressed track.

    Args:
        data: The compressed record payload
        expected_length: Decoded size, one track length

    Returns:
        The decoded track

    Raises:
        DecompressionLengthMismatchError: If the decoded size differs from
            expected_length, or a segment runs past the end of the input
    """
    out = bytearray()
    pos = 0
    end = len(data)

    while pos < end:
        run = data[pos]
        pos += 1
        if pos + run > end:
            raise DecompressionLengthMismatchError(
                expected_length, len(out) + end - pos,
                f"literal run of {run} bytes overruns compressed data",
            )
        out += data[pos:pos + run]
        pos += run

        if pos >= end:
            break

        if pos + 2 > end:
            raise DecompressionLengthMismatchError(
                expected_length, len(out),
                "repeat run is missing its value byte",
            )
        run, value = data[pos], data[pos + 1]
        pos += 2
        out += bytes((value,)) * run

    if len(out) != expected_length:
        raise DecompressionLengthMismatchError(expected_length, len(out))

    return bytes(out)


def _run_length(data: bytes, pos: int, limit: int) -> int:
    value = data[pos]
    end = min(len(data), pos + limit)
    length = 1
    while pos + length < end and data[pos + length] == value:
        length += 1
    return length


def compress(data: bytes) -> bytes:
    """
    Run-length encode a track.

    Produces literal/repeat segment pairs that decompress() expands back
    to `data`. When a literal run fills its 255 byte limit without
    reaching a repeat, an empty repeat segment keeps the pairs aligned.

    Example:
        >>> compress(b"AB" + b"\\x00" * 6)
        b'\\x02AB\\x06\\x00'
    """
    out = bytearray()
    pos = 0
    end = len(data)

    while pos < end:
        start = pos
        while (pos < end and pos - start < MAX_RUN
               and _run_length(data, pos, MIN_REPEAT) < MIN_REPEAT):
            pos += 1
        out.append(pos - start)
        out += data[start:pos]

        if pos >= end:
            break

        run = _run_length(data, pos, MAX_RUN)
        if run < MIN_REPEAT:
            out += b"\x00\x00"
            continue
        out.append(run)
        out.append(data[pos])
        pos += run

    return bytes(out)
