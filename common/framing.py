"""
Length-prefixed string framing for the file channel.

Each control message is a 2-byte big-endian unsigned length followed by that
many UTF-8 bytes. File payloads travel as raw bytes outside this framing.
"""

import asyncio
import struct

from common.constants import ENCODING, FRAME_HEADER_SIZE, MAX_FRAME_LENGTH


class FramingError(ValueError):
    """Raised when a string cannot be framed or a received frame cannot be decoded."""


def encode_string(text: str) -> bytes:
    """Encode a string as one length-prefixed frame."""
    data = text.encode(ENCODING)
    if len(data) > MAX_FRAME_LENGTH:
        raise FramingError(f"String too long to frame: {len(data)} bytes (max {MAX_FRAME_LENGTH})")
    return struct.pack('!H', len(data)) + data


def decode_string(frame: bytes) -> str:
    """Decode a complete frame (header included) back into a string."""
    if len(frame) < FRAME_HEADER_SIZE:
        raise FramingError("Frame shorter than its header")
    length = struct.unpack('!H', frame[:FRAME_HEADER_SIZE])[0]
    payload = frame[FRAME_HEADER_SIZE:]
    if len(payload) != length:
        raise FramingError(f"Frame declares {length} bytes but carries {len(payload)}")
    try:
        return payload.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise FramingError(f"Frame is not valid UTF-8: {e}") from e


async def read_string(reader: asyncio.StreamReader) -> str:
    """
    Read one length-prefixed string.

    Raises asyncio.IncompleteReadError if the stream ends mid-frame and
    FramingError if the payload is not valid UTF-8.
    """
    header = await reader.readexactly(FRAME_HEADER_SIZE)
    length = struct.unpack('!H', header)[0]
    payload = await reader.readexactly(length)
    try:
        return payload.decode(ENCODING)
    except UnicodeDecodeError as e:
        raise FramingError(f"Frame is not valid UTF-8: {e}") from e


async def write_string(writer: asyncio.StreamWriter, text: str):
    """Write one length-prefixed string and wait for the buffer to drain."""
    writer.write(encode_string(text))
    await writer.drain()
