#!/usr/bin/env python3
"""
Unit tests for chat line formatting and file channel framing.
"""

import asyncio
import struct
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.framing import FramingError, decode_string, encode_string, read_string
from common.protocol_definitions import (
    create_files_listing, create_users_listing, format_file_size, parse_ready_message,
    create_ready_message
)
from server.files.file_registry import FileRecord


class TestFormatting(unittest.TestCase):
    """Test cases for chat channel formatting helpers."""

    def test_format_file_size(self):
        self.assertEqual(format_file_size(0), "0 B")
        self.assertEqual(format_file_size(1023), "1023 B")
        self.assertEqual(format_file_size(1024), "1.0 KB")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(1024 * 1024), "1.0 MB")
        self.assertEqual(format_file_size(5 * 1024 * 1024 + 512 * 1024), "5.5 MB")

    def test_users_listing(self):
        self.assertEqual(create_users_listing(["alice", "bob"]), [
            "=== Online Users (2) ===",
            "- alice",
            "- bob",
            "========================",
        ])

    def test_files_listing(self):
        record = FileRecord(file_id="ab12cd34", filename="a.txt", size=2048, uploader="alice")
        self.assertEqual(create_files_listing([("ab12cd34", record)]), [
            "=== Shared Files (1) ===",
            "ID: ab12cd34 | a.txt (2.0 KB) from alice",
            "Use !download <fileId> to download",
            "========================",
        ])

    def test_empty_files_listing(self):
        lines = create_files_listing([])
        self.assertEqual(lines[0], "=== Shared Files (0) ===")
        self.assertEqual(len(lines), 3)

    def test_parse_ready_message_with_colon_in_filename(self):
        message = create_ready_message("notes:v2.txt", 42)
        self.assertEqual(message, "READY:notes:v2.txt:42")
        self.assertEqual(parse_ready_message(message), ("notes:v2.txt", 42))

    def test_parse_ready_message_rejects_other_replies(self):
        with self.assertRaises(ValueError):
            parse_ready_message("ERROR:File not found")


class TestFraming(unittest.IsolatedAsyncioTestCase):
    """Test cases for length-prefixed strings."""

    def test_encode_layout(self):
        """Two-byte big-endian length followed by UTF-8 bytes."""
        self.assertEqual(encode_string("START"), b"\x00\x05START")
        frame = encode_string("héllo")
        self.assertEqual(struct.unpack('!H', frame[:2])[0], len("héllo".encode('utf-8')))

    def test_decode_string(self):
        self.assertEqual(decode_string(b"\x00\x02ok"), "ok")
        self.assertEqual(decode_string(encode_string("")), "")

    def test_decode_length_mismatch(self):
        with self.assertRaises(FramingError):
            decode_string(b"\x00\x05ok")
        with self.assertRaises(FramingError):
            decode_string(b"\x00")

    def test_oversized_string_rejected(self):
        with self.assertRaises(FramingError):
            encode_string("x" * 0x10000)
        self.assertEqual(len(encode_string("x" * 0xFFFF)), 0xFFFF + 2)

    async def test_read_string_leaves_payload_bytes(self):
        """Raw bytes after a frame stay in the stream for the payload reader."""
        reader = asyncio.StreamReader()
        reader.feed_data(encode_string("START") + b"\x01\x02\x03")
        reader.feed_eof()

        self.assertEqual(await read_string(reader), "START")
        self.assertEqual(await reader.read(), b"\x01\x02\x03")

    async def test_read_string_truncated_frame(self):
        reader = asyncio.StreamReader()
        reader.feed_data(b"\x00\x0aabc")
        reader.feed_eof()

        with self.assertRaises(asyncio.IncompleteReadError):
            await read_string(reader)

    async def test_read_string_invalid_utf8(self):
        reader = asyncio.StreamReader()
        reader.feed_data(b"\x00\x02\xff\xfe")
        reader.feed_eof()

        with self.assertRaises(FramingError):
            await read_string(reader)


if __name__ == '__main__':
    unittest.main()
