"""
File client module.

This module speaks the client side of the file channel: it uploads the bytes of
a file that was previously announced on the chat channel with '!share'.
"""

import asyncio
import io
from pathlib import Path
from typing import BinaryIO

from common.constants import DEFAULT_HOST, DEFAULT_FILE_PORT, CHUNK_SIZE, PROGRESS_LOG_INTERVAL, FileChannel
from common.framing import read_string, write_string
from common.protocol_definitions import parse_ready_message
from client.utils.logger import logger


class TransferError(Exception):
    """Raised when the server rejects or aborts a transfer."""


class FileClient:
    """Client-side file transfer functionality."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_FILE_PORT,
                 chunk_size: int = CHUNK_SIZE, connect_timeout: float = 10.0):
        self.host = host
        self.port = port
        self.chunk_size = chunk_size
        self.connect_timeout = connect_timeout

    async def upload_file(self, file_id: str, file_path: str) -> str:
        """Upload a file from disk. Returns the name the server stored it under."""
        path = Path(file_path)
        with open(path, 'rb') as f:
            return await self._upload(file_id, f, path.stat().st_size)

    async def upload_bytes(self, file_id: str, data: bytes) -> str:
        """Upload an in-memory payload. Returns the name the server stored it under."""
        return await self._upload(file_id, io.BytesIO(data), len(data))

    async def _upload(self, file_id: str, source: BinaryIO, local_size: int) -> str:
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout
            )
        except (asyncio.TimeoutError, OSError) as e:
            logger.log_connection(self.host, self.port, False)
            raise TransferError(f"Cannot reach file server at {self.host}:{self.port}: {e}") from e

        try:
            await write_string(writer, file_id)
            reply = await read_string(reader)
            if not reply.startswith(FileChannel.READY + ':'):
                raise TransferError(reply)

            filename, size = parse_ready_message(reply)
            if local_size < size:
                raise TransferError(f"Local data has {local_size} bytes, server expects {size}")

            logger.log_file_upload(filename, size, file_id)
            await write_string(writer, FileChannel.START)

            bytes_sent = 0
            while bytes_sent < size:
                data = source.read(min(self.chunk_size, size - bytes_sent))
                if not data:
                    break
                writer.write(data)
                await writer.drain()
                bytes_sent += len(data)

                if bytes_sent % PROGRESS_LOG_INTERVAL < self.chunk_size or bytes_sent == size:
                    progress = (bytes_sent / size) * 100
                    logger.info(f"[UPLOAD] Progress: {bytes_sent}/{size} bytes ({progress:.1f}%)")

            reply = await read_string(reader)
            if not reply.startswith(FileChannel.SUCCESS + ':'):
                raise TransferError(reply)
            return reply[len(FileChannel.SUCCESS) + 1:]

        except asyncio.IncompleteReadError as e:
            raise TransferError("File server closed the connection") from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass
