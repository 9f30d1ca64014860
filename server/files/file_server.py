"""
File server module.

This module handles the file channel: one short-lived handler per connection
that receives the bytes of a previously announced file.

Sub-protocol, every control message being a length-prefixed string:
    client -> file id
    server -> "ERROR:File not found" (connection closes) or "READY:<filename>:<size>"
    client -> "START"
    client -> exactly <size> raw bytes
    server -> "SUCCESS:<stored name>"
"""

import asyncio
from pathlib import Path

from common.constants import CHUNK_SIZE, PROGRESS_LOG_INTERVAL, UPLOAD_DIR, FileChannel
from common.framing import FramingError, read_string, write_string
from common.protocol_definitions import FILE_NOT_FOUND, create_ready_message, create_success_message
from server.files.file_registry import FileRecord, FileRegistry
from server.utils.logger import logger


class FileServer:
    """Server-side file transfer functionality."""

    def __init__(self, registry: FileRegistry, upload_dir: str = UPLOAD_DIR,
                 chunk_size: int = CHUNK_SIZE, progress_log_interval: int = PROGRESS_LOG_INTERVAL):
        self.registry = registry
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)  # Create uploads directory
        self.chunk_size = chunk_size
        self.progress_log_interval = progress_log_interval

    @staticmethod
    def stored_name(record: FileRecord) -> str:
        """Name of the file on disk; the basename keeps it inside the upload directory."""
        return f"{record.file_id}_{Path(record.filename).name}"

    async def handle_transfer(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle one connection on the file channel."""
        addr = writer.get_extra_info('peername')
        logger.log_connection(addr, 'file')

        try:
            file_id = await read_string(reader)
            record = await self.registry.lookup(file_id)

            if record is None:
                logger.warning(f"File channel request from {addr} for unknown id={file_id}")
                await write_string(writer, FILE_NOT_FOUND)
                return

            await write_string(writer, create_ready_message(record.filename, record.size))

            command = await read_string(reader)
            if command != FileChannel.START:
                logger.warning(f"Protocol violation from {addr}: expected {FileChannel.START}, got {command!r}")
                return

            file_path = await self.receive_file(reader, record)
            await write_string(writer, create_success_message(file_path.name))

        except asyncio.IncompleteReadError:
            logger.warning(f"File channel peer {addr} disconnected mid-message")
        except FramingError as e:
            logger.warning(f"Malformed frame from {addr}: {e}")
        except (ConnectionError, OSError) as e:
            logger.log_error("file transfer", e)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def receive_file(self, reader: asyncio.StreamReader, record: FileRecord) -> Path:
        """
        Stream exactly record.size bytes from reader into a new file.

        Stops early if the peer closes the stream; the partial file is left in
        place. Returns the path of the stored file.
        """
        file_path = self.upload_dir / self.stored_name(record)
        expected_size = record.size
        bytes_received = 0
        next_progress = self.progress_log_interval

        with open(file_path, 'wb') as f:
            while bytes_received < expected_size:
                # Read in chunks
                data = await reader.read(min(self.chunk_size, expected_size - bytes_received))

                if not data:
                    logger.warning(f"Connection closed before upload complete: {bytes_received}/{expected_size} bytes")
                    break

                f.write(data)
                bytes_received += len(data)

                # Log progress every 1MB
                if bytes_received >= next_progress:
                    progress = (bytes_received / expected_size) * 100
                    logger.info(f"Upload progress [{record.file_id}]: {bytes_received}/{expected_size} bytes ({progress:.1f}%)")
                    next_progress += self.progress_log_interval

        logger.log_file_upload(record.filename, bytes_received, expected_size, record.file_id)
        return file_path
