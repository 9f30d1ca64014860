"""
File registry module.

Metadata for files clients have announced. Records live for the lifetime of the
server process and are never removed.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from common.constants import FILE_ID_LENGTH
from common.protocol_definitions import create_file_shared_message
from server.utils.logger import logger


@dataclass(frozen=True)
class FileRecord:
    """File metadata structure."""
    file_id: str
    filename: str
    size: int
    uploader: str


class FileRegistry:
    """Concurrency-safe table of announced files."""

    def __init__(self, broadcast_callback: Optional[Callable[[str], Awaitable]] = None):
        self.files: Dict[str, FileRecord] = {}  # file_id -> record, announce order
        self.lock = asyncio.Lock()  # Protect shared state
        self.broadcast_callback = broadcast_callback  # Callback for broadcasting the share notice

    def _new_file_id(self) -> str:
        # Caller holds the lock
        while True:
            file_id = uuid.uuid4().hex[:FILE_ID_LENGTH]
            if file_id not in self.files:
                return file_id

    async def announce(self, filename: str, size: int, uploader: str) -> str:
        """Register a shared file, notify every session and return its new id."""
        if size < 0:
            raise ValueError(f"File size must be non-negative, got {size}")

        async with self.lock:
            file_id = self._new_file_id()
            record = FileRecord(file_id=file_id, filename=filename, size=size, uploader=uploader)
            self.files[file_id] = record

        logger.log_file_share(filename, size, uploader, file_id)

        if self.broadcast_callback:
            await self.broadcast_callback(create_file_shared_message(uploader, filename, size, file_id))
        return file_id

    async def lookup(self, file_id: str) -> Optional[FileRecord]:
        async with self.lock:
            return self.files.get(file_id)

    async def list_all(self) -> List[Tuple[str, FileRecord]]:
        async with self.lock:
            return list(self.files.items())

    async def count(self) -> int:
        async with self.lock:
            return len(self.files)
