"""
Chat session module.

A Session is one client connection on the chat channel. It owns the connection's
writer; all outbound lines go through its outbox and are written by its own
writer task.
"""

import asyncio
from enum import Enum
from typing import Optional

from common.constants import ENCODING, OUTBOX_FLUSH_TIMEOUT
from server.utils.logger import logger


class SessionState(Enum):
    CONNECTED = 'connected'
    REGISTERING = 'registering'
    ACTIVE = 'active'
    CLOSING = 'closing'
    CLOSED = 'closed'


class Session:
    """One chat participant and its outbound mailbox."""

    def __init__(self, writer: asyncio.StreamWriter, addr: Optional[tuple] = None):
        self.writer = writer
        self.addr = addr
        self.name: Optional[str] = None
        self.state = SessionState.CONNECTED
        self.outbox: asyncio.Queue = asyncio.Queue()
        self._writer_task: Optional[asyncio.Task] = None
        self._write_failed = False

    def __repr__(self):
        return f"Session(name={self.name!r}, addr={self.addr}, state={self.state.value})"

    def start(self):
        """Start the writer task that drains the outbox."""
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(self._drain_outbox())

    def send(self, message: str):
        """
        Queue one line for delivery without blocking.

        Raises ConnectionError if the session is no longer accepting output.
        """
        if self.state == SessionState.CLOSED:
            raise ConnectionError(f"Session {self.name} is closed")
        if self._writer_task is not None and self._writer_task.done():
            raise ConnectionError(f"Writer for session {self.name} has stopped")
        self.outbox.put_nowait(message)

    def send_lines(self, lines):
        """Queue several lines in order."""
        for line in lines:
            self.send(line)

    async def _drain_outbox(self):
        while True:
            message = await self.outbox.get()
            if message is None:
                break
            try:
                self.writer.write((message + '\n').encode(ENCODING))
                await self.writer.drain()
            except (ConnectionError, OSError) as e:
                logger.warning(f"Failed to deliver to {self.name or self.addr}: {e}")
                self._write_failed = True
                break

    async def close(self, flush_timeout: float = OUTBOX_FLUSH_TIMEOUT):
        """
        Flush queued lines (bounded by flush_timeout) and close the connection.

        If the flush times out or a write already failed, the transport is
        aborted, discarding its unsent buffer.
        """
        if self.state == SessionState.CLOSED:
            return
        self.state = SessionState.CLOSING

        if self._writer_task is not None and not self._writer_task.done():
            self.outbox.put_nowait(None)
            try:
                await asyncio.wait_for(self._writer_task, timeout=flush_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Outbox for {self.name or self.addr} not flushed within {flush_timeout}s")
                self._write_failed = True

        self.state = SessionState.CLOSED
        if self._write_failed:
            # close() would wait for the peer to read the send buffer
            self.writer.transport.abort()
            return

        try:
            self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError):
            pass
