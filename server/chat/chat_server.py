"""
Chat server module.

This module runs the line-oriented command loop for each chat connection.
"""

import asyncio
from typing import Optional

from common.constants import ENCODING, OUTBOX_FLUSH_TIMEOUT, Commands
from common.protocol_definitions import (
    USERNAME_PROMPT, FILE_NOT_FOUND, SHARE_USAGE,
    create_join_message, create_leave_message, create_chat_message,
    create_download_ready_message, create_users_listing, create_files_listing
)
from server.chat.broadcast_router import BroadcastRouter
from server.chat.session import Session, SessionState
from server.chat.session_directory import SessionDirectory
from server.files.file_registry import FileRegistry
from server.utils.logger import logger


class ChatServer:
    """Server-side chat functionality."""

    def __init__(self, directory: SessionDirectory, registry: FileRegistry,
                 router: Optional[BroadcastRouter] = None, flush_timeout: float = OUTBOX_FLUSH_TIMEOUT):
        self.directory = directory
        self.registry = registry
        self.router = router or BroadcastRouter(directory)
        self.flush_timeout = flush_timeout

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        addr = writer.get_extra_info('peername')
        logger.log_connection(addr)

        session = Session(writer, addr)
        session.start()

        try:
            session.send(USERNAME_PROMPT)
            session.state = SessionState.REGISTERING

            name = await self._read_line(reader)
            if name is None:
                logger.info(f"Connection from {addr} closed before registration")
                return
            await self.register(session, name)

            while True:
                line = await self._read_line(reader)
                if line is None:
                    break
                if not await self.dispatch(session, line):
                    break

        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {session.name or addr}")
            raise
        except (ConnectionError, OSError, ValueError) as e:
            # ValueError: line longer than the stream reader limit
            logger.log_error(f"session {session.name or addr}", e)
        finally:
            await self.disconnect(session)

    async def _read_line(self, reader: asyncio.StreamReader) -> Optional[str]:
        """Read one line without its terminator. Returns None at end of stream."""
        data = await reader.readline()
        if not data:
            return None
        return data.decode(ENCODING, errors='replace').rstrip('\r\n')

    async def register(self, session: Session, name: str):
        """Make the session visible to others under the given display name."""
        session.name = name
        await self.directory.add(session)
        session.state = SessionState.ACTIVE
        logger.log_login(name, session.addr)

        session.send_lines(create_users_listing(await self.directory.usernames()))
        await self.router.broadcast(create_join_message(name), exclude=session)

    async def dispatch(self, session: Session, line: str) -> bool:
        """
        Process one line from an active session.

        Returns False when the session asked to leave.
        """
        command = line.lower()

        if command == Commands.EXIT:
            return False
        elif line.startswith(Commands.PRIVATE_PREFIX):
            await self.handle_private(session, line)
        elif command == Commands.USERS:
            await self.handle_users(session)
        elif command == Commands.FILES:
            await self.handle_files(session)
        elif line.startswith(Commands.DOWNLOAD):
            await self.handle_download(session, line[len(Commands.DOWNLOAD):].strip())
        elif line.startswith(Commands.SHARE):
            await self.handle_share(session, line[len(Commands.SHARE):])
        elif line:
            await self.handle_chat(session, line)
        return True

    async def handle_private(self, session: Session, line: str):
        """Process '@<name> <text>'; a line without a space is dropped."""
        parts = line.split(' ', 1)
        if len(parts) != 2:
            logger.debug(f"Dropping malformed private message from {session.name}: {line!r}")
            return
        recipient = parts[0][len(Commands.PRIVATE_PREFIX):]
        await self.router.send_private(recipient, parts[1], session)

    async def handle_users(self, session: Session):
        session.send_lines(create_users_listing(await self.directory.usernames()))

    async def handle_files(self, session: Session):
        session.send_lines(create_files_listing(await self.registry.list_all()))

    async def handle_download(self, session: Session, file_id: str):
        """Authorize a download. File bytes never travel on the chat channel."""
        record = await self.registry.lookup(file_id)
        if record is None:
            logger.info(f"Download request from {session.name} for unknown id={file_id}")
            session.send(FILE_NOT_FOUND)
            return
        logger.info(f"Download request from {session.name} for '{record.filename}' (id={file_id})")
        session.send(create_download_ready_message(file_id, record.filename, record.size))

    async def handle_share(self, session: Session, args: str):
        """Process '!share <filename> <size>'; the filename may contain spaces."""
        filename, _, size_text = args.strip().rpartition(' ')
        filename = filename.strip()
        try:
            size = int(size_text)
        except ValueError:
            size = -1

        if not filename or size < 0:
            session.send(SHARE_USAGE)
            return
        await self.registry.announce(filename, size, session.name)

    async def handle_chat(self, session: Session, text: str):
        logger.log_chat(session.name, text)
        await self.router.broadcast(create_chat_message(session.name, text), exclude=session)

    async def disconnect(self, session: Session):
        """Remove the session, notify the others and close its connection."""
        # Leave notice first; close() then flushes whatever is still queued for this session
        if await self.directory.remove(session):
            logger.log_disconnect(session.name, await self.directory.count())
            await self.router.broadcast(create_leave_message(session.name))
        await session.close(self.flush_timeout)
