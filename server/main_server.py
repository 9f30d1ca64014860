#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Runs the two listeners of the relay in one event loop:
- Chat channel: line-oriented commands, broadcast and private messages
- File channel: length-prefixed uploads of announced files
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_FILE_PORT, UPLOAD_DIR, LOG_DIR
from server.chat.broadcast_router import BroadcastRouter
from server.chat.chat_server import ChatServer
from server.chat.session_directory import SessionDirectory
from server.files.file_registry import FileRegistry
from server.files.file_server import FileServer
from server.utils.config import ServerConfig
from server.utils.logger import logger


class RelayServer:
    """Main server class that wires the shared stores into both listeners."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()

        # Shared stores, passed by reference to every handler
        self.directory = SessionDirectory()
        self.router = BroadcastRouter(self.directory)
        self.registry = FileRegistry(broadcast_callback=self.router.broadcast)

        # Initialize modules
        self.chat_server = ChatServer(self.directory, self.registry, self.router,
                                      flush_timeout=self.config.flush_timeout)
        self.file_server = FileServer(self.registry, self.config.upload_dir,
                                      chunk_size=self.config.chunk_size,
                                      progress_log_interval=self.config.progress_log_interval)

        self.chat_listener: Optional[asyncio.AbstractServer] = None
        self.file_listener: Optional[asyncio.AbstractServer] = None

    @staticmethod
    def _bound_port(listener: Optional[asyncio.AbstractServer]) -> Optional[int]:
        if listener is None or not listener.sockets:
            return None
        return listener.sockets[0].getsockname()[1]

    @property
    def chat_port(self) -> Optional[int]:
        return self._bound_port(self.chat_listener)

    @property
    def file_port(self) -> Optional[int]:
        return self._bound_port(self.file_listener)

    async def open(self):
        """Bind both listening endpoints. Raises OSError if either cannot be bound."""
        self.chat_listener = await asyncio.start_server(
            self.chat_server.handle_client,
            self.config.host,
            self.config.port
        )
        try:
            self.file_listener = await asyncio.start_server(
                self.file_server.handle_transfer,
                self.config.host,
                self.config.file_port
            )
        except OSError:
            await self.close()
            raise

        for name, listener in (('Chat', self.chat_listener), ('File', self.file_listener)):
            addr = ', '.join(str(sock.getsockname()) for sock in listener.sockets)
            logger.info(f"{name} server listening on {addr}")

    async def start(self):
        """Start the server and serve until cancelled."""
        await self.open()
        async with self.chat_listener, self.file_listener:
            await asyncio.gather(
                self.chat_listener.serve_forever(),
                self.file_listener.serve_forever()
            )

    async def close(self):
        """Stop accepting connections on both channels."""
        for listener in (self.chat_listener, self.file_listener):
            if listener is not None:
                listener.close()
                await listener.wait_closed()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Chat Relay Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port for the chat channel (default: {DEFAULT_PORT})')
    parser.add_argument('--file-port', type=int, default=DEFAULT_FILE_PORT,
                        help=f'TCP port for the file channel (default: {DEFAULT_FILE_PORT})')
    parser.add_argument('--upload-dir', type=str, default=UPLOAD_DIR,
                        help=f'Directory for received files (default: {UPLOAD_DIR})')
    parser.add_argument('--logs-dir', type=str, default=LOG_DIR,
                        help=f'Directory for chat and transfer logs (default: {LOG_DIR})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logger.configure(args.logs_dir, logging.DEBUG if args.debug else logging.INFO)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        file_port=args.file_port,
        upload_dir=args.upload_dir,
        logs_dir=args.logs_dir
    )

    try:
        server = RelayServer(config)
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
