"""
Shared constants for the chat relay.

This module contains all constants used by the server and the file-channel client.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 12345
DEFAULT_FILE_PORT = 12346

# Buffer Sizes
CHUNK_SIZE = 8192
PROGRESS_LOG_INTERVAL = 1024 * 1024  # Log progress every 1MB
MAX_FRAME_LENGTH = 0xFFFF  # 2-byte length prefix on the file channel
FRAME_HEADER_SIZE = 2

# Timeouts
OUTBOX_FLUSH_TIMEOUT = 5  # seconds to flush queued lines when a session closes

# File Transfer
UPLOAD_DIR = 'server_files'
FILE_ID_LENGTH = 8

# Logging
LOG_DIR = 'logs'
CHAT_LOG_FILE = 'chat_history.log'
TRANSFER_LOG_FILE = 'file_transfers.log'

ENCODING = 'utf-8'


# Chat channel commands (client to server)
class Commands:
    EXIT = 'exit'
    USERS = '!users'
    FILES = '!files'
    DOWNLOAD = '!download '
    SHARE = '!share '
    PRIVATE_PREFIX = '@'


# File channel messages
class FileChannel:
    START = 'START'
    READY = 'READY'
    SUCCESS = 'SUCCESS'
