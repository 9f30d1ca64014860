"""
Server configuration module.

This module handles server-side configuration settings.
"""

from common.constants import (
    DEFAULT_SERVER_HOST, DEFAULT_PORT, DEFAULT_FILE_PORT, UPLOAD_DIR, LOG_DIR,
    CHUNK_SIZE, PROGRESS_LOG_INTERVAL, OUTBOX_FLUSH_TIMEOUT
)


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 file_port: int = DEFAULT_FILE_PORT, upload_dir: str = UPLOAD_DIR,
                 logs_dir: str = LOG_DIR):
        self.host = host
        self.port = port
        self.file_port = file_port
        self.upload_dir = upload_dir

        # Logging configuration
        self.logs_dir = logs_dir

        # File transfer settings
        self.chunk_size = CHUNK_SIZE
        self.progress_log_interval = PROGRESS_LOG_INTERVAL

        # Session settings
        self.flush_timeout = OUTBOX_FLUSH_TIMEOUT
