"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from datetime import datetime
from pathlib import Path

from common.constants import LOG_DIR, CHAT_LOG_FILE, TRANSFER_LOG_FILE


class ServerLogger:
    """Server logging class."""

    def __init__(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        self.logger = logging.getLogger('chat_relay_server')

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)

        # Create console handler
        self.console_handler = logging.StreamHandler()

        # Create formatter
        formatter = logging.Formatter(
            '%(asctime)s [%(levelname)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.console_handler.setFormatter(formatter)

        # Add handler to logger
        self.logger.addHandler(self.console_handler)

        self.configure(logs_dir, log_level)

    def configure(self, logs_dir: str = LOG_DIR, log_level: int = logging.INFO):
        """Point the logger at a logs directory and set its level."""
        self.logger.setLevel(log_level)
        self.console_handler.setLevel(log_level)

        # Set up file paths; the directory is created on first write
        self.logs_dir = Path(logs_dir)
        self.transfer_log_path = self.logs_dir / TRANSFER_LOG_FILE
        self.chat_log_path = self.logs_dir / CHAT_LOG_FILE

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_connection(self, addr: tuple, channel: str = 'chat'):
        """Log client connection."""
        self.info(f"New {channel} connection from {addr}")

    def log_login(self, username: str, addr: tuple):
        """Log user registration."""
        self.info(f"User '{username}' joined from {addr}")

    def log_disconnect(self, username: str, remaining: int):
        """Log user disconnect."""
        self.info(f"User {username} disconnected. Total clients: {remaining}")

    def log_chat(self, username: str, message: str):
        """Log chat message."""
        self.info(f"{username}: {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | {username} | {message}")

    def log_private(self, sender: str, recipient: str, message: str):
        """Log private message."""
        self.info(f"PRIVATE from {sender} to {recipient}: {message}")
        self._write_to_file(self.chat_log_path, f"{datetime.now().isoformat()} | [PRIVATE {sender}->{recipient}] {sender} | {message}")

    def log_file_share(self, filename: str, size: int, uploader: str, file_id: str):
        """Log file announcement."""
        self.info(f"FILE SHARED: '{filename}' ({size} bytes) by {uploader}, id={file_id}")
        self._write_to_file(self.transfer_log_path, f"{datetime.now().isoformat()} | SHARE | {filename} | USER: {uploader} | SIZE: {size} bytes | ID: {file_id}")

    def log_file_upload(self, filename: str, received: int, expected: int, file_id: str):
        """Log completed or truncated upload."""
        if received == expected:
            self.info(f"FILE UPLOAD SUCCESS: '{filename}' ({received} bytes)")
            status = "UPLOAD"
        else:
            self.warning(f"FILE UPLOAD TRUNCATED: '{filename}' ({received}/{expected} bytes)")
            status = "UPLOAD_TRUNCATED"
        self.info(f"  File ID: {file_id}")
        self._write_to_file(self.transfer_log_path, f"{datetime.now().isoformat()} | {status} | {filename} | SIZE: {received}/{expected} bytes | ID: {file_id}")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")

    def _write_to_file(self, file_path: Path, content: str):
        """Write content to log file."""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'a', encoding='utf-8') as f:
                f.write(content + '\n')
        except OSError as e:
            self.error(f"Failed to write to log file {file_path}: {e}")


# Global logger instance
logger = ServerLogger()
