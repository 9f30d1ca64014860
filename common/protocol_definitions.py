"""
Protocol definitions for the chat relay.

This module builds the text lines the server sends on the chat channel and the
control strings exchanged on the file channel. Every chat line is sent without
its trailing newline; the session writer appends it.
"""

from typing import List, Tuple

from common.constants import FileChannel


USERS_HEADER = "=== Online Users ({count}) ==="
FILES_HEADER = "=== Shared Files ({count}) ==="
LIST_FOOTER = "========================"
USERNAME_PROMPT = "Enter your username:"
FILE_NOT_FOUND = "ERROR:File not found"
SHARE_USAGE = "ERROR:Usage: !share <filename> <size>"


def format_file_size(size: int) -> str:
    """Render a byte count as B, KB or MB with one decimal."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def create_join_message(username: str) -> str:
    """Create a user joined notice."""
    return f"{username} joined the chat!"


def create_leave_message(username: str) -> str:
    """Create a user left notice."""
    return f"{username} left the chat!"


def create_chat_message(username: str, text: str) -> str:
    """Create a public chat line."""
    return f"{username}: {text}"


def create_private_from_message(sender: str, text: str) -> str:
    """Create the copy of a private message delivered to its recipient."""
    return f"[Private from {sender}]: {text}"


def create_private_to_message(recipient: str, text: str) -> str:
    """Create the confirmation echoed to the sender of a private message."""
    return f"[Private to {recipient}]: {text}"


def create_user_not_found_message(recipient: str) -> str:
    """Create a user not found notice."""
    return f"User {recipient} not found."


def create_file_shared_message(uploader: str, filename: str, size: int, file_id: str) -> str:
    """Create the notice broadcast when a file is announced."""
    return f"[FILE] {uploader} shared: {filename} ({format_file_size(size)}) - ID: {file_id}"


def create_download_ready_message(file_id: str, filename: str, size: int) -> str:
    """Create a download authorization reply."""
    return f"DOWNLOAD_READY:{file_id}:{filename}:{size}"


def create_users_listing(usernames: List[str]) -> List[str]:
    """Create the users listing block."""
    lines = [USERS_HEADER.format(count=len(usernames))]
    lines.extend(f"- {name}" for name in usernames)
    lines.append(LIST_FOOTER)
    return lines


def create_files_listing(files: List[Tuple[str, object]]) -> List[str]:
    """
    Create the shared files listing block.

    ``files`` is a sequence of ``(file_id, record)`` pairs where each record has
    ``filename``, ``size`` and ``uploader`` attributes.
    """
    lines = [FILES_HEADER.format(count=len(files))]
    for file_id, record in files:
        lines.append(
            f"ID: {file_id} | {record.filename} ({format_file_size(record.size)}) from {record.uploader}"
        )
    lines.append("Use !download <fileId> to download")
    lines.append(LIST_FOOTER)
    return lines


def create_ready_message(filename: str, size: int) -> str:
    """Create the file channel READY reply."""
    return f"{FileChannel.READY}:{filename}:{size}"


def create_success_message(stored_name: str) -> str:
    """Create the file channel SUCCESS reply."""
    return f"{FileChannel.SUCCESS}:{stored_name}"


def parse_ready_message(message: str) -> Tuple[str, int]:
    """
    Split a READY reply into filename and size.

    The size is the last colon-separated field so filenames may contain colons.
    Raises ValueError if the message is not a READY reply.
    """
    prefix = FileChannel.READY + ":"
    if not message.startswith(prefix):
        raise ValueError(f"Not a READY message: {message!r}")
    filename, _, size = message[len(prefix):].rpartition(":")
    return filename, int(size)
