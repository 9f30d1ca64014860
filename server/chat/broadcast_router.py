"""
Broadcast router module.

Fan-out of chat lines over a snapshot of the session directory.
"""

from typing import Optional

from common.protocol_definitions import (
    create_private_from_message, create_private_to_message, create_user_not_found_message
)
from server.chat.session import Session
from server.chat.session_directory import SessionDirectory
from server.utils.logger import logger


class BroadcastRouter:
    """Delivers lines to every session or to one session by name."""

    def __init__(self, directory: SessionDirectory):
        self.directory = directory

    async def broadcast(self, message: str, exclude: Optional[Session] = None) -> int:
        """
        Send a line to all registered sessions.
        Optionally exclude a specific session (usually the sender).

        Returns the number of sessions the line was handed to. A failed
        delivery is logged and skipped; the others still receive the line.
        """
        delivered = 0
        for session in await self.directory.snapshot():
            if exclude is not None and session is exclude:
                continue
            try:
                session.send(message)
                delivered += 1
            except ConnectionError as e:
                logger.debug(f"Skipping broadcast to {session.name}: {e}")
        return delivered

    async def send_private(self, recipient_name: str, message: str, sender: Session) -> bool:
        """
        Send a private line to the first session named recipient_name.

        The sender gets a confirmation on success or a not-found notice
        otherwise. Returns True if a recipient was found.
        """
        recipient = await self.directory.find_by_name(recipient_name)
        if recipient is None:
            self._deliver(sender, create_user_not_found_message(recipient_name))
            return False

        logger.log_private(sender.name, recipient.name, message)
        self._deliver(recipient, create_private_from_message(sender.name, message))
        self._deliver(sender, create_private_to_message(recipient_name, message))
        return True

    def _deliver(self, session: Session, message: str):
        try:
            session.send(message)
        except ConnectionError as e:
            logger.debug(f"Dropping message for {session.name}: {e}")
