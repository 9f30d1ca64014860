"""
Session directory module.

Holds the set of live, registered chat sessions. The directory only references
sessions for routing; it never closes them.
"""

import asyncio
from typing import Dict, List, Optional

from server.chat.session import Session


class SessionDirectory:
    """Concurrency-safe, insertion-ordered set of registered sessions."""

    def __init__(self):
        self.sessions: Dict[int, Session] = {}  # id(session) -> session, insertion ordered
        self.lock = asyncio.Lock()  # Protect shared state

    async def add(self, session: Session):
        async with self.lock:
            self.sessions[id(session)] = session

    async def remove(self, session: Session) -> bool:
        """Remove a session. Returns False if it was not registered."""
        async with self.lock:
            return self.sessions.pop(id(session), None) is not None

    async def snapshot(self) -> List[Session]:
        """Return a stable copy of the current members."""
        async with self.lock:
            return list(self.sessions.values())

    async def find_by_name(self, name: str) -> Optional[Session]:
        """
        Case-insensitive lookup by display name.

        Duplicate names are allowed; the earliest registered match wins.
        """
        wanted = name.casefold()
        async with self.lock:
            for session in self.sessions.values():
                if session.name is not None and session.name.casefold() == wanted:
                    return session
        return None

    async def usernames(self) -> List[str]:
        async with self.lock:
            return [session.name for session in self.sessions.values()]

    async def count(self) -> int:
        async with self.lock:
            return len(self.sessions)
