#!/usr/bin/env python3
"""
Unit tests for broadcast and private message routing.
"""

import unittest
from unittest.mock import Mock

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.broadcast_router import BroadcastRouter
from server.chat.session import Session, SessionState
from server.chat.session_directory import SessionDirectory


def make_session(name):
    session = Session(Mock(), ('127.0.0.1', 0))
    session.name = name
    session.state = SessionState.ACTIVE
    return session


def queued(session):
    """Drain and return the lines waiting in a session's outbox."""
    lines = []
    while not session.outbox.empty():
        lines.append(session.outbox.get_nowait())
    return lines


class TestBroadcastRouter(unittest.IsolatedAsyncioTestCase):
    """Test cases for BroadcastRouter."""

    async def asyncSetUp(self):
        self.directory = SessionDirectory()
        self.router = BroadcastRouter(self.directory)
        self.sessions = [make_session(name) for name in ("alice", "bob", "carol", "dave")]
        for session in self.sessions:
            await self.directory.add(session)

    async def test_broadcast_excludes_sender(self):
        """N sessions with an excluded sender yields N-1 deliveries."""
        sender = self.sessions[0]
        delivered = await self.router.broadcast("alice: hi", exclude=sender)

        self.assertEqual(delivered, 3)
        self.assertEqual(queued(sender), [])
        for session in self.sessions[1:]:
            self.assertEqual(queued(session), ["alice: hi"])

    async def test_broadcast_to_all(self):
        delivered = await self.router.broadcast("server notice")
        self.assertEqual(delivered, 4)
        for session in self.sessions:
            self.assertEqual(queued(session), ["server notice"])

    async def test_broadcast_survives_failed_recipient(self):
        """A recipient that cannot accept output does not stop the fan-out."""
        dead = self.sessions[1]
        dead.state = SessionState.CLOSED

        delivered = await self.router.broadcast("still here", exclude=self.sessions[0])

        self.assertEqual(delivered, 2)
        self.assertEqual(queued(dead), [])
        self.assertEqual(queued(self.sessions[2]), ["still here"])
        self.assertEqual(queued(self.sessions[3]), ["still here"])

    async def test_broadcast_preserves_sender_order(self):
        for i in range(5):
            await self.router.broadcast(f"alice: {i}", exclude=self.sessions[0])
        self.assertEqual(queued(self.sessions[2]), [f"alice: {i}" for i in range(5)])

    async def test_private_message_delivery(self):
        alice, bob = self.sessions[0], self.sessions[1]
        found = await self.router.send_private("BOB", "psst", alice)

        self.assertTrue(found)
        self.assertEqual(queued(bob), ["[Private from alice]: psst"])
        self.assertEqual(queued(alice), ["[Private to BOB]: psst"])
        for session in self.sessions[2:]:
            self.assertEqual(queued(session), [])

    async def test_private_message_first_match_on_duplicate_names(self):
        """Only the earliest session named X receives the message."""
        second_bob = make_session("bob")
        await self.directory.add(second_bob)

        await self.router.send_private("bob", "hello", self.sessions[0])

        self.assertEqual(queued(self.sessions[1]), ["[Private from alice]: hello"])
        self.assertEqual(queued(second_bob), [])
        self.assertEqual(queued(self.sessions[0]), ["[Private to bob]: hello"])

    async def test_private_message_unknown_recipient(self):
        """A miss produces exactly one notice, to the sender only."""
        alice = self.sessions[0]
        found = await self.router.send_private("zed", "anyone?", alice)

        self.assertFalse(found)
        self.assertEqual(queued(alice), ["User zed not found."])
        for session in self.sessions[1:]:
            self.assertEqual(queued(session), [])


if __name__ == '__main__':
    unittest.main()
