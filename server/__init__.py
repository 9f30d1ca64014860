"""
Server package for the chat relay.

This package contains all server-side functionality including:
- Chat sessions, broadcast and private messaging
- Shared file registry
- File channel transfers
- Configuration and utilities
"""
