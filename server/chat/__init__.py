"""
Chat module for server-side messaging functionality.

Handles:
- Session registration and the per-connection command loop
- Directory of live sessions
- Broadcast and private message routing
"""
