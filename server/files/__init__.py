"""
File module for server-side file sharing.

Handles:
- Registry of announced files
- Receiving file bytes on the file channel
"""
