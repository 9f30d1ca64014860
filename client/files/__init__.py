"""
File transfer module for client-side file operations.

Handles:
- Uploading announced files over the file channel
"""
