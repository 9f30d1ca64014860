#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

Runs the chat channel and the file channel of the relay.

Usage:
    python main_server.py

Optional arguments:
    --host HOST           Bind address (default: 0.0.0.0)
    --port PORT           Chat TCP port (default: 12345)
    --file-port PORT      File transfer TCP port (default: 12346)
    --upload-dir DIR      Directory for received files (default: server_files)
    --logs-dir DIR        Directory for chat and transfer logs (default: logs)
    --debug               Enable debug logging
"""

if __name__ == "__main__":
    from server.main_server import main

    main()
