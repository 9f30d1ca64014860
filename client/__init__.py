"""
Client package for the chat relay.

Only the file channel is implemented here; chat clients need nothing beyond
reading and writing lines on the chat connection.
"""
