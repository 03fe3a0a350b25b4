"""
Diary Client.

Everything the terminal UI needs that is independent of widgets: the
HTTP client, the session file, the editor state machine and the
content markup.
"""
