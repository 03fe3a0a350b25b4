"""
Diary Application.

- backend/: API, database, configuration, auth and notes
- client/: HTTP client, session store, markup and the terminal UI controller
"""
