"""
Notekeeper: local-first categorized notes.

A small notebook that keeps everything on the device:
- Accounts with hashed credentials and a remembered session
- Notes filed under user-defined categories
- Search, category filter and date ordering for the notes list
"""

__version__ = "0.1.0"
