"""Directory search with sensible defaults.

Public API:
    - search()
    - list_computer_names()
    - list_user_names()
"""

from .services import list_computer_names, list_user_names, search

__all__ = ["search", "list_computer_names", "list_user_names"]
