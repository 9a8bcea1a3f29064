"""
Session Module - Manages ephemeral match sessions.

A session represents one match at the table:
- Created when the view opens
- Holds the current match state, event log and notification channel
- Applies intents reported by the view
- Destroyed when the view closes

Sessions are EPHEMERAL:
- No persistence to database
- Reset starts a new match inside the same session
"""

from .manager import SessionManager, Session, SessionState
from .controller import MatchController

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "MatchController",
]
