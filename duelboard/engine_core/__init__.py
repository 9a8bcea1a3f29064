"""
Engine Core - Deterministic match state and transitions.

The engine is the runtime that:
1. Creates the initial MatchState
2. Applies intents via the reducer
3. Narrates accepted transitions for the event log
4. Requests notifications for the view
"""

from .state import MatchState, Party, Side, Resource, Direction
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action
from .event_log import EventLog, LogEntry, Notification, NotificationChannel
from .confirmation import ConfirmFn, PromptRecorder, always_confirm, always_decline

__all__ = [
    "MatchState",
    "Party",
    "Side",
    "Resource",
    "Direction",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "EventLog",
    "LogEntry",
    "Notification",
    "NotificationChannel",
    "ConfirmFn",
    "PromptRecorder",
    "always_confirm",
    "always_decline",
]
