"""
API Module - Browser UI interface.

Exposes the engine via REST API and WebSocket.
The browser UI:
1. Creates a match session
2. Reports button presses as intents
3. Asks the user before gated intents and sends the answer along
4. Redraws from the returned snapshot
5. Shows notifications and the event log

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ConfirmableRequest,
    SideRequest,
    UltimateRequest,
    AdjustResourceRequest,
    # Responses
    SessionResponse,
    ActionResponse,
    EventLogResponse,
    NotificationListResponse,
    ErrorResponse,
    # Shared
    PartyInfo,
    MatchStateInfo,
    LogEntryInfo,
    NotificationInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ConfirmableRequest",
    "SideRequest",
    "UltimateRequest",
    "AdjustResourceRequest",
    # Responses
    "SessionResponse",
    "ActionResponse",
    "EventLogResponse",
    "NotificationListResponse",
    "ErrorResponse",
    # Shared
    "PartyInfo",
    "MatchStateInfo",
    "LogEntryInfo",
    "NotificationInfo",
    # Service
    "APIService",
    "create_app",
]
