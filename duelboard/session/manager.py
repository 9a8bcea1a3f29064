"""
Session Manager - Creates and manages match sessions.

LIFECYCLE:
1. A view opens a session → match initialized, log says "Game start"
2. During the game:
   - The view reports intents
   - The reducer validates and applies them
   - The session appends narration and forwards notifications
   - The view redraws from the snapshot
3. Session ends → removed from memory, nothing persisted

PERSISTENCE RULES:
- NO database
- Match state and event log live exactly as long as the session
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import time
import uuid

from ..config import EngineConfig
from ..engine_core.state import MatchState
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..engine_core.event_log import EventLog, NotificationChannel
from ..engine_core.confirmation import ConfirmFn, always_decline

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a match session."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Session:
    """
    An ephemeral match session.

    Owns the one live MatchState together with its event log and
    notification channel. Everything that mutates them goes through
    dispatch().
    """
    session_id: str
    created_at: float
    config: EngineConfig = field(default_factory=EngineConfig)

    state: SessionState = SessionState.ACTIVE
    match: MatchState | None = None
    event_log: EventLog = field(default_factory=EventLog)
    notifications: NotificationChannel | None = None

    last_activity: float = 0.0

    def __post_init__(self):
        if self.notifications is None:
            self.notifications = NotificationChannel(
                duration=self.config.notification_duration
            )
        if not self.last_activity:
            self.last_activity = self.created_at

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def dispatch(self, action: Action, confirm: ConfirmFn = always_decline) -> ActionResult:
        """
        Apply an intent to this session's match.

        On success the match is replaced, the log is cleared if the
        transition asks for it, narration is appended in order and the
        notification (if any) is sent.
        """
        reducer = Reducer(config=self.config, confirm=confirm)
        result = reducer.apply(self.match, action)

        if not result.success:
            logger.info(
                "Session %s rejected %s: %s",
                self.session_id, action.action_type.value, result.error,
            )
            return result

        logger.debug(
            "Session %s applied %s%s",
            self.session_id,
            action.action_type.value,
            " (declined)" if result.declined else "",
        )

        self.match = result.new_state
        if result.clears_log:
            self.event_log.clear()
        self.event_log.extend(result.log_messages)
        if result.notification:
            self.notifications.notify(result.notification)
        self.last_activity = time.time()
        return result


class SessionManager:
    """
    Manages match sessions.

    Responsibilities:
    - Create sessions with their own config
    - Track active sessions
    - Clean up idle sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, default_config: EngineConfig | None = None):
        self.default_config = default_config or EngineConfig()
        self._sessions: dict[str, Session] = {}

    def create_session(self, config: EngineConfig | None = None) -> Session:
        """
        Create a new session and start its match.

        Args:
            config: Rules for this match (manager default if not provided)

        Returns:
            Session with an initialized match and a "Game start" log entry
        """
        session = Session(
            session_id=str(uuid.uuid4()),
            created_at=time.time(),
            config=config or self.default_config,
        )
        session.dispatch(Action.initialize())

        self._sessions[session.session_id] = session
        logger.info(
            "Created session %s (cost policy: %s)",
            session.session_id, session.config.cost_policy.value,
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False

        session.state = SessionState.ENDED
        session.event_log.clear()
        session.match = None
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_idle_seconds: int = 3600) -> list[str]:
        """
        End sessions with no activity for max_idle_seconds.

        Returns the IDs that were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_activity > max_idle_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return to_remove
