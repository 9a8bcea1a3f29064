"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine intents
2. Manages sessions
3. Answers confirmation gates with what the client sent
4. Formats responses for the UI

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace

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
    # Enums
    SideName,
    SessionStatus,
    CostPolicyName,
    ErrorCode,
)
from ..config import CostPolicy
from ..engine_core.state import MatchState, Side, Resource, Direction
from ..engine_core.action import Action, ActionResult
from ..engine_core.confirmation import PromptRecorder
from ..engine_core.event_log import Notification
from ..session import SessionManager, Session


@dataclass
class APIService:
    """
    Main API service for the browser UI.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest())
        response = service.advance_turn(session.session_id)
        response = service.reset(session.session_id, ConfirmableRequest(confirmed=True))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest | None = None) -> SessionResponse:
        """Open a session, optionally overriding the cost policy."""
        config = self.session_manager.default_config
        if request and request.cost_policy:
            config = replace(config, cost_policy=CostPolicy(request.cost_policy.value))

        session = self.session_manager.create_session(config=config)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_log(self, session_id: str) -> EventLogResponse | ErrorResponse:
        """The full event log, most recent first."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        entries = [
            LogEntryInfo(
                timestamp=entry.timestamp.isoformat(),
                message=entry.message,
                rendered=entry.render(),
            )
            for entry in session.event_log.entries()
        ]
        return EventLogResponse(session_id=session_id, entries=entries, count=len(entries))

    def get_notifications(self, session_id: str) -> NotificationListResponse | ErrorResponse:
        """Recent notifications, for clients that poll instead of holding a WebSocket."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        notifications = [
            self._notification_info(n) for n in session.notifications.recent()
        ]
        return NotificationListResponse(
            session_id=session_id,
            notifications=notifications,
            count=len(notifications),
        )

    # =========================================================================
    # Intents
    # =========================================================================

    def reset(
        self, session_id: str, request: ConfirmableRequest | None = None
    ) -> ActionResponse | ErrorResponse:
        confirmed = request.confirmed if request else False
        return self._dispatch(session_id, Action.reset(), confirmed=confirmed)

    def advance_turn(self, session_id: str) -> ActionResponse | ErrorResponse:
        return self._dispatch(session_id, Action.advance_turn())

    def adjust_resource(
        self, session_id: str, request: AdjustResourceRequest
    ) -> ActionResponse | ErrorResponse:
        action = Action.adjust_resource(
            Side(request.side.value),
            Resource(request.resource.value),
            Direction(request.direction.value),
        )
        return self._dispatch(session_id, action)

    def toggle_ultimate(
        self, session_id: str, request: UltimateRequest
    ) -> ActionResponse | ErrorResponse:
        return self._dispatch(
            session_id,
            Action.toggle_ultimate(Side(request.side.value)),
            confirmed=request.confirmed,
        )

    def use_skill(self, session_id: str, request: SideRequest) -> ActionResponse | ErrorResponse:
        return self._dispatch(session_id, Action.use_skill(Side(request.side.value)))

    def toggle_zero_cost(
        self, session_id: str, request: SideRequest
    ) -> ActionResponse | ErrorResponse:
        return self._dispatch(session_id, Action.toggle_zero_cost(Side(request.side.value)))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _dispatch(
        self, session_id: str, action: Action, confirmed: bool = False
    ) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        result = session.dispatch(action, confirm=PromptRecorder(answer=confirmed))
        return self._result_to_response(session, result)

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _result_to_response(self, session: Session, result: ActionResult) -> ActionResponse:
        notification = None
        if result.success and result.notification:
            # dispatch() has just pushed it onto the channel
            notification = self._notification_info(session.notifications.recent()[-1])

        return ActionResponse(
            success=result.success,
            session_id=session.session_id,
            state=self._state_info(session.match) if session.match else None,
            log_messages=result.log_messages,
            log_cleared=result.clears_log,
            notification=notification,
            confirmation_prompt=result.confirmation_prompt,
            declined=result.declined,
            error=result.error,
            error_code=result.error_code,
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            cost_policy=CostPolicyName(session.config.cost_policy.value),
            max_cost_cap=session.config.max_cost_cap,
            state=self._state_info(session.match),
            created_at=session.created_at,
        )

    @staticmethod
    def _notification_info(notification: Notification) -> NotificationInfo:
        return NotificationInfo(
            message=notification.message,
            duration=notification.duration,
        )

    @staticmethod
    def _state_info(match: MatchState) -> MatchStateInfo:
        return MatchStateInfo(
            player=PartyInfo.model_validate(match.player),
            opponent=PartyInfo.model_validate(match.opponent),
            is_player_turn=match.is_player_turn,
            active_side=SideName(match.active_side.value),
            turn_number=match.turn_number,
        )
