"""
FastAPI Application - REST API for the browser UI.

Endpoints:
    POST   /api/v1/sessions                   Create match session
    GET    /api/v1/sessions                   List active sessions
    GET    /api/v1/sessions/{id}              Get session status and state
    DELETE /api/v1/sessions/{id}              End session
    GET    /api/v1/sessions/{id}/log          Get the event log
    GET    /api/v1/sessions/{id}/notifications  Recent notifications (polling)
    POST   /api/v1/sessions/{id}/reset        Reset the match (confirmed)
    POST   /api/v1/sessions/{id}/turn         Advance to the next turn
    POST   /api/v1/sessions/{id}/resources    Step a counter up or down
    POST   /api/v1/sessions/{id}/ultimate     Toggle ultimate (cancel confirmed)
    POST   /api/v1/sessions/{id}/skill        Use leader skill
    POST   /api/v1/sessions/{id}/zero-cost    Toggle zero-cost flag
    WS     /api/v1/sessions/{id}/ws           WebSocket for real-time updates

Confirmation Flow:
    Reset and ultimate cancellation need the user's consent. The UI asks
    first and sends {"confirmed": true}. Without it the intent is a no-op
    and the response carries the confirmation_prompt to show.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import json
import logging
import os

from .. import __version__

# Environment configuration
DUELBOARD_ENV = os.getenv("DUELBOARD_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, Request, WebSocket, WebSocketDisconnect
        from fastapi.encoders import jsonable_encoder
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateSessionRequest,
        ConfirmableRequest,
        SideRequest,
        UltimateRequest,
        AdjustResourceRequest,
        # Response models
        SessionResponse,
        ActionResponse,
        EventLogResponse,
        NotificationListResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        ErrorResponse,
        # Enums
        ErrorCode,
    )
    from ..config import EngineConfig
    from ..session import SessionManager

    app = FastAPI(
        title="Duelboard API",
        description="""
Resource tracker for a two-party card game played at a physical table.

## Confirmation Flow

`POST /reset` and `POST /ultimate` (when the ultimate is already used)
only change anything when the body says `"confirmed": true`. Otherwise
the response has `declined=true` and the `confirmation_prompt` to show.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ACTION` | The engine rejected a malformed intent |
| `VALIDATION_ERROR` | Request body or path parameter failed validation (422) |
| `INTERNAL_ERROR` | Unexpected failure |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or APIService(
        session_manager=SessionManager(default_config=EngineConfig.from_env())
    )
    app.state.api_service = api_service

    # WebSocket connections
    ws_connections: dict[str, list[WebSocket]] = {}
    app.state.ws_connections = ws_connections

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_for(response) -> Optional[JSONResponse]:
        """Map a service-level failure to an HTTP error, if there is one."""
        if isinstance(response, ErrorResponse):
            status_code = 404 if response.error_code == ErrorCode.SESSION_NOT_FOUND else 400
            return make_error_response(response.error_code, response.error, status_code)
        if isinstance(response, ActionResponse) and not response.success:
            return make_error_response(
                ErrorCode.INVALID_ACTION,
                response.error or "Action rejected",
                details={"engine_error_code": response.error_code},
            )
        return None

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            status_code=500,
        )

    def drop_connection(session_id: str, websocket: WebSocket):
        """Forget a socket; the session's entry goes once it has none left."""
        connections = ws_connections.get(session_id)
        if connections is None:
            return
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            del ws_connections[session_id]

    async def broadcast_to_session(session_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a session."""
        dead_connections = []
        for ws in list(ws_connections.get(session_id, [])):
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append(ws)
        for ws in dead_connections:
            drop_connection(session_id, ws)

    async def close_session_sockets(session_id: str, reason: str):
        """Tell every open view that the session is gone, then hang up."""
        for ws in ws_connections.pop(session_id, []):
            try:
                await ws.send_json({
                    "type": "session_ended",
                    "payload": {"reason": reason},
                })
                await ws.close()
            except (RuntimeError, WebSocketDisconnect):
                logger.debug("Socket for session %s already closed", session_id)

    async def publish(response: ActionResponse):
        """Push the outcome of an intent to every open view of the session."""
        if response.state is not None:
            await broadcast_to_session(response.session_id, {
                "type": "state_update",
                "payload": response.state.model_dump(mode="json"),
            })
        if response.log_messages or response.log_cleared:
            await broadcast_to_session(response.session_id, {
                "type": "log",
                "payload": {
                    "messages": response.log_messages,
                    "cleared": response.log_cleared,
                },
            })
        if response.notification is not None:
            await broadcast_to_session(response.session_id, {
                "type": "notification",
                "payload": response.notification.model_dump(mode="json"),
            })

    async def respond(response) -> Union[ActionResponse, JSONResponse]:
        error = error_for(response)
        if error is not None:
            return error
        await publish(response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new match session",
    )
    async def create_session(request: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """Create a session; the match starts immediately."""
        return api_service.create_session(request)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status and match state",
    )
    async def get_session(session_id: str):
        response = api_service.get_session(session_id)
        return error_for(response) or response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a match session",
    )
    async def end_session(
        session_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndSessionResponse:
        success = api_service.end_session(session_id, reason)
        await close_session_sockets(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/log",
        response_model=EventLogResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get the event log, most recent first",
    )
    async def get_log(session_id: str):
        response = api_service.get_log(session_id)
        return error_for(response) or response

    @app.get(
        "/api/v1/sessions/{session_id}/notifications",
        response_model=NotificationListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get recent notifications, oldest first",
    )
    async def get_notifications(session_id: str):
        """For views that poll instead of holding a WebSocket open."""
        response = api_service.get_notifications(session_id)
        return error_for(response) or response

    # =========================================================================
    # Intent Endpoints
    # =========================================================================

    intent_responses = {
        400: {"model": ErrorResponse, "description": "Intent rejected"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    }

    @app.post(
        "/api/v1/sessions/{session_id}/reset",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Reset the match",
    )
    async def reset(session_id: str, request: Optional[ConfirmableRequest] = None):
        return await respond(api_service.reset(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/turn",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Advance to the next turn",
    )
    async def advance_turn(session_id: str):
        return await respond(api_service.advance_turn(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/resources",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Step hp, cost or charge up or down",
    )
    async def adjust_resource(session_id: str, request: AdjustResourceRequest):
        return await respond(api_service.adjust_resource(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/ultimate",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Use the ultimate, or cancel it with confirmation",
    )
    async def toggle_ultimate(session_id: str, request: UltimateRequest):
        return await respond(api_service.toggle_ultimate(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/skill",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Use the leader skill",
    )
    async def use_skill(session_id: str, request: SideRequest):
        return await respond(api_service.use_skill(session_id, request))

    @app.post(
        "/api/v1/sessions/{session_id}/zero-cost",
        response_model=ActionResponse,
        responses=intent_responses,
        tags=["Match"],
        summary="Toggle the zero-cost flag",
    )
    async def toggle_zero_cost(session_id: str, request: SideRequest):
        return await respond(api_service.toggle_zero_cost(session_id, request))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state_update: Match state changed
        - log: New narration lines (or the log was cleared)
        - notification: Show a banner for `duration` seconds
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            await websocket.send_json({
                "type": "error",
                "payload": {"message": response.error},
            })
            await websocket.close()
            return

        ws_connections.setdefault(session_id, []).append(websocket)

        try:
            await websocket.send_json({
                "type": "state_update",
                "payload": response.state.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})

        except WebSocketDisconnect:
            logger.debug("WebSocket for session %s disconnected", session_id)
        finally:
            drop_connection(session_id, websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="duelboard",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Duelboard API",
            "version": __version__,
            "environment": DUELBOARD_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
