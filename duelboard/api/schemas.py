"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the browser UI and the
engine. All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_ACTION: The engine rejected a malformed intent
- VALIDATION_ERROR: Request body or path failed validation (HTTP 422)
- INTERNAL_ERROR: Unexpected server failure (HTTP 500)
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SideName(str, Enum):
    """Party identifiers."""
    PLAYER = "player"
    OPPONENT = "opponent"


class ResourceName(str, Enum):
    """Adjustable counters."""
    HP = "hp"
    COST = "cost"
    CHARGE = "charge"


class DirectionName(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"


class CostPolicyName(str, Enum):
    """Whether the cost plus control stops at max cost."""
    CLAMPED = "clamped"
    UNCLAMPED = "unclamped"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PartyInfo(BaseModel):
    """One side of the table, as rendered."""
    hp: int
    cost: int
    max_cost: int
    charge: int
    ultimate_used: bool = False
    zero_cost_used: bool = False

    model_config = {"from_attributes": True}


class MatchStateInfo(BaseModel):
    """Full snapshot of the match for redrawing."""
    player: PartyInfo
    opponent: PartyInfo
    is_player_turn: bool
    active_side: SideName
    turn_number: int = 1


class LogEntryInfo(BaseModel):
    """A single narration line."""
    timestamp: str = Field(description="ISO 8601 timestamp")
    message: str
    rendered: str = Field(description="[HH:MM:SS] message")


class NotificationInfo(BaseModel):
    """A transient banner the UI shows and then dismisses on its own."""
    message: str
    duration: float = Field(description="Seconds to keep the banner visible")


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to open a new match session."""
    cost_policy: Optional[CostPolicyName] = Field(
        None, description="Overrides the server default cost policy"
    )


class ConfirmableRequest(BaseModel):
    """
    Body for gated intents.

    The client asks the user first and sends the answer along. Sending
    false (or nothing) makes the intent a no-op; the response then names
    the prompt that would have been shown.
    """
    confirmed: bool = False


class SideRequest(BaseModel):
    side: SideName


class UltimateRequest(BaseModel):
    side: SideName
    confirmed: bool = False


class AdjustResourceRequest(BaseModel):
    side: SideName
    resource: ResourceName
    direction: DirectionName


# =============================================================================
# Response Models
# =============================================================================

class SessionResponse(BaseModel):
    """Session status with the current snapshot."""
    session_id: str
    status: SessionStatus
    cost_policy: CostPolicyName
    max_cost_cap: int
    state: MatchStateInfo
    created_at: float


class ActionResponse(BaseModel):
    """Outcome of one intent."""
    success: bool
    session_id: str
    state: Optional[MatchStateInfo] = None
    log_messages: list[str] = Field(default_factory=list)
    log_cleared: bool = False
    notification: Optional[NotificationInfo] = None
    confirmation_prompt: Optional[str] = None
    declined: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None


class EventLogResponse(BaseModel):
    """Log feed, most recent first."""
    session_id: str
    entries: list[LogEntryInfo] = Field(default_factory=list)
    count: int = 0


class NotificationListResponse(BaseModel):
    """Recently requested notifications, oldest first."""
    session_id: str
    notifications: list[NotificationInfo] = Field(default_factory=list)
    count: int = 0


class SessionListResponse(BaseModel):
    sessions: list[str] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error body."""
    error: str
    error_code: ErrorCode
    details: Optional[dict] = None
