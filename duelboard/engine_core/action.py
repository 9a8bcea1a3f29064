"""
Action System - Actions, payloads, and results.

Actions represent the discrete intents a view can report:
1. Match lifecycle (initialize, reset)
2. Turn flow (advance turn)
3. Table counters and toggles (resources, ultimate, skill, zero-cost flag)

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Side, Resource, Direction

class ActionType(Enum):
    """Types of actions in the system."""
    # Lifecycle
    INITIALIZE = "initialize"
    RESET = "reset"

    # Turn flow
    ADVANCE_TURN = "advance_turn"

    # Per-party controls
    ADJUST_RESOURCE = "adjust_resource"
    TOGGLE_ULTIMATE = "toggle_ultimate"
    USE_SKILL = "use_skill"
    TOGGLE_ZERO_COST = "toggle_zero_cost"

# Actions that must name the party they target
PARTY_ACTIONS = frozenset({
    ActionType.ADJUST_RESOURCE,
    ActionType.TOGGLE_ULTIMATE,
    ActionType.USE_SKILL,
    ActionType.TOGGLE_ZERO_COST,
})

@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    Validation happens in the reducer.
    """
    side: Side | None = None
    resource: Resource | None = None
    direction: Direction | None = None

@dataclass
class Action:
    """
    A complete action to be applied to the match state.

    Actions are:
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def initialize(cls) -> Action:
        return cls(action_type=ActionType.INITIALIZE)

    @classmethod
    def reset(cls) -> Action:
        """Factory for reset. Gated by confirmation in the reducer."""
        return cls(action_type=ActionType.RESET)

    @classmethod
    def advance_turn(cls) -> Action:
        return cls(action_type=ActionType.ADVANCE_TURN)

    @classmethod
    def adjust_resource(
        cls, side: Side, resource: Resource, direction: Direction
    ) -> Action:
        """Factory for a plus/minus control press."""
        return cls(
            action_type=ActionType.ADJUST_RESOURCE,
            payload=ActionPayload(side=side, resource=resource, direction=direction),
        )

    @classmethod
    def toggle_ultimate(cls, side: Side) -> Action:
        return cls(
            action_type=ActionType.TOGGLE_ULTIMATE,
            payload=ActionPayload(side=side),
        )

    @classmethod
    def use_skill(cls, side: Side) -> Action:
        return cls(
            action_type=ActionType.USE_SKILL,
            payload=ActionPayload(side=side),
        )

    @classmethod
    def toggle_zero_cost(cls, side: Side) -> Action:
        return cls(
            action_type=ActionType.TOGGLE_ZERO_COST,
            payload=ActionPayload(side=side),
        )

@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was well-formed and handled
    - New state (unchanged state for refused or declined intents)
    - Narration for the event log, in append order
    - At most one transient notification
    """
    success: bool
    new_state: Any | None = None  # MatchState
    error: str | None = None
    error_code: str | None = None

    # For the event log
    log_messages: list[str] = field(default_factory=list)
    clears_log: bool = False

    # For the notification channel
    notification: str | None = None

    # Confirmation gate outcome
    confirmation_prompt: str | None = None
    declined: bool = False

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        messages: list[str] | None = None,
        notification: str | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            log_messages=messages or [],
            notification=notification,
        )
