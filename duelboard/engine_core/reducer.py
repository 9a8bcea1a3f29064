"""
Reducer - Applies actions to match state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Pure function: (state, action) -> new_state
- Validates before applying
- Returns ActionResult with success/failure
- Rule refusals are not failures: they succeed with the state unchanged
- Confirmation is asked through an injected ConfirmFn
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..config import CostPolicy, EngineConfig
from .state import MatchState, Side, Resource, Direction
from .action import Action, ActionType, ActionResult, PARTY_ACTIONS
from .confirmation import (
    ConfirmFn, always_decline, RESET_PROMPT, CANCEL_ULTIMATE_PROMPT,
)

logger = logging.getLogger(__name__)

ULTIMATE_NOTIFICATION = "Ultimate activated"
SKILL_NOTIFICATION = "Leader skill activated"


@dataclass
class Reducer:
    """
    Reducer applies actions to match state.

    Stateless - all state is in MatchState.
    Config provides the rules knobs; confirm answers the gated intents.
    """
    config: EngineConfig = field(default_factory=EngineConfig)
    confirm: ConfirmFn = always_decline

    def apply(self, state: MatchState | None, action: Action) -> ActionResult:
        """
        Apply an action to the match state.

        Returns ActionResult with new state or error.
        """
        validation_error = self._validate_action(state, action)
        if validation_error:
            return ActionResult.failure(validation_error, error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        try:
            return handler(state, action)
        except Exception as e:
            logger.exception("Handler for %s failed", action.action_type.value)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR")

    def _validate_action(self, state: MatchState | None, action: Action) -> str | None:
        """
        Validate that an action is well-formed.

        Returns error message if invalid, None if valid.
        """
        if state is None and action.action_type != ActionType.INITIALIZE:
            return "Match not initialized - only initialize is allowed"

        if action.action_type in PARTY_ACTIONS and not isinstance(action.payload.side, Side):
            return f"{action.action_type.value} requires a side"

        if action.action_type == ActionType.ADJUST_RESOURCE:
            if not isinstance(action.payload.resource, Resource):
                return "adjust_resource requires a resource"
            if not isinstance(action.payload.direction, Direction):
                return "adjust_resource requires a direction"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.INITIALIZE: self._handle_initialize,
            ActionType.RESET: self._handle_reset,
            ActionType.ADVANCE_TURN: self._handle_advance_turn,
            ActionType.ADJUST_RESOURCE: self._handle_adjust_resource,
            ActionType.TOGGLE_ULTIMATE: self._handle_toggle_ultimate,
            ActionType.USE_SKILL: self._handle_use_skill,
            ActionType.TOGGLE_ZERO_COST: self._handle_toggle_zero_cost,
        }
        return handlers.get(action_type)

    def _handle_initialize(self, state: MatchState | None, action: Action) -> ActionResult:
        """Handle game start."""
        return ActionResult.success_with_state(
            MatchState.initial(self.config),
            messages=["Game start"],
        )

    def _handle_reset(self, state: MatchState, action: Action) -> ActionResult:
        """
        Handle reset.

        Declining leaves everything as it was, including the log.
        Confirming starts over with a fresh log.
        """
        if not self.confirm(RESET_PROMPT):
            return ActionResult(
                success=True,
                new_state=state,
                confirmation_prompt=RESET_PROMPT,
                declined=True,
            )

        result = ActionResult.success_with_state(
            MatchState.initial(self.config),
            messages=["Game reset"],
        )
        result.clears_log = True
        result.confirmation_prompt = RESET_PROMPT
        return result

    def _handle_advance_turn(self, state: MatchState, action: Action) -> ActionResult:
        """
        Handle end of turn, hand over to the other party.

        The party whose turn ends loses its zero-cost flag. The party whose
        turn begins grows its max cost (up to the cap) and refills cost.
        """
        ending_side = state.active_side
        ending = state.party(ending_side).with_changes(zero_cost_used=False)
        new_state = state.with_party(ending_side, ending)

        starting_side = ending_side.other
        starting = new_state.party(starting_side)
        max_cost = min(starting.max_cost + 1, self.config.max_cost_cap)
        # Max cost never decreases
        max_cost = max(max_cost, starting.max_cost)
        starting = starting.with_changes(max_cost=max_cost, cost=max_cost)

        new_state = new_state.with_party(starting_side, starting)._copy_with(
            is_player_turn=starting_side is Side.PLAYER,
            turn_number=state.turn_number + 1,
        )

        return ActionResult.success_with_state(
            new_state,
            messages=[
                f"{starting_side.display_name}'s turn",
                f"Max cost is now {max_cost}",
            ],
        )

    def _handle_adjust_resource(self, state: MatchState, action: Action) -> ActionResult:
        """
        Handle a plus/minus control press.

        HP moves freely. Cost and charge never go below zero; cost only
        grows past max cost under the unclamped policy. No narration.
        """
        side = action.payload.side
        resource = action.payload.resource
        step = 1 if action.payload.direction == Direction.INCREMENT else -1

        party = state.party(side)
        current = party.get(resource)
        new_value = current + step

        if step < 0 and resource != Resource.HP and new_value < 0:
            return ActionResult.success_with_state(state)

        if (
            step > 0
            and resource == Resource.COST
            and self.config.cost_policy == CostPolicy.CLAMPED
            and current >= party.max_cost
        ):
            return ActionResult.success_with_state(state)

        new_party = party.with_changes(**{resource.value: new_value})
        return ActionResult.success_with_state(state.with_party(side, new_party))

    def _handle_toggle_ultimate(self, state: MatchState, action: Action) -> ActionResult:
        """
        Handle the ultimate toggle.

        First press marks it used. Pressing again asks before undoing it.
        """
        side = action.payload.side
        party = state.party(side)

        if not party.ultimate_used:
            new_state = state.with_party(side, party.with_changes(ultimate_used=True))
            return ActionResult.success_with_state(
                new_state,
                messages=[f"{side.display_name} used their ultimate"],
                notification=ULTIMATE_NOTIFICATION,
            )

        if not self.confirm(CANCEL_ULTIMATE_PROMPT):
            return ActionResult(
                success=True,
                new_state=state,
                confirmation_prompt=CANCEL_ULTIMATE_PROMPT,
                declined=True,
            )

        new_state = state.with_party(side, party.with_changes(ultimate_used=False))
        result = ActionResult.success_with_state(
            new_state,
            messages=[f"{side.display_name} cancelled their ultimate"],
        )
        result.confirmation_prompt = CANCEL_ULTIMATE_PROMPT
        return result

    def _handle_use_skill(self, state: MatchState, action: Action) -> ActionResult:
        """Handle the leader skill: spends all charge, needs at least one."""
        side = action.payload.side
        party = state.party(side)

        if party.charge <= 0:
            return ActionResult.success_with_state(
                state,
                messages=[f"{side.display_name} cannot use their leader skill: not enough charge"],
            )

        new_state = state.with_party(side, party.with_changes(charge=0))
        return ActionResult.success_with_state(
            new_state,
            messages=[f"{side.display_name} used their leader skill (charge: {party.charge} → 0)"],
            notification=SKILL_NOTIFICATION,
        )

    def _handle_toggle_zero_cost(self, state: MatchState, action: Action) -> ActionResult:
        """Handle the manual zero-cost flag toggle."""
        side = action.payload.side
        party = state.party(side)
        flag = not party.zero_cost_used

        new_state = state.with_party(side, party.with_changes(zero_cost_used=flag))
        return ActionResult.success_with_state(
            new_state,
            messages=[f"{side.display_name} zero-cost flag is now {'ON' if flag else 'OFF'}"],
        )


def apply_action(
    state: MatchState | None,
    action: Action,
    config: EngineConfig | None = None,
    confirm: ConfirmFn = always_decline,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(config=config or EngineConfig(), confirm=confirm)
    return reducer.apply(state, action)
