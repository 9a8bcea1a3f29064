"""
Tests for the reducer (state transitions).

Tests:
- Initialize and reset
- Turn advancement and max cost growth
- Resource controls and clamping
- Ultimate, leader skill and zero-cost flag
- Validation of malformed actions
"""

from dataclasses import fields

import pytest

from ..config import CostPolicy, EngineConfig
from ..engine_core.state import MatchState, Party, Side, Resource, Direction
from ..engine_core.action import Action, ActionType, ActionPayload
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.confirmation import (
    PromptRecorder, always_confirm, always_decline, RESET_PROMPT, CANCEL_ULTIMATE_PROMPT,
)


def press(state, side, resource, direction, config=None):
    action = Action.adjust_resource(side, resource, direction)
    return apply_action(state, action, config=config).new_state


class TestInitialize:
    """Tests for game start."""

    def test_initial_state(self):
        """Player starts with one cost, opponent with none."""
        result = apply_action(None, Action.initialize())

        assert result.success
        state = result.new_state
        assert state.is_player_turn
        assert state.player == Party(hp=20, cost=1, max_cost=1)
        assert state.opponent == Party(hp=20, cost=0, max_cost=0)
        assert result.log_messages == ["Game start"]
        assert result.notification is None

    def test_starting_hp_from_config(self):
        """Starting HP comes from the config."""
        result = apply_action(None, Action.initialize(), config=EngineConfig(starting_hp=30))

        assert result.new_state.player.hp == 30
        assert result.new_state.opponent.hp == 30

    def test_other_actions_need_a_match(self):
        """Nothing but initialize is accepted before the match exists."""
        result = apply_action(None, Action.advance_turn())

        assert not result.success
        assert result.error_code == "INVALID_ACTION"


class TestReset:
    """Tests for the confirmation-gated reset."""

    def test_declined_reset_is_noop(self, declining_reducer, charged_state):
        """Declining leaves state and log untouched."""
        result = declining_reducer.apply(charged_state, Action.reset())

        assert result.success
        assert result.declined
        assert result.new_state is charged_state
        assert result.log_messages == []
        assert not result.clears_log
        assert result.confirmation_prompt == RESET_PROMPT

    def test_confirmed_reset(self, approving_reducer, charged_state):
        """Confirming restores the initial state and clears the log."""
        state = approving_reducer.apply(charged_state, Action.advance_turn()).new_state

        result = approving_reducer.apply(state, Action.reset())

        assert result.success
        assert not result.declined
        assert result.new_state == MatchState.initial()
        assert result.clears_log
        assert result.log_messages == ["Game reset"]

    def test_reset_asks_the_gate(self, fresh_state):
        """The reset prompt reaches the confirmation gate."""
        recorder = PromptRecorder(answer=False)
        Reducer(confirm=recorder).apply(fresh_state, Action.reset())

        assert recorder.prompts == [RESET_PROMPT]


class TestAdvanceTurn:
    """Tests for turn advancement."""

    def test_first_advance(self, fresh_state):
        """Opponent's first turn gives it one cost."""
        result = apply_action(fresh_state, Action.advance_turn())
        state = result.new_state

        assert not state.is_player_turn
        assert state.opponent.max_cost == 1
        assert state.opponent.cost == 1
        assert state.player.zero_cost_used is False
        assert state.player.max_cost == 1
        assert result.log_messages == ["Opponent's turn", "Max cost is now 1"]

    def test_clears_zero_cost_of_ending_party(self, fresh_state):
        """The party whose turn ends loses its zero-cost flag."""
        state = apply_action(fresh_state, Action.toggle_zero_cost(Side.PLAYER)).new_state
        state = apply_action(state, Action.toggle_zero_cost(Side.OPPONENT)).new_state

        state = apply_action(state, Action.advance_turn()).new_state

        assert state.player.zero_cost_used is False
        # Opponent's flag is only cleared when its own turn ends
        assert state.opponent.zero_cost_used is True

        state = apply_action(state, Action.advance_turn()).new_state
        assert state.opponent.zero_cost_used is False

    def test_refills_spent_cost(self, fresh_state):
        """Cost is refilled to the new max cost."""
        state = press(fresh_state, Side.PLAYER, Resource.COST, Direction.DECREMENT)
        assert state.player.cost == 0

        state = apply_action(state, Action.advance_turn()).new_state
        state = apply_action(state, Action.advance_turn()).new_state

        assert state.is_player_turn
        assert state.player.max_cost == 2
        assert state.player.cost == 2

    def test_max_cost_caps_at_ten(self, fresh_state):
        """Eleven advances leave the opponent capped at 10, never decreasing."""
        state = fresh_state
        history = []
        for _ in range(21):
            state = apply_action(state, Action.advance_turn()).new_state
            history.append((state.player.max_cost, state.opponent.max_cost))

        player_caps = [p for p, _ in history]
        opponent_caps = [o for _, o in history]
        assert player_caps == sorted(player_caps)
        assert opponent_caps == sorted(opponent_caps)
        assert max(player_caps) == 10
        assert max(opponent_caps) == 10
        assert state.opponent.cost == 10

    def test_cap_reached_logs_cap(self):
        """Once capped, the log keeps reporting the cap."""
        state = MatchState.initial()._copy_with(
            opponent=Party(hp=20, cost=3, max_cost=10),
        )

        result = apply_action(state, Action.advance_turn())

        assert result.new_state.opponent.max_cost == 10
        assert result.new_state.opponent.cost == 10
        assert result.log_messages[1] == "Max cost is now 10"

    def test_custom_cap(self, fresh_state):
        """The cap comes from the config."""
        config = EngineConfig(max_cost_cap=3)
        state = fresh_state
        for _ in range(10):
            state = apply_action(state, Action.advance_turn(), config=config).new_state

        assert state.player.max_cost == 3
        assert state.opponent.max_cost == 3

    def test_turn_number_counts_up(self, fresh_state):
        state = apply_action(fresh_state, Action.advance_turn()).new_state
        assert state.turn_number == 2

    def test_only_active_party_grows(self, fresh_state):
        """Advancing never touches the ending party's cost counters."""
        state = apply_action(fresh_state, Action.advance_turn()).new_state
        assert state.player.cost == fresh_state.player.cost
        assert state.player.max_cost == fresh_state.player.max_cost


class TestAdjustResource:
    """Tests for the plus/minus controls."""

    def test_hp_is_unclamped(self, fresh_state):
        """HP can go negative and past the starting value."""
        state = fresh_state
        for _ in range(25):
            state = press(state, Side.OPPONENT, Resource.HP, Direction.DECREMENT)
        assert state.opponent.hp == -5

        state = press(fresh_state, Side.PLAYER, Resource.HP, Direction.INCREMENT)
        assert state.player.hp == 21

    def test_charge_floor(self, fresh_state):
        """Charge never drops below zero."""
        state = press(fresh_state, Side.PLAYER, Resource.CHARGE, Direction.INCREMENT)
        state = press(state, Side.PLAYER, Resource.CHARGE, Direction.DECREMENT)
        state = press(state, Side.PLAYER, Resource.CHARGE, Direction.DECREMENT)

        assert state.player.charge == 0

    def test_charge_has_no_upper_bound(self, fresh_state):
        state = fresh_state
        for _ in range(15):
            state = press(state, Side.OPPONENT, Resource.CHARGE, Direction.INCREMENT)
        assert state.opponent.charge == 15

    def test_cost_floor(self, fresh_state):
        """Cost never drops below zero."""
        state = press(fresh_state, Side.OPPONENT, Resource.COST, Direction.DECREMENT)
        assert state.opponent.cost == 0

    def test_clamped_cost_stops_at_max(self, fresh_state):
        """Under the clamped policy cost+ stops at max cost."""
        state = press(fresh_state, Side.PLAYER, Resource.COST, Direction.INCREMENT)
        assert state.player.cost == 1

        state = press(state, Side.PLAYER, Resource.COST, Direction.DECREMENT)
        state = press(state, Side.PLAYER, Resource.COST, Direction.INCREMENT)
        assert state.player.cost == 1

    def test_unclamped_cost_passes_max(self, fresh_state, unclamped_config):
        """Under the unclamped policy cost+ always adds one."""
        state = fresh_state
        for _ in range(3):
            state = press(state, Side.PLAYER, Resource.COST, Direction.INCREMENT, unclamped_config)
        assert state.player.cost == 4
        assert state.player.max_cost == 1

    def test_no_narration(self, fresh_state):
        """Resource presses never write to the log."""
        action = Action.adjust_resource(Side.PLAYER, Resource.HP, Direction.DECREMENT)
        result = apply_action(fresh_state, action)

        assert result.success
        assert result.log_messages == []
        assert result.notification is None

    def test_refused_press_keeps_state(self, fresh_state):
        """A refused decrement returns the same state object."""
        action = Action.adjust_resource(Side.OPPONENT, Resource.CHARGE, Direction.DECREMENT)
        result = apply_action(fresh_state, action)

        assert result.success
        assert result.new_state is fresh_state

    def test_does_not_touch_other_party(self, fresh_state):
        state = press(fresh_state, Side.PLAYER, Resource.HP, Direction.DECREMENT)
        assert state.opponent == fresh_state.opponent


class TestUltimate:
    """Tests for the ultimate toggle."""

    def test_activate(self, fresh_state):
        """First press marks it used and notifies."""
        result = apply_action(fresh_state, Action.toggle_ultimate(Side.PLAYER))

        assert result.new_state.player.ultimate_used
        assert result.notification == "Ultimate activated"
        assert result.log_messages == ["Player used their ultimate"]
        assert result.confirmation_prompt is None

    def test_activate_does_not_ask(self, fresh_state):
        """Activation needs no confirmation."""
        recorder = PromptRecorder(answer=False)
        Reducer(confirm=recorder).apply(fresh_state, Action.toggle_ultimate(Side.PLAYER))

        assert recorder.prompts == []

    def test_cancel_confirmed(self, fresh_state, approving_reducer):
        """Opponent uses then cancels: back to unused, one notification total."""
        first = approving_reducer.apply(fresh_state, Action.toggle_ultimate(Side.OPPONENT))
        second = approving_reducer.apply(first.new_state, Action.toggle_ultimate(Side.OPPONENT))

        assert second.new_state.opponent.ultimate_used is False
        assert first.notification == "Ultimate activated"
        assert second.notification is None
        assert second.log_messages == ["Opponent cancelled their ultimate"]
        assert second.confirmation_prompt == CANCEL_ULTIMATE_PROMPT

    def test_cancel_leaves_counters(self, charged_state, approving_reducer):
        """Activating then cancelling leaves hp/cost/charge untouched."""
        state = approving_reducer.apply(charged_state, Action.toggle_ultimate(Side.PLAYER)).new_state
        state = approving_reducer.apply(state, Action.toggle_ultimate(Side.PLAYER)).new_state

        assert state.player == charged_state.player

    def test_cancel_declined(self, fresh_state, declining_reducer):
        """Declining the cancel changes nothing and logs nothing."""
        state = declining_reducer.apply(fresh_state, Action.toggle_ultimate(Side.PLAYER)).new_state

        result = declining_reducer.apply(state, Action.toggle_ultimate(Side.PLAYER))

        assert result.declined
        assert result.new_state.player.ultimate_used
        assert result.log_messages == []
        assert result.notification is None


class TestLeaderSkill:
    """Tests for the leader skill."""

    def test_use_with_charge(self, charged_state):
        """Spends all charge, notifies once and logs the transition."""
        result = apply_action(charged_state, Action.use_skill(Side.PLAYER))

        assert result.new_state.player.charge == 0
        assert result.notification == "Leader skill activated"
        assert len(result.log_messages) == 1
        assert "3 → 0" in result.log_messages[0]

    def test_use_without_charge(self, fresh_state):
        """No charge: one log entry, no change, no notification."""
        result = apply_action(fresh_state, Action.use_skill(Side.OPPONENT))

        assert result.success
        assert result.new_state.opponent == fresh_state.opponent
        assert result.notification is None
        assert result.log_messages == [
            "Opponent cannot use their leader skill: not enough charge"
        ]

    def test_only_affects_charge(self, charged_state):
        result = apply_action(charged_state, Action.use_skill(Side.PLAYER))
        assert result.new_state.player == charged_state.player.with_changes(charge=0)


class TestZeroCostFlag:
    """Tests for the manual zero-cost toggle."""

    def test_toggle_on_and_off(self, fresh_state):
        on = apply_action(fresh_state, Action.toggle_zero_cost(Side.OPPONENT))
        off = apply_action(on.new_state, Action.toggle_zero_cost(Side.OPPONENT))

        assert on.new_state.opponent.zero_cost_used is True
        assert on.log_messages == ["Opponent zero-cost flag is now ON"]
        assert off.new_state.opponent.zero_cost_used is False
        assert off.log_messages == ["Opponent zero-cost flag is now OFF"]


class TestValidation:
    """Tests for malformed actions."""

    def test_missing_side(self, fresh_state):
        action = Action(action_type=ActionType.USE_SKILL, payload=ActionPayload())
        result = apply_action(fresh_state, action)

        assert not result.success
        assert result.error_code == "INVALID_ACTION"
        assert "side" in result.error

    def test_payload_carries_only_party_targets(self):
        """Intents are fully described by side, resource and direction."""
        action = Action.adjust_resource(Side.PLAYER, Resource.HP, Direction.INCREMENT)

        assert [f.name for f in fields(action)] == ["action_type", "payload"]
        assert [f.name for f in fields(action.payload)] == ["side", "resource", "direction"]

    def test_missing_direction(self, fresh_state):
        action = Action(
            action_type=ActionType.ADJUST_RESOURCE,
            payload=ActionPayload(side=Side.PLAYER, resource=Resource.HP),
        )
        result = apply_action(fresh_state, action)

        assert not result.success
        assert "direction" in result.error

    def test_handler_error_is_reported(self, fresh_state):
        """An exception inside a handler comes back as a failure result."""
        def exploding_confirm(prompt):
            raise RuntimeError("view went away")

        result = Reducer(confirm=exploding_confirm).apply(fresh_state, Action.reset())

        assert not result.success
        assert result.error_code == "HANDLER_ERROR"
        assert "view went away" in result.error


class TestDecrementProperty:
    """Counters with a floor hold it under any sequence of presses."""

    @pytest.mark.parametrize("resource", [Resource.COST, Resource.CHARGE])
    @pytest.mark.parametrize("policy", list(CostPolicy))
    def test_never_negative(self, fresh_state, resource, policy):
        config = EngineConfig(cost_policy=policy)
        pattern = [Direction.INCREMENT, Direction.DECREMENT, Direction.DECREMENT] * 5
        state = fresh_state
        for direction in pattern:
            for side in Side:
                state = press(state, side, resource, direction, config)
                assert state.party(side).get(resource) >= 0


def test_stubs_answer_fixed_values():
    assert always_confirm("anything") is True
    assert always_decline("anything") is False
