"""
Tests for API Pydantic schemas.

Validates that:
- Request models reject unknown sides, resources and directions
- Response models serialize enums as plain strings
- Error codes are properly structured
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_adjust_request_accepts_names(self):
        from duelboard.api.schemas import AdjustResourceRequest, ResourceName

        request = AdjustResourceRequest(side="player", resource="cost", direction="increment")

        assert request.resource == ResourceName.COST

    @pytest.mark.parametrize("field,value", [
        ("side", "spectator"),
        ("resource", "mana"),
        ("direction", "sideways"),
    ])
    def test_adjust_request_rejects_unknown_values(self, field, value):
        from duelboard.api.schemas import AdjustResourceRequest

        data = {"side": "player", "resource": "hp", "direction": "increment"}
        data[field] = value

        with pytest.raises(ValidationError):
            AdjustResourceRequest(**data)

    def test_confirmation_defaults_to_false(self):
        from duelboard.api.schemas import ConfirmableRequest, UltimateRequest

        assert ConfirmableRequest().confirmed is False
        assert UltimateRequest(side="opponent").confirmed is False

    def test_party_info_from_engine_party(self):
        """PartyInfo reads the engine dataclass by attributes."""
        from duelboard.api.schemas import PartyInfo
        from duelboard.engine_core.state import Party

        info = PartyInfo.model_validate(Party(hp=-2, cost=3, max_cost=4, charge=1))

        assert info.hp == -2
        assert info.max_cost == 4
        assert info.ultimate_used is False

    def test_action_response_serializes(self):
        from duelboard.api.schemas import (
            ActionResponse, MatchStateInfo, PartyInfo, NotificationInfo, SideName,
        )

        party = PartyInfo(hp=20, cost=1, max_cost=1, charge=0)
        response = ActionResponse(
            success=True,
            session_id="session-123",
            state=MatchStateInfo(
                player=party,
                opponent=party,
                is_player_turn=True,
                active_side=SideName.PLAYER,
            ),
            log_messages=["Player used their ultimate"],
            notification=NotificationInfo(message="Ultimate activated", duration=3.0),
        )

        data = response.model_dump(mode="json")
        assert data["state"]["active_side"] == "player"
        assert data["notification"] == {"message": "Ultimate activated", "duration": 3.0}
        assert data["declined"] is False
        assert data["confirmation_prompt"] is None

    def test_error_response_schema(self):
        from duelboard.api.schemas import ErrorResponse, ErrorCode

        error = ErrorResponse(
            error="Session abc not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

        data = error.model_dump(mode="json")
        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["details"] is None

    def test_all_error_codes_defined(self):
        from duelboard.api.schemas import ErrorCode

        assert {code.value for code in ErrorCode} == {
            "SESSION_NOT_FOUND",
            "INVALID_ACTION",
            "VALIDATION_ERROR",
            "INTERNAL_ERROR",
        }
