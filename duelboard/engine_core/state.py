"""
Match State - The authoritative table state for a two-party match.

Design principles:
- Immutable-friendly: all mutations return new state
- Two fixed parties: player and opponent
- No clamping on HP: the game has no terminal state
- Snapshot-able: views read plain data, never the live objects
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import EngineConfig


class Side(Enum):
    """The two parties at the table."""
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class Resource(Enum):
    """Counters that can be stepped up or down by the plus/minus controls."""
    HP = "hp"
    COST = "cost"
    CHARGE = "charge"


class Direction(Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"


@dataclass(frozen=True)
class Party:
    """
    State for one side of the table.

    cost is the spendable resource for the current turn, max_cost the
    ceiling it refills to. charge accumulates independently of cost.
    """
    hp: int
    cost: int = 0
    max_cost: int = 0
    charge: int = 0
    ultimate_used: bool = False
    zero_cost_used: bool = False

    def get(self, resource: Resource) -> int:
        """Read a counter by resource kind."""
        return getattr(self, resource.value)

    def with_changes(self, **kwargs) -> Party:
        """Return a new party with some fields replaced."""
        return Party(
            hp=kwargs.get("hp", self.hp),
            cost=kwargs.get("cost", self.cost),
            max_cost=kwargs.get("max_cost", self.max_cost),
            charge=kwargs.get("charge", self.charge),
            ultimate_used=kwargs.get("ultimate_used", self.ultimate_used),
            zero_cost_used=kwargs.get("zero_cost_used", self.zero_cost_used),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "hp": self.hp,
            "cost": self.cost,
            "max_cost": self.max_cost,
            "charge": self.charge,
            "ultimate_used": self.ultimate_used,
            "zero_cost_used": self.zero_cost_used,
        }


@dataclass(frozen=True)
class MatchState:
    """
    Complete match state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    player: Party
    opponent: Party
    is_player_turn: bool = True
    turn_number: int = 1

    @classmethod
    def initial(cls, config: EngineConfig | None = None) -> MatchState:
        """
        The state at game start.

        The player goes first with one cost; the opponent gets its first
        cost when its first turn begins.
        """
        config = config or EngineConfig()
        return cls(
            player=Party(hp=config.starting_hp, cost=1, max_cost=1),
            opponent=Party(hp=config.starting_hp, cost=0, max_cost=0),
            is_player_turn=True,
        )

    @property
    def active_side(self) -> Side:
        return Side.PLAYER if self.is_player_turn else Side.OPPONENT

    @property
    def active_party(self) -> Party:
        return self.party(self.active_side)

    def party(self, side: Side) -> Party:
        """Get a party by side."""
        return self.player if side is Side.PLAYER else self.opponent

    def with_party(self, side: Side, party: Party) -> MatchState:
        """Return new state with one party replaced."""
        if side is Side.PLAYER:
            return self._copy_with(player=party)
        return self._copy_with(opponent=party)

    def _copy_with(self, **kwargs) -> MatchState:
        """Create a copy with some fields replaced."""
        return MatchState(
            player=kwargs.get("player", self.player),
            opponent=kwargs.get("opponent", self.opponent),
            is_player_turn=kwargs.get("is_player_turn", self.is_player_turn),
            turn_number=kwargs.get("turn_number", self.turn_number),
        )

    def snapshot(self) -> dict[str, Any]:
        """Plain-data view for renderers."""
        return {
            "player": self.player.to_dict(),
            "opponent": self.opponent.to_dict(),
            "is_player_turn": self.is_player_turn,
            "active_side": self.active_side.value,
            "turn_number": self.turn_number,
        }
