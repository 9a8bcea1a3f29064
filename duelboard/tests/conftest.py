"""
Pytest fixtures for Duelboard tests.
"""

import pytest

from ..config import CostPolicy, EngineConfig
from ..engine_core.state import MatchState, Side
from ..engine_core.reducer import Reducer
from ..engine_core.confirmation import always_confirm, always_decline
from ..session import SessionManager, MatchController


@pytest.fixture
def config() -> EngineConfig:
    """Default rules: clamped cost, 20 HP, cap 10."""
    return EngineConfig()


@pytest.fixture
def unclamped_config() -> EngineConfig:
    return EngineConfig(cost_policy=CostPolicy.UNCLAMPED)


@pytest.fixture
def fresh_state(config: EngineConfig) -> MatchState:
    """State right after game start."""
    return MatchState.initial(config)


@pytest.fixture
def charged_state(fresh_state: MatchState) -> MatchState:
    """Player holds 3 charge."""
    player = fresh_state.player.with_changes(charge=3)
    return fresh_state.with_party(Side.PLAYER, player)


@pytest.fixture
def approving_reducer(config: EngineConfig) -> Reducer:
    return Reducer(config=config, confirm=always_confirm)


@pytest.fixture
def declining_reducer(config: EngineConfig) -> Reducer:
    return Reducer(config=config, confirm=always_decline)


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def session(manager: SessionManager):
    """An initialized session with a 'Game start' entry."""
    return manager.create_session()


@pytest.fixture
def controller(session) -> MatchController:
    """Controller whose confirmations are always approved."""
    return MatchController(session, confirm=always_confirm)
