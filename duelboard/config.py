"""
Engine configuration.

All tunables live in one dataclass so a session can be created with
its own rules. Values can also be read from the environment when the
server starts.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import os


class CostPolicy(Enum):
    """How the cost increment control treats the max cost ceiling."""
    CLAMPED = "clamped"  # Increment only while cost < max_cost
    UNCLAMPED = "unclamped"  # Increment always


@dataclass(frozen=True)
class EngineConfig:
    """
    Rules knobs for a match.

    The defaults match the physical game: 20 HP, max cost capped at 10,
    notifications visible for 3 seconds.
    """
    cost_policy: CostPolicy = CostPolicy.CLAMPED
    starting_hp: int = 20
    max_cost_cap: int = 10
    notification_duration: float = 3.0

    def __post_init__(self):
        if self.max_cost_cap < 1:
            raise ValueError(f"max_cost_cap must be at least 1, got {self.max_cost_cap}")
        if self.notification_duration <= 0:
            raise ValueError(
                f"notification_duration must be positive, got {self.notification_duration}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> EngineConfig:
        """
        Build a config from DUELBOARD_* environment variables.

        Raises ValueError on malformed values so the server fails at startup.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        policy_name = env.get("DUELBOARD_COST_POLICY", defaults.cost_policy.value)
        try:
            cost_policy = CostPolicy(policy_name.lower())
        except ValueError:
            valid = ", ".join(p.value for p in CostPolicy)
            raise ValueError(
                f"Invalid DUELBOARD_COST_POLICY {policy_name!r} (expected one of: {valid})"
            )

        return cls(
            cost_policy=cost_policy,
            starting_hp=_int_from_env(env, "DUELBOARD_STARTING_HP", defaults.starting_hp),
            max_cost_cap=_int_from_env(env, "DUELBOARD_MAX_COST_CAP", defaults.max_cost_cap),
            notification_duration=_float_from_env(
                env, "DUELBOARD_NOTIFICATION_SECONDS", defaults.notification_duration
            ),
        )


def _int_from_env(env, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")


def _float_from_env(env, key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")
