"""
Match Controller - One method per user intent.

A view wires its buttons to these methods:

    controller = MatchController(session, confirm=ask_user)

    controller.advance_turn()
    controller.adjust_resource(Side.PLAYER, Resource.HP, Direction.DECREMENT)
    controller.toggle_ultimate(Side.OPPONENT)

    redraw(controller.snapshot())
"""

from __future__ import annotations
from typing import Any

from ..engine_core.state import Side, Resource, Direction
from ..engine_core.action import Action, ActionResult
from ..engine_core.confirmation import ConfirmFn, always_decline
from .manager import Session


class MatchController:
    """Input-side facade over a Session."""

    def __init__(self, session: Session, confirm: ConfirmFn = always_decline):
        self.session = session
        self.confirm = confirm

    def dispatch(self, action: Action) -> ActionResult:
        """Apply any intent, answering gates with this controller's confirm."""
        return self.session.dispatch(action, confirm=self.confirm)

    def initialize(self) -> ActionResult:
        return self.dispatch(Action.initialize())

    def reset_with_confirmation(self) -> ActionResult:
        return self.dispatch(Action.reset())

    def advance_turn(self) -> ActionResult:
        return self.dispatch(Action.advance_turn())

    def adjust_resource(
        self, side: Side, resource: Resource, direction: Direction
    ) -> ActionResult:
        return self.dispatch(Action.adjust_resource(side, resource, direction))

    def toggle_ultimate(self, side: Side) -> ActionResult:
        return self.dispatch(Action.toggle_ultimate(side))

    def use_skill(self, side: Side) -> ActionResult:
        return self.dispatch(Action.use_skill(side))

    def toggle_zero_cost(self, side: Side) -> ActionResult:
        return self.dispatch(Action.toggle_zero_cost(side))

    def snapshot(self) -> dict[str, Any]:
        """Read-only view of the match for redrawing."""
        return self.session.match.snapshot()

    def log_lines(self) -> list[str]:
        """Rendered event log, most recent first."""
        return self.session.event_log.render()
