"""
Duelboard CLI - Command-line interface for the engine.

Usage:
    duelboard play                 Track a match in the terminal
    duelboard serve                Run the HTTP API for the browser UI

Commands inside `play`:
    n                 next turn
    hp+ p / hp- o     step hp for player (p) or opponent (o)
    cost+ p           step cost (also cost-)
    charge+ o         step charge (also charge-)
    ult p             use ultimate (again to cancel, asks first)
    skill o           use leader skill
    zero p            toggle zero-cost flag
    log               show the event log
    reset             reset the match (asks first)
    help              show this list
    q                 quit
"""

import argparse
import logging
import sys
from dataclasses import replace

from .config import CostPolicy, EngineConfig
from .engine_core.action import Action
from .engine_core.state import Side, Resource, Direction

SIDE_ALIASES = {
    "p": Side.PLAYER,
    "player": Side.PLAYER,
    "o": Side.OPPONENT,
    "opponent": Side.OPPONENT,
}

RESOURCE_ALIASES = {
    "hp": Resource.HP,
    "cost": Resource.COST,
    "charge": Resource.CHARGE,
}

# Star tiers: stars from index 4 and from index 8 get their own color
TIER_COLORS = ("\033[37m", "\033[33m", "\033[31m")
RESET_COLOR = "\033[0m"


def star_tier(index: int) -> int:
    if index >= 8:
        return 2
    if index >= 4:
        return 1
    return 0


def render_cost_stars(cost: int, max_cost: int, cap: int = 10, color: bool = False) -> str:
    """
    Render cost as a star bar: filled for spendable cost, hollow up to max cost.

    Never draws more than `cap` stars.
    """
    glyphs = []
    for index in range(min(max(cost, max_cost), cap)):
        glyph = "★" if index < cost else "☆"
        if color:
            glyph = f"{TIER_COLORS[star_tier(index)]}{glyph}{RESET_COLOR}"
        glyphs.append(glyph)
    return "".join(glyphs)


def render_board(snapshot: dict, cap: int = 10, color: bool = False) -> str:
    """Render both parties, marking the active one."""
    lines = []
    for side in (Side.OPPONENT, Side.PLAYER):
        party = snapshot[side.value]
        marker = ">" if snapshot["active_side"] == side.value else " "
        flags = []
        if party["ultimate_used"]:
            flags.append("ULT used")
        if party["zero_cost_used"]:
            flags.append("0-cost used")
        lines.append(
            f"{marker} {side.display_name:<8} HP {party['hp']:>3}  "
            f"Cost {party['cost']}/{party['max_cost']} "
            f"{render_cost_stars(party['cost'], party['max_cost'], cap, color)}  "
            f"Charge {party['charge']}"
            + (f"  [{', '.join(flags)}]" if flags else "")
        )
    return "\n".join(lines)


def parse_command(line: str):
    """
    Parse one line of `play` input.

    Returns an Action, one of "log"/"help"/"quit", or None for a blank line.
    Raises ValueError for anything else.
    """
    tokens = line.strip().lower().split()
    if not tokens:
        return None

    verb, args = tokens[0], tokens[1:]

    if verb in ("q", "quit", "exit"):
        return "quit"
    if verb in ("log", "help"):
        return verb
    if verb in ("n", "next"):
        return Action.advance_turn()
    if verb == "reset":
        return Action.reset()

    if len(args) != 1 or args[0] not in SIDE_ALIASES:
        raise ValueError(f"Expected a side (p or o) after {verb!r}")
    side = SIDE_ALIASES[args[0]]

    if verb in ("ult", "ultimate"):
        return Action.toggle_ultimate(side)
    if verb == "skill":
        return Action.use_skill(side)
    if verb == "zero":
        return Action.toggle_zero_cost(side)

    if verb[-1] in "+-" and verb[:-1] in RESOURCE_ALIASES:
        direction = Direction.INCREMENT if verb[-1] == "+" else Direction.DECREMENT
        return Action.adjust_resource(side, RESOURCE_ALIASES[verb[:-1]], direction)

    raise ValueError(f"Unknown command: {verb!r}")


def make_confirm(input_fn=input):
    """Confirmation gate that asks on the terminal."""
    def confirm(prompt: str) -> bool:
        return input_fn(f"{prompt} [y/N] ").strip().lower() in ("y", "yes")
    return confirm


def run_play(controller, input_fn=input, output=print, color: bool = False):
    """
    The terminal view/input loop.

    Redraws the board after every accepted intent and prints
    notifications as they arrive.
    """
    session = controller.session
    cap = session.config.max_cost_cap
    unsubscribe = session.notifications.subscribe(
        lambda n: output(f"*** {n.message} ***")
    )

    try:
        output(render_board(controller.snapshot(), cap, color))
        while True:
            try:
                line = input_fn("> ")
            except EOFError:
                break

            try:
                command = parse_command(line)
            except ValueError as e:
                output(str(e))
                continue

            if command is None:
                continue
            if command == "quit":
                break
            if command == "help":
                output(__doc__.split("Commands inside `play`:")[1].rstrip())
                continue
            if command == "log":
                for entry in controller.log_lines():
                    output(entry)
                continue

            result = controller.dispatch(command)
            if not result.success:
                output(f"Error: {result.error}")
                continue
            for message in result.log_messages:
                output(message)
            output(render_board(controller.snapshot(), cap, color))
    finally:
        unsubscribe()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Duelboard - Card game resource tracker",
        prog="duelboard",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Track a match in the terminal")
    play_parser.add_argument(
        "--cost-policy",
        choices=[p.value for p in CostPolicy],
        help="Whether cost+ stops at max cost (default from environment)",
    )
    play_parser.add_argument("--no-color", action="store_true", help="Plain star bar")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def load_config(cost_policy: str | None = None) -> EngineConfig:
    """Environment config, with the command-line policy taking precedence."""
    try:
        config = EngineConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if cost_policy:
        config = replace(config, cost_policy=CostPolicy(cost_policy))
    return config


def cmd_play(args):
    """Track a match in the terminal."""
    from .session import SessionManager, MatchController

    config = load_config(args.cost_policy)
    manager = SessionManager(default_config=config)
    session = manager.create_session()
    controller = MatchController(session, confirm=make_confirm())

    print(f"Cost policy: {config.cost_policy.value}. Type 'help' for commands.")
    try:
        run_play(controller, color=not args.no_color)
    except KeyboardInterrupt:
        print()
    finally:
        manager.end_session(session.session_id, reason="user_quit")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api import create_app

    load_config()  # Fail fast on a bad environment
    uvicorn.run(create_app(), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
