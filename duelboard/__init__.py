"""
Duelboard - Resource tracker for a two-party card game.

A small, deterministic engine that keeps the table state of a physical
card game while players play it out:
- Hit points, cost, max cost and charge per party
- Ultimate and zero-cost toggles
- Turn advancement with max cost growth
- A narration log and transient notifications for the UI
"""

__version__ = "0.1.0"
