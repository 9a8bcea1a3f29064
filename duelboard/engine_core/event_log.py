"""
Event Log and Notifications - What the view shows besides the counters.

The event log is the narration of a match: one timestamped line per
accepted transition, shown most-recent-first inside the log overlay.

Notifications are fire-and-forget banners ("Ultimate activated"). The
engine only requests them with a display duration; removing them after
the duration is up to whichever view receives them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
import logging

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%H:%M:%S"


@dataclass(frozen=True)
class LogEntry:
    """A single narration line."""
    timestamp: datetime
    message: str

    def render(self) -> str:
        return f"[{self.timestamp.strftime(TIMESTAMP_FORMAT)}] {self.message}"


class EventLog:
    """
    Append-only narration of a match.

    Unbounded and in-memory; cleared only when the match is reset.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, message: str) -> LogEntry:
        entry = LogEntry(timestamp=self._clock(), message=message)
        self._entries.append(entry)
        return entry

    def extend(self, messages: list[str]) -> list[LogEntry]:
        """Append several messages in order."""
        return [self.append(m) for m in messages]

    def clear(self):
        self._entries.clear()

    def entries(self) -> list[LogEntry]:
        """Entries ordered most-recent-first, as displayed."""
        return list(reversed(self._entries))

    def render(self) -> list[str]:
        return [entry.render() for entry in self.entries()]


@dataclass(frozen=True)
class Notification:
    """A transient banner request."""
    message: str
    duration: float
    created_at: datetime = field(default_factory=datetime.now)


NotificationCallback = Callable[[Notification], None]


class NotificationChannel:
    """
    Fans notifications out to subscribed views.

    Each notification is independent: no queueing and no dismissal.
    Recent notifications are also kept so polling clients can read them.
    """

    def __init__(self, duration: float = 3.0, history_size: int = 20):
        self.duration = duration
        self.history_size = history_size
        self._subscribers: list[NotificationCallback] = []
        self._recent: list[Notification] = []

    def subscribe(self, callback: NotificationCallback) -> Callable[[], None]:
        """Register a callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def notify(self, message: str) -> Notification:
        notification = Notification(message=message, duration=self.duration)
        self._recent.append(notification)
        del self._recent[:-self.history_size]

        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                # Subscribers are isolated from each other
                logger.warning("Notification subscriber %r failed", callback, exc_info=True)
        return notification

    def recent(self) -> list[Notification]:
        """Recently requested notifications, oldest first."""
        return list(self._recent)
