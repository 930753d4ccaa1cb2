"""NotificationQueue — transient, timed user-facing messages.

Ids double as de-duplication keys: adding a notification whose id is
already present replaces it, so singleton banners are never stacked.
Each notification with a positive duration owns a TTL timer keyed by its
id, cancelled whenever the notification goes away early.
"""

from __future__ import annotations

from crashclient.core.effects import CancelTimer, Effect, StartTimer
from crashclient.core.events import NotificationExpired
from crashclient.core.types import NotificationType
from crashclient.session.models import Notification, SessionContext


def timer_key(notification_id: str) -> str:
    return f"notification:{notification_id}"


class NotificationQueue:
    """View over the context's notification list that records timer effects."""

    def __init__(self, ctx: SessionContext, effects: list[Effect]):
        self._ctx = ctx
        self._effects = effects

    def add(
        self,
        type: NotificationType,
        message: str,
        duration: float = 0.0,
        id: str | None = None,
    ) -> Notification:
        if id is None:
            self._ctx.notification_seq += 1
            id = f"n{self._ctx.notification_seq}"
        else:
            self.remove(id)

        notification = Notification(
            id=id, type=NotificationType(type), message=message, duration=duration
        )
        self._ctx.notifications.append(notification)
        if duration > 0:
            self._effects.append(
                StartTimer(timer_key(id), duration, NotificationExpired(id))
            )
        return notification

    def remove(self, id: str) -> bool:
        """Drop a notification and cancel its TTL timer. Returns whether it existed."""
        existing = self._find(id)
        if existing is None:
            return False
        self._ctx.notifications.remove(existing)
        if existing.duration > 0:
            self._effects.append(CancelTimer(timer_key(id)))
        return True

    def expire(self, id: str) -> None:
        """TTL fired; the timer is already gone."""
        existing = self._find(id)
        if existing is not None:
            self._ctx.notifications.remove(existing)

    def _find(self, id: str) -> Notification | None:
        for n in self._ctx.notifications:
            if n.id == id:
                return n
        return None
