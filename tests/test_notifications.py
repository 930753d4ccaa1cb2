"""Tests for NotificationQueue — ids, replacement and TTL timers."""

from crashclient.core.effects import CancelTimer, StartTimer
from crashclient.core.events import NotificationExpired
from crashclient.core.types import NotificationType
from crashclient.session.notifications import NotificationQueue, timer_key
from crashclient.session.reducer import initial_context

from conftest import make_config


def _make_queue(provider):
    ctx = initial_context(make_config(), provider)
    effects: list = []
    return NotificationQueue(ctx, effects), ctx, effects


class TestNotificationQueue:
    def test_generated_ids_are_unique(self, provider):
        queue, ctx, _ = _make_queue(provider)
        a = queue.add(NotificationType.INFO, "one")
        b = queue.add(NotificationType.INFO, "two")
        assert a.id != b.id
        assert [n.message for n in ctx.notifications] == ["one", "two"]

    def test_duration_starts_ttl_timer(self, provider):
        queue, _, effects = _make_queue(provider)
        n = queue.add(NotificationType.ERROR, "boom", duration=2.0)
        assert effects == [StartTimer(timer_key(n.id), 2.0, NotificationExpired(n.id))]

    def test_sticky_has_no_timer(self, provider):
        queue, _, effects = _make_queue(provider)
        queue.add(NotificationType.INFO, "banner", duration=0, id="banner")
        assert effects == []

    def test_same_id_replaces(self, provider):
        queue, ctx, effects = _make_queue(provider)
        queue.add(NotificationType.INFO, "first", duration=2.0, id="x")
        queue.add(NotificationType.INFO, "second", duration=2.0, id="x")
        assert [n.message for n in ctx.notifications] == ["second"]
        assert CancelTimer(timer_key("x")) in effects

    def test_remove_cancels_timer(self, provider):
        queue, ctx, effects = _make_queue(provider)
        n = queue.add(NotificationType.WARNING, "w", duration=1.0)
        assert queue.remove(n.id) is True
        assert ctx.notifications == []
        assert effects[-1] == CancelTimer(timer_key(n.id))

    def test_remove_unknown_returns_false(self, provider):
        queue, _, effects = _make_queue(provider)
        assert queue.remove("nope") is False
        assert effects == []

    def test_expire_drops_without_cancel(self, provider):
        queue, ctx, effects = _make_queue(provider)
        n = queue.add(NotificationType.SUCCESS, "ok", duration=1.0)
        effects.clear()
        queue.expire(n.id)
        assert ctx.notifications == []
        assert effects == []
