# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 11:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Session lifecycle and lazy expiry
"""
from unittest.mock import Mock, patch

from triggers.auto_translation import MemorySettingsStore, SessionController

from conftest import T0, FakeClock

TTL = 600_000


def _controller(clock, store=None, hook=None):
    return SessionController(
        store or MemorySettingsStore(), ttl_ms=TTL, clock=clock, on_teardown=hook
    )


class TestSessionController:
    def test_start_persists_session(self):
        clock, store = FakeClock(), MemorySettingsStore()
        session = _controller(clock, store).start("C1")

        prefs = store.load()
        assert prefs.auto_translate_received is True
        assert prefs.auto_translate_channel_id == "C1"
        assert prefs.auto_translate_timestamp == int(T0)
        assert session.started_at == T0

    def test_active_until_exactly_ttl(self):
        clock, store, hook = FakeClock(), MemorySettingsStore(), Mock()
        controller = _controller(clock, store, hook)
        controller.start("C1")
        hook.reset_mock()

        clock.advance(TTL - 1)
        assert controller.is_active() is True
        assert controller.remaining() == 1

        clock.advance(1)
        assert controller.is_active() is False
        assert controller.remaining() is None
        assert controller.session is None
        hook.assert_called_once()

        prefs = store.load()
        assert prefs.auto_translate_received is False
        assert prefs.auto_translate_channel_id is None
        assert prefs.auto_translate_timestamp is None

    def test_stop_clears_state_and_tracker(self):
        clock, store = FakeClock(), MemorySettingsStore()
        controller = _controller(clock, store)
        session = controller.start("C1")
        session.tracker.mark("M1")

        controller.stop()

        assert controller.session is None
        assert len(session.tracker) == 0
        assert store.load().auto_translate_received is False

    def test_stop_can_keep_persisted_session(self):
        clock, store = FakeClock(), MemorySettingsStore()
        controller = _controller(clock, store)
        controller.start("C1")

        controller.stop(keep_persisted=True)

        assert controller.session is None
        assert store.load().auto_translate_channel_id == "C1"

    def test_stop_without_session_is_harmless(self):
        controller = _controller(FakeClock())
        controller.stop()
        assert controller.is_active() is False

    def test_stop_without_session_does_not_touch_the_store(self):
        store = MemorySettingsStore()
        controller = _controller(FakeClock(), store)

        with patch.object(store, "update", wraps=store.update) as update:
            controller.stop()

        update.assert_not_called()

    def test_stop_without_session_clears_stale_persisted_state(self):
        store = MemorySettingsStore()
        store.persist_session("C1", int(T0 - 700_000))
        controller = _controller(FakeClock(), store)

        controller.stop()

        assert store.has_session() is False
        assert store.load().auto_translate_channel_id is None

    def test_restart_discards_previous_session(self):
        clock, hook = FakeClock(), Mock()
        controller = _controller(clock, hook=hook)
        first = controller.start("C1")
        first.tracker.mark("M1")
        hook.reset_mock()

        clock.advance(5_000)
        second = controller.start("C2")

        hook.assert_called_once()
        assert controller.session is second
        assert second.channel_id == "C2"
        assert second.started_at == T0 + 5_000
        assert len(first.tracker) == 0
        assert len(second.tracker) == 0

    def test_resume_keeps_original_start(self):
        clock, store = FakeClock(), MemorySettingsStore()
        store.persist_session("C1", int(T0 - 60_000))
        controller = _controller(clock, store)

        session = controller.start("C1", started_at=T0 - 60_000)

        assert session.started_at == T0 - 60_000
        assert controller.remaining() == TTL - 60_000
        assert store.load().auto_translate_timestamp == int(T0 - 60_000)
