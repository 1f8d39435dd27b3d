# -*- coding: utf-8 -*-
"""
@Time    : 2025/8/21 10:20
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Dedupe tracker and visibility scanner
"""
from models import ChatMessage, Embed, MessageSnapshot, SnapshotMessage
from triggers.auto_translation import DedupeTracker, VisibilityScanner, get_message_content

from conftest import FakeChatView, FakeMessageStore, add_visible


class TestDedupeTracker:
    def test_claim_skips_translated_and_pending(self):
        tracker = DedupeTracker()
        assert tracker.claim(["M1", "M2"]) == ["M1", "M2"]
        assert tracker.claim(["M2", "M3"]) == ["M3"]

        tracker.mark("M1")
        assert "M1" in tracker
        assert "M2" not in tracker
        assert tracker.is_claimed("M2")

    def test_release_makes_ids_eligible_again(self):
        tracker = DedupeTracker()
        tracker.claim(["M1"])
        tracker.release(["M1"])
        assert not tracker.is_claimed("M1")
        assert len(tracker) == 0

    def test_mark_twice_reports_duplicate(self):
        tracker = DedupeTracker()
        assert tracker.mark("M1") is True
        assert tracker.mark("M1") is False
        assert len(tracker) == 1

    def test_clear(self):
        tracker = DedupeTracker()
        tracker.mark("M1")
        tracker.claim(["M2"])
        tracker.clear()
        assert len(tracker) == 0
        assert not tracker.is_claimed("M2")


class TestGetMessageContent:
    def test_plain_content_wins(self):
        message = ChatMessage(id="1", channel_id="C1", content="hallo")
        assert get_message_content(message) == "hallo"

    def test_forwarded_snapshot(self):
        message = ChatMessage(
            id="1",
            channel_id="C1",
            message_snapshots=[MessageSnapshot(message=SnapshotMessage(content="weitergeleitet"))],
        )
        assert get_message_content(message) == "weitergeleitet"

    def test_auto_moderation_embed(self):
        message = ChatMessage(
            id="1",
            channel_id="C1",
            embeds=[
                Embed(type="rich", raw_description="ignored"),
                Embed(type="auto_moderation_message", raw_description="blocked text"),
            ],
        )
        assert get_message_content(message) == "blocked text"

    def test_embed_without_description_is_empty(self):
        message = ChatMessage(id="1", channel_id="C1", embeds=[Embed(type="rich")])
        assert get_message_content(message) == ""


class TestVisibilityScanner:
    def test_returns_only_fully_visible_messages_in_order(self):
        view, store = FakeChatView(height=500), FakeMessageStore()
        add_visible(view, store, "C1", "M1")
        add_visible(view, store, "C1", "M2")
        store.add("C1", "M3", content="above")
        view.place("C1", "M3", top=-20, bottom=30)
        store.add("C1", "M4", content="below")
        view.place("C1", "M4", top=480, bottom=520)

        items = VisibilityScanner(view, store).scan("C1", DedupeTracker())

        assert [(i.channel_id, i.message_id, i.source_text) for i in items] == [
            ("C1", "M1", "textM1"),
            ("C1", "M2", "textM2"),
        ]

    def test_ignores_other_channels_sharing_a_prefix(self):
        view, store = FakeChatView(), FakeMessageStore()
        add_visible(view, store, "C1", "M1")
        add_visible(view, store, "C10", "M2")

        items = VisibilityScanner(view, store).scan("C1", DedupeTracker())

        assert [i.message_id for i in items] == ["M1"]

    def test_excludes_translated_and_in_flight_ids(self):
        view, store = FakeChatView(), FakeMessageStore()
        for message_id in ("M1", "M2", "M3"):
            add_visible(view, store, "C1", message_id)
        tracker = DedupeTracker()
        tracker.mark("M1")
        tracker.claim(["M2"])

        items = VisibilityScanner(view, store).scan("C1", tracker)

        assert [i.message_id for i in items] == ["M3"]

    def test_drops_evicted_and_empty_messages_silently(self):
        view, store = FakeChatView(), FakeMessageStore()
        add_visible(view, store, "C1", "M1")
        view.place("C1", "EVICTED")
        store.add("C1", "MEDIA", content="")
        view.place("C1", "MEDIA")

        items = VisibilityScanner(view, store).scan("C1", DedupeTracker())

        assert [i.message_id for i in items] == ["M1"]

    def test_unknown_channel_yields_empty_snapshot(self):
        view, store = FakeChatView(), FakeMessageStore()
        view.place("C9", "M1")

        assert VisibilityScanner(view, store).scan("C9", DedupeTracker()) == []
