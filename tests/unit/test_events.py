"""
Unit tests for the event system.

Tests event construction, subscription, per-character delivery and
subscriber error isolation.
"""
import pytest

from darkrealm.core.events import (
    CharacterLeveledUp,
    EventManager,
    EventType,
    LootDropped,
    QuestAccepted,
)


class TestEvents:
    """Test event dataclasses."""

    def test_event_type_set_automatically(self):
        event = CharacterLeveledUp(character_id="char-1", new_level=2)

        assert event.event_type == EventType.CHARACTER_LEVELED_UP
        assert event.new_level == 2

    def test_events_are_immutable(self):
        event = QuestAccepted(character_id="char-1", quest_id="quest-awakening")

        with pytest.raises(AttributeError):
            event.quest_id = "other"


class TestEventManager:
    """Test publish/subscribe behaviour."""

    def test_publish_and_process(self, event_manager):
        received = []
        event_manager.subscribe(EventType.QUEST_ACCEPTED, received.append)

        event_manager.publish(QuestAccepted(character_id="char-1", quest_id="q"))
        assert received == []
        assert event_manager.pending_count() == 1

        delivered = event_manager.process_events()

        assert delivered == 1
        assert [event.quest_id for event in received] == ["q"]
        assert event_manager.pending_count() == 0

    def test_only_matching_subscribers(self, event_manager):
        received = []
        event_manager.subscribe(EventType.LOOT_DROPPED, received.append)

        event_manager.publish_immediate(QuestAccepted(character_id="char-1", quest_id="q"))

        assert received == []

    def test_universal_subscriber(self, event_manager):
        received = []
        event_manager.subscribe_all(received.append)

        event_manager.publish_immediate(LootDropped(character_id="char-1", items=()))
        event_manager.publish_immediate(CharacterLeveledUp(character_id="char-1", new_level=3))

        assert len(received) == 2

    def test_publish_order_kept(self, event_manager):
        received = []
        event_manager.subscribe_all(received.append)

        for level in (2, 3, 4):
            event_manager.publish(CharacterLeveledUp(character_id="c", new_level=level))
        event_manager.process_events()

        assert [event.new_level for event in received] == [2, 3, 4]

    def test_process_one_character(self, event_manager):
        received = []
        event_manager.subscribe_all(received.append)
        event_manager.publish(CharacterLeveledUp(character_id="a", new_level=2))
        event_manager.publish(CharacterLeveledUp(character_id="b", new_level=5))
        event_manager.publish(CharacterLeveledUp(character_id="a", new_level=3))

        assert event_manager.process_events("a") == 2

        assert [(event.character_id, event.new_level) for event in received] == [("a", 2), ("a", 3)]
        assert event_manager.pending_count("b") == 1
        assert event_manager.get_statistics()["characters_waiting"] == 1

    def test_max_events(self, event_manager):
        for level in range(2, 5):
            event_manager.publish(CharacterLeveledUp(character_id="c", new_level=level))

        assert event_manager.process_events(max_events=2) == 2
        assert event_manager.get_statistics()["events_queued"] == 1

    def test_failing_subscriber_isolated(self, event_manager):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        event_manager.subscribe(EventType.QUEST_ACCEPTED, broken)
        event_manager.subscribe(EventType.QUEST_ACCEPTED, received.append)

        event_manager.publish_immediate(QuestAccepted(character_id="c", quest_id="q"))

        assert len(received) == 1
        assert event_manager.get_statistics()["subscriber_errors"] == 1

    def test_unsubscribe(self, event_manager):
        received = []
        event_manager.subscribe(EventType.QUEST_ACCEPTED, received.append)

        assert event_manager.unsubscribe(EventType.QUEST_ACCEPTED, received.append)
        assert not event_manager.unsubscribe(EventType.QUEST_ACCEPTED, received.append)

    def test_statistics(self, event_manager):
        event_manager.subscribe(EventType.QUEST_ACCEPTED, lambda event: None)
        event_manager.publish(QuestAccepted(character_id="c", quest_id="q"))
        event_manager.publish_immediate(QuestAccepted(character_id="c", quest_id="r"))

        stats = event_manager.get_statistics()

        assert stats["events_published"] == 2
        assert stats["events_delivered"] == 1
        assert stats["subscribers_count"] == 1

    def test_debug_lines_name_the_character(self):
        lines = []
        manager = EventManager(debug_callback=lines.append)

        manager.subscribe(EventType.QUEST_ACCEPTED, lambda event: None, subscriber_name="quest-listener")
        manager.publish(QuestAccepted(character_id="char-9", quest_id="q"), source="test")
        manager.process_events()

        assert any("quest-listener" in line for line in lines)
        assert any("QUEST_ACCEPTED for char-9 (from test)" in line for line in lines)
