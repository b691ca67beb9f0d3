"""
Event bus between the game service and its listeners.

The service publishes what happened to a character while it holds that
character's lock, then delivers the character's pending events once the
action is done. Listeners such as the LogManager subscribe to one event
type or to everything. Delivery keeps publish order per character.
"""

import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .events import EventType, GameEvent

EventSubscriber = Callable[[GameEvent], None]


@dataclass(frozen=True)
class PendingEvent:
    """A published event waiting for delivery."""
    event: GameEvent
    source: str

    @property
    def character_id(self) -> str:
        return self.event.character_id

    def describe(self) -> str:
        return f"{self.event.event_type.name} for {self.character_id} (from {self.source})"


def _subscriber_name(subscriber: EventSubscriber, given: Optional[str]) -> str:
    return given or getattr(subscriber, "__name__", "anonymous")


class EventManager:
    """Queues game events per character and fans them out to subscribers."""

    def __init__(self, debug_callback: Optional[Callable[[str], None]] = None):
        """
        Args:
            debug_callback: Receives one line per subscription, publish and
                delivery; silent when None
        """
        self.debug_callback = debug_callback

        self._subscribers: dict[EventType, list[EventSubscriber]] = defaultdict(list)
        self._universal_subscribers: list[EventSubscriber] = []
        self._pending: deque[PendingEvent] = deque()

        self._published = 0
        self._delivered = 0
        self._subscriber_errors = 0

        self._lock = threading.RLock()

    def _debug(self, message: str) -> None:
        if self.debug_callback is not None:
            self.debug_callback(f"[EVENT] {message}")

    def subscribe(
        self,
        event_type: EventType,
        subscriber: EventSubscriber,
        subscriber_name: Optional[str] = None
    ) -> None:
        """Call ``subscriber`` for every delivered event of ``event_type``."""
        with self._lock:
            self._subscribers[event_type].append(subscriber)
        self._debug(f"{_subscriber_name(subscriber, subscriber_name)} listens to {event_type.name}")

    def subscribe_all(self, subscriber: EventSubscriber, subscriber_name: Optional[str] = None) -> None:
        """Call ``subscriber`` for every delivered event."""
        with self._lock:
            self._universal_subscribers.append(subscriber)
        self._debug(f"{_subscriber_name(subscriber, subscriber_name)} listens to every event")

    def unsubscribe(self, event_type: EventType, subscriber: EventSubscriber) -> bool:
        """Returns True if the subscriber was registered for ``event_type``."""
        with self._lock:
            try:
                self._subscribers[event_type].remove(subscriber)
            except ValueError:
                return False
        return True

    def publish(self, event: GameEvent, source: str = "unknown") -> None:
        """Queue an event until its character's events are processed."""
        pending = PendingEvent(event, source)
        with self._lock:
            self._pending.append(pending)
            self._published += 1
        self._debug(f"Queued {pending.describe()}")

    def publish_immediate(self, event: GameEvent, source: str = "immediate") -> None:
        """Deliver an event now, ahead of anything queued."""
        with self._lock:
            self._published += 1
        self._deliver(PendingEvent(event, source))

    def process_events(self, character_id: Optional[str] = None, max_events: Optional[int] = None) -> int:
        """Deliver queued events in publish order.

        Args:
            character_id: Only deliver this character's events; events of
                other characters stay queued in order
            max_events: Maximum number of events to deliver (None for all)

        Returns:
            Number of events delivered
        """
        with self._lock:
            selected = []
            kept = deque()
            for pending in self._pending:
                wanted = character_id is None or pending.character_id == character_id
                if wanted and (max_events is None or len(selected) < max_events):
                    selected.append(pending)
                else:
                    kept.append(pending)
            self._pending = kept

        for pending in selected:
            self._deliver(pending)
        return len(selected)

    def pending_count(self, character_id: Optional[str] = None) -> int:
        with self._lock:
            if character_id is None:
                return len(self._pending)
            return sum(1 for pending in self._pending if pending.character_id == character_id)

    def _deliver(self, pending: PendingEvent) -> None:
        with self._lock:
            self._delivered += 1
            subscribers = list(self._subscribers.get(pending.event.event_type, ()))
            subscribers += self._universal_subscribers

        self._debug(f"Delivering {pending.describe()} to {len(subscribers)} subscribers")
        # One broken listener must not hide the event from the rest
        for subscriber in subscribers:
            try:
                subscriber(pending.event)
            except Exception as e:
                with self._lock:
                    self._subscriber_errors += 1
                self._debug(f"{_subscriber_name(subscriber, None)} failed on {pending.describe()}: {e}")

    def get_statistics(self) -> dict[str, Any]:
        """Counters for publishing, delivery and subscriber failures."""
        with self._lock:
            return {
                "events_published": self._published,
                "events_delivered": self._delivered,
                "events_queued": len(self._pending),
                "characters_waiting": len({pending.character_id for pending in self._pending}),
                "subscriber_errors": self._subscriber_errors,
                "subscribers_count": sum(len(subs) for subs in self._subscribers.values()),
                "universal_subscribers_count": len(self._universal_subscribers),
            }
