import asyncio
import logging

from intake.config import EVENT_QUEUE_MAX_SIZE

logger = logging.getLogger(__name__)


class EncounterEventBus:
    """Simple in-memory pub/sub for broadcasting encounter updates."""

    def __init__(self, max_queue_size: int = EVENT_QUEUE_MAX_SIZE) -> None:
        self._subscribers: dict[str, set[asyncio.Queue]] = {}
        self.max_queue_size = max_queue_size

    def subscribe(self, encounter_id: str) -> asyncio.Queue:
        """Subscribe to events for a specific encounter."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.setdefault(encounter_id, set()).add(queue)
        return queue

    def unsubscribe(self, encounter_id: str, queue: asyncio.Queue) -> None:
        if encounter_id in self._subscribers:
            self._subscribers[encounter_id].discard(queue)
            if not self._subscribers[encounter_id]:
                del self._subscribers[encounter_id]

    def publish(self, encounter_id: str, event: dict) -> None:
        """Publish an event for an encounter to all subscribers.

        A subscriber that stops draining its queue loses events once the
        queue is full; other subscribers are unaffected.
        """
        event["encounter_id"] = encounter_id

        for queue in self._subscribers.get(encounter_id, set()):
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(
                    "Event queue full for encounter %s subscriber, dropping %s event",
                    encounter_id, event.get("type"),
                )


event_bus = EncounterEventBus()
