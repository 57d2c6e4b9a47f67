"""Event bus system for real-time SSE event streaming."""

import asyncio
import logging
from typing import Dict, Any, AsyncGenerator, Optional
from datetime import datetime

logger = logging.getLogger(__name__)


class EventBus:
    """
    In-memory event bus using asyncio.Queue for pub/sub pattern.

    Supports Server-Sent Events (SSE) streaming to multiple clients.
    Publishing never blocks: a subscriber whose queue is full is dropped.
    """

    def __init__(self, max_queue_size: int = 100):
        """Initialize the event bus with an empty subscriber list."""
        self._subscribers: list[asyncio.Queue] = []
        self._max_queue_size = max_queue_size

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event_type: Type of event (e.g., "COMPROMISE_GENERATED")
            data: Event payload data
        """
        event = {
            "type": event_type,
            "data": data,
            "timestamp": datetime.utcnow().isoformat()
        }

        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for queue in dead_queues:
            logger.warning("Dropping slow event subscriber")
            self._subscribers.remove(queue)

    async def subscribe(self, deal_id: Optional[str] = None) -> AsyncGenerator[Dict[str, Any], None]:
        """
        Subscribe to events and receive them as an async generator.

        Args:
            deal_id: Only yield events published for this deal

        Yields:
            Event dictionaries containing type, data, and timestamp

        Usage:
            async for event in event_bus.subscribe(deal_id):
                print(event)
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.append(queue)

        try:
            while True:
                event = await queue.get()
                if deal_id is not None and event["data"].get("deal_id") != deal_id:
                    continue
                yield event
        finally:
            # Clean up subscription
            if queue in self._subscribers:
                self._subscribers.remove(queue)


# Global event bus instance
event_bus = EventBus()
