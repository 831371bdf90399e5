import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(Enum):
    STARTED = "started"
    PROGRESS = "progress"
    OUTPUT = "output"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ExecutionEvent:
    """A lifecycle notification for one execution"""
    type: EventType
    execution_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


Subscriber = Callable[[ExecutionEvent], None]


class EventBus:
    """
    Synchronous fan-out of execution events.

    Subscribers run on the thread that emits, which for output and progress
    events is a stream reader thread. A subscriber that raises is logged and
    skipped so it cannot stall an execution.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[Optional[EventType], List[Subscriber]] = {}

    def subscribe(self, callback: Subscriber, event_type: Optional[EventType] = None) -> None:
        """Register a callback for one event type, or for all when event_type is None"""
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, callback: Subscriber, event_type: Optional[EventType] = None) -> None:
        with self._lock:
            callbacks = self._subscribers.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)

    def emit(self, event: ExecutionEvent) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(event.type, []))
            callbacks += self._subscribers.get(None, [])

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Subscriber failed handling {event.type.value} for {event.execution_id}")
