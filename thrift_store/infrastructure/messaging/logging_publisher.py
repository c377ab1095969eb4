"""
Event publisher that writes domain events to the structured log.
"""
import dataclasses
from enum import Enum
from typing import Any

import structlog

from thrift_store.application.interfaces.event_publisher import EventPublisher
from thrift_store.domain.events.domain_events import DomainEvent

logger = structlog.get_logger(__name__)


def _loggable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_loggable(item) for item in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


class LoggingEventPublisher(EventPublisher):
    """Emits one log line per event. There is no message bus in this service."""

    async def publish(self, event: DomainEvent) -> None:
        fields = {
            name: _loggable(getattr(event, name))
            for name in (f.name for f in dataclasses.fields(event))
            if name not in ("event_id", "occurred_at")
        }
        logger.info(
            "domain_event",
            event_type=type(event).__name__,
            event_id=str(event.event_id),
            **fields,
        )
