from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from ..domain.errors import PersistenceError
from ..domain.models import CalendarEvent, create_event_id

logger = logging.getLogger(__name__)


class EventPersistence(Protocol):
    """Contract for the component that stores events on a provider.

    Implementations raise :class:`PersistenceError` for any structured failure.
    """

    async def create(self, event: CalendarEvent, payload: Any) -> CalendarEvent:
        """Store a new event and return the server copy, usually with a new id."""
        ...

    async def update(self, event: CalendarEvent, payload: Any) -> CalendarEvent:
        """Replace an existing event and return the server copy."""
        ...

    async def delete(self, event: CalendarEvent) -> None:
        """Remove an event."""
        ...


@dataclass(slots=True)
class InMemoryPersistence:
    """Process-local :class:`EventPersistence` keeping events in a dict.

    ``failures`` maps event ids to the error the next call for that id raises.
    """

    events: Dict[str, CalendarEvent] = field(default_factory=dict)
    payloads: List[Tuple[str, str, Any]] = field(default_factory=list)
    failures: Dict[str, PersistenceError] = field(default_factory=dict)

    def _check(self, event_id: str) -> None:
        error = self.failures.pop(event_id, None)
        if error is not None:
            raise error

    async def create(self, event: CalendarEvent, payload: Any) -> CalendarEvent:
        self._check(event.id)
        stored = event.with_id(create_event_id()) if event.is_draft else event
        self.events[stored.id] = stored
        self.payloads.append(("create", stored.id, payload))
        logger.debug("Created event %s from %s", stored.id, event.id)
        return stored

    async def update(self, event: CalendarEvent, payload: Any) -> CalendarEvent:
        self._check(event.id)
        if event.id not in self.events:
            raise PersistenceError(f"Event '{event.id}' does not exist", status=404)
        self.events[event.id] = event
        self.payloads.append(("update", event.id, payload))
        return event

    async def delete(self, event: CalendarEvent) -> None:
        self._check(event.id)
        if self.events.pop(event.id, None) is None:
            raise PersistenceError(f"Event '{event.id}' does not exist", status=404)
        self.payloads.append(("delete", event.id, None))
