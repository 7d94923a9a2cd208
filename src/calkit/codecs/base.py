from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from ..domain.enums import ProviderId
from ..domain.errors import DecodeError
from ..domain.models import CalendarEvent
from ..domain.validation import validate

logger = logging.getLogger(__name__)

P = TypeVar("P")


@dataclass(frozen=True)
class EventCodec:
    provider_id: ProviderId
    decode: Callable[..., CalendarEvent]
    encode: Callable[[CalendarEvent], Any]


@dataclass(frozen=True, slots=True)
class ImportFailure:
    index: int
    reason: str
    item_id: Optional[str] = None


@dataclass(slots=True)
class ImportResult:
    events: List[CalendarEvent] = field(default_factory=list)
    failures: List[ImportFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def add_failure(self, index: int, error: DecodeError) -> None:
        self.failures.append(ImportFailure(index=index, reason=error.reason, item_id=error.item_id))


def checked(event: CalendarEvent) -> CalendarEvent:
    """Run the model invariants on a freshly decoded event."""

    errors = validate(event)
    if errors:
        raise DecodeError("; ".join(str(error) for error in errors), item_id=event.id or None)
    return event


def decode_batch(decode: Callable[[P], CalendarEvent], payloads: Iterable[P], *, source: str) -> ImportResult:
    """Decode every payload, collecting failures instead of aborting."""

    result = ImportResult()
    for index, payload in enumerate(payloads):
        try:
            result.events.append(decode(payload))
        except DecodeError as exc:
            logger.warning("Skipping %s item #%d: %s", source, index, exc)
            result.add_failure(index, exc)
    if result.failures:
        logger.info(
            "Decoded %d %s events, %d failed", len(result.events), source, result.failure_count
        )
    return result
