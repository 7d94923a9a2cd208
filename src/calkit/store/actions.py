"""Actions accepted by the event store and the mutations it emits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from ..domain.models import CalendarEvent
from ..domain.temporal import TemporalValue


class EntryPhase(str, Enum):
    DRAFT = "draft"
    CREATING = "creating"
    CONFIRMED = "confirmed"
    UPDATING = "updating"
    DELETING = "deleting"


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Mutation:
    """A local change waiting for the persistence collaborator."""

    kind: MutationKind
    event_id: str
    sequence: int
    event: CalendarEvent


@dataclass(frozen=True, slots=True)
class Hydrate:
    """Load events fetched from a provider. Entries with local changes are kept."""

    events: Tuple[CalendarEvent, ...]


@dataclass(frozen=True, slots=True)
class Select:
    event_id: str


@dataclass(frozen=True, slots=True)
class Unselect:
    """Drop one event from the selection, or all of them without an id."""

    event_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Draft:
    event: CalendarEvent
    select: bool = True


@dataclass(frozen=True, slots=True)
class Save:
    event: CalendarEvent


@dataclass(frozen=True, slots=True)
class Move:
    event_id: str
    start: TemporalValue
    end: TemporalValue


@dataclass(frozen=True, slots=True)
class Delete:
    event_id: str


@dataclass(frozen=True, slots=True)
class SaveConfirmed:
    """The server accepted mutation ``sequence``; ``event`` is its copy, if any."""

    event_id: str
    sequence: int
    event: Optional[CalendarEvent] = None


@dataclass(frozen=True, slots=True)
class Reject:
    event_id: str
    sequence: int
    reason: str = ""


Action = Union[Hydrate, Select, Unselect, Draft, Save, Move, Delete, SaveConfirmed, Reject]


__all__ = [
    "Action",
    "Delete",
    "Draft",
    "EntryPhase",
    "Hydrate",
    "Move",
    "Mutation",
    "MutationKind",
    "Reject",
    "Save",
    "SaveConfirmed",
    "Select",
    "Unselect",
]
