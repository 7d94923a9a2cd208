"""Pure reducer behind :class:`~calkit.store.event_store.EventStore`.

Every local change that needs the server is tagged with a sequence number and
placed in ``StoreState.outbox``. Responses carry that number back; a response
that does not match the entry's latest sequence belongs to a superseded change
and is ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Tuple

from ..domain.errors import InvalidArgument, ReadOnlyEvent, StaleMutation, UnknownEvent
from ..domain.models import CalendarEvent, is_draft_id
from ..domain.temporal import UTC_ZONE, resolve_to_instant
from ..domain.validation import ensure_valid, validate
from .actions import (
    Action,
    Delete,
    Draft,
    EntryPhase,
    Hydrate,
    Move,
    Mutation,
    MutationKind,
    Reject,
    Save,
    SaveConfirmed,
    Select,
    Unselect,
)

logger = logging.getLogger(__name__)

_IN_FLIGHT = frozenset({EntryPhase.CREATING, EntryPhase.UPDATING, EntryPhase.DELETING})


@dataclass(frozen=True, slots=True)
class StoreEntry:
    """State kept for one event id.

    ``event`` is the locally visible version. ``snapshot`` is the last version
    the server confirmed and is what a rejected update or delete restores.
    ``submitted`` is the version carried by the in-flight mutation.
    """

    event: CalendarEvent
    phase: EntryPhase
    sequence: int = 0
    snapshot: Optional[CalendarEvent] = None
    submitted: Optional[CalendarEvent] = None
    queued_update: bool = False
    queued_delete: bool = False

    @property
    def visible(self) -> bool:
        return self.phase is not EntryPhase.DELETING and not self.queued_delete

    @property
    def in_flight(self) -> bool:
        return self.phase in _IN_FLIGHT


@dataclass(frozen=True, slots=True)
class StoreState:
    entries: Mapping[str, StoreEntry] = field(default_factory=dict)
    selection: Tuple[str, ...] = ()
    next_sequence: int = 1
    outbox: Tuple[Mutation, ...] = ()

    def entry(self, event_id: str) -> StoreEntry:
        try:
            return self.entries[event_id]
        except KeyError:
            raise UnknownEvent(event_id) from None

    def visible_entry(self, event_id: str) -> StoreEntry:
        entry = self.entry(event_id)
        if not entry.visible:
            raise UnknownEvent(event_id)
        return entry


def reduce(state: StoreState, action: Action) -> StoreState:
    """Return the state that follows ``action``.

    Invalid actions raise (``UnknownEvent``, ``ReadOnlyEvent``,
    ``InvalidEvent``, ``InvalidArgument``) and leave ``state`` untouched.
    """

    state = replace(state, outbox=())
    if isinstance(action, Hydrate):
        return _hydrate(state, action)
    if isinstance(action, Select):
        state.visible_entry(action.event_id)
        return replace(state, selection=_promote(state.selection, action.event_id))
    if isinstance(action, Unselect):
        if action.event_id is None:
            return replace(state, selection=())
        return replace(state, selection=_without(state.selection, action.event_id))
    if isinstance(action, Draft):
        return _draft(state, action)
    if isinstance(action, Save):
        return _edit(state, action.event.id, action.event, commit=True)
    if isinstance(action, Move):
        entry = state.visible_entry(action.event_id)
        return _edit(state, action.event_id, entry.event.with_times(action.start, action.end), commit=False)
    if isinstance(action, Delete):
        return _delete(state, action.event_id)
    if isinstance(action, SaveConfirmed):
        return _confirm(state, action)
    if isinstance(action, Reject):
        return _reject(state, action)
    raise TypeError(f"Unsupported store action: {action!r}")


def visible_events(state: StoreState, reference_zone: str = UTC_ZONE) -> List[CalendarEvent]:
    events = [entry.event for entry in state.entries.values() if entry.visible]
    return sorted(events, key=lambda event: resolve_to_instant(event.start, reference_zone).value)


def selected_events(state: StoreState) -> List[CalendarEvent]:
    selected = []
    for event_id in state.selection:
        entry = state.entries.get(event_id)
        if entry is not None and entry.visible:
            selected.append(entry.event)
    return selected


def _promote(selection: Tuple[str, ...], event_id: str) -> Tuple[str, ...]:
    return (event_id,) + _without(selection, event_id)


def _without(selection: Tuple[str, ...], event_id: str) -> Tuple[str, ...]:
    return tuple(item for item in selection if item != event_id)


def _put(state: StoreState, event_id: str, entry: StoreEntry) -> StoreState:
    entries = dict(state.entries)
    entries[event_id] = entry
    selection = state.selection if entry.visible else _without(state.selection, event_id)
    return replace(state, entries=entries, selection=selection)


def _remove(state: StoreState, event_id: str) -> StoreState:
    entries = {key: value for key, value in state.entries.items() if key != event_id}
    return replace(state, entries=entries, selection=_without(state.selection, event_id))


def _rebind(state: StoreState, old_id: str, new_id: str, entry: StoreEntry) -> StoreState:
    """Store ``entry`` under ``new_id`` in the position ``old_id`` held."""

    if old_id == new_id:
        return _put(state, new_id, entry)
    entries: Dict[str, StoreEntry] = {}
    for key, value in state.entries.items():
        if key == old_id:
            entries[new_id] = entry
        elif key != new_id:
            entries[key] = value
    selection = tuple(new_id if item == old_id else item for item in state.selection)
    if not entry.visible:
        selection = _without(selection, new_id)
    return replace(state, entries=entries, selection=selection)


def _emit(state: StoreState, event_id: str, entry: StoreEntry, kind: MutationKind) -> StoreState:
    sequence = state.next_sequence
    entry = replace(entry, sequence=sequence, submitted=entry.event)
    state = _put(state, event_id, entry)
    mutation = Mutation(kind=kind, event_id=event_id, sequence=sequence, event=entry.event)
    logger.debug("Queued %s #%d for '%s'", kind.value, sequence, event_id)
    return replace(state, next_sequence=sequence + 1, outbox=state.outbox + (mutation,))


def _hydrate(state: StoreState, action: Hydrate) -> StoreState:
    incoming: Dict[str, CalendarEvent] = {}
    for event in action.events:
        incoming[event.id] = ensure_valid(event)

    entries: Dict[str, StoreEntry] = {}
    for event_id, entry in state.entries.items():
        if entry.phase in (EntryPhase.DRAFT, EntryPhase.CREATING):
            entries[event_id] = entry
        elif entry.in_flight:
            fresh = incoming.pop(event_id, None)
            entries[event_id] = replace(entry, snapshot=fresh) if fresh is not None else entry
    for event_id, event in incoming.items():
        entries[event_id] = StoreEntry(event=event, phase=EntryPhase.CONFIRMED)

    selection = tuple(item for item in state.selection if item in entries and entries[item].visible)
    logger.debug("Hydrated %d events, kept %d local entries", len(incoming), len(entries) - len(incoming))
    return replace(state, entries=entries, selection=selection)


def _draft(state: StoreState, action: Draft) -> StoreState:
    event = ensure_valid(action.event)
    if not is_draft_id(event.id):
        raise InvalidArgument(f"Draft events need a draft id, got {event.id!r}")
    existing = state.entries.get(event.id)
    if existing is not None and existing.phase is not EntryPhase.DRAFT:
        raise InvalidArgument(f"Draft {event.id!r} is already being saved")
    state = _put(state, event.id, StoreEntry(event=event, phase=EntryPhase.DRAFT))
    if action.select:
        state = replace(state, selection=_promote(state.selection, event.id))
    return state


def _edit(state: StoreState, event_id: str, updated: CalendarEvent, *, commit: bool) -> StoreState:
    entry = state.visible_entry(event_id)
    if entry.event.read_only:
        raise ReadOnlyEvent(event_id)
    if updated.id != event_id:
        raise InvalidArgument(f"Cannot change the id of '{event_id}' with an edit")
    ensure_valid(updated)

    if entry.phase is EntryPhase.DRAFT:
        if not commit:
            return _put(state, event_id, replace(entry, event=updated))
        return _emit(state, event_id, StoreEntry(event=updated, phase=EntryPhase.CREATING), MutationKind.CREATE)
    if entry.phase is EntryPhase.CREATING:
        return _put(state, event_id, replace(entry, event=updated, queued_update=True))

    snapshot = entry.snapshot if entry.phase is EntryPhase.UPDATING else entry.event
    return _emit(
        state,
        event_id,
        StoreEntry(event=updated, phase=EntryPhase.UPDATING, snapshot=snapshot),
        MutationKind.UPDATE,
    )


def _delete(state: StoreState, event_id: str) -> StoreState:
    entry = state.visible_entry(event_id)
    if entry.event.read_only:
        raise ReadOnlyEvent(event_id)
    if entry.phase is EntryPhase.DRAFT:
        logger.debug("Discarded draft '%s'", event_id)
        return _remove(state, event_id)
    if entry.phase is EntryPhase.CREATING:
        return _put(state, event_id, replace(entry, queued_delete=True))
    snapshot = entry.snapshot if entry.phase is EntryPhase.UPDATING else entry.event
    return _emit(
        state,
        event_id,
        StoreEntry(event=entry.event, phase=EntryPhase.DELETING, snapshot=snapshot),
        MutationKind.DELETE,
    )


def _response_entry(state: StoreState, event_id: str, sequence: int) -> Optional[StoreEntry]:
    entry = state.entries.get(event_id)
    if entry is None:
        logger.debug("Ignoring response #%d for '%s', which is no longer in the store", sequence, event_id)
        return None
    if sequence != entry.sequence or not entry.in_flight:
        logger.debug("%s", StaleMutation(event_id, sequence, entry.sequence))
        return None
    return entry


def _server_copy(entry: StoreEntry, action: SaveConfirmed) -> CalendarEvent:
    """The event the server reports, or the submitted one when that copy is unusable."""

    local = entry.submitted or entry.event
    if action.event is None:
        return local
    errors = validate(action.event)
    if not errors:
        return action.event
    logger.warning("Server copy of '%s' is invalid, keeping the submitted event: %s", action.event_id, errors)
    return local.with_id(action.event.id) if action.event.id else local


def _confirm(state: StoreState, action: SaveConfirmed) -> StoreState:
    entry = _response_entry(state, action.event_id, action.sequence)
    if entry is None:
        return state
    if entry.phase is EntryPhase.DELETING:
        logger.debug("Delete of '%s' confirmed", action.event_id)
        return _remove(state, action.event_id)

    confirmed = _server_copy(entry, action)
    new_id = confirmed.id
    follow_up: Optional[MutationKind] = None
    if entry.phase is EntryPhase.CREATING and entry.queued_delete:
        settled = StoreEntry(event=confirmed, phase=EntryPhase.DELETING, snapshot=confirmed)
        follow_up = MutationKind.DELETE
    elif entry.phase is EntryPhase.CREATING and entry.queued_update:
        settled = StoreEntry(event=entry.event.with_id(new_id), phase=EntryPhase.UPDATING, snapshot=confirmed)
        follow_up = MutationKind.UPDATE
    else:
        settled = StoreEntry(event=confirmed, phase=EntryPhase.CONFIRMED, sequence=entry.sequence)

    state = _rebind(state, action.event_id, new_id, settled)
    if follow_up is not None:
        state = _emit(state, new_id, settled, follow_up)
    return state


def _reject(state: StoreState, action: Reject) -> StoreState:
    entry = _response_entry(state, action.event_id, action.sequence)
    if entry is None:
        return state
    logger.info(
        "Mutation #%d for '%s' rejected: %s", action.sequence, action.event_id, action.reason or "no reason given"
    )
    if entry.phase is EntryPhase.CREATING:
        if entry.queued_delete:
            return _remove(state, action.event_id)
        draft = StoreEntry(event=entry.event, phase=EntryPhase.DRAFT, sequence=entry.sequence)
        return _put(state, action.event_id, draft)
    restored = entry.snapshot or entry.event
    return _put(
        state,
        action.event_id,
        StoreEntry(event=restored, phase=EntryPhase.CONFIRMED, sequence=entry.sequence),
    )


__all__ = ["StoreEntry", "StoreState", "reduce", "selected_events", "visible_events"]
