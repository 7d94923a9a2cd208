"""Optimistic local event store."""

from __future__ import annotations

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
from .event_store import EventStore
from .reducer import StoreEntry, StoreState, reduce, selected_events, visible_events

__all__ = [
    "Action",
    "Delete",
    "Draft",
    "EntryPhase",
    "EventStore",
    "Hydrate",
    "Move",
    "Mutation",
    "MutationKind",
    "Reject",
    "Save",
    "SaveConfirmed",
    "Select",
    "StoreEntry",
    "StoreState",
    "Unselect",
    "reduce",
    "selected_events",
    "visible_events",
]
