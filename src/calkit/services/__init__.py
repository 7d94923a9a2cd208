"""Services driving the store against external collaborators."""

from __future__ import annotations

from .persistence import EventPersistence, InMemoryPersistence
from .sync import SyncService

__all__ = ["EventPersistence", "InMemoryPersistence", "SyncService"]
