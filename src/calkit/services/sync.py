from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..codecs import get_codec
from ..domain.errors import PersistenceError
from ..domain.models import CalendarEvent
from ..store import Action, EventStore, Mutation, MutationKind, Reject, SaveConfirmed
from .persistence import EventPersistence

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncService:
    """Sends store mutations to the persistence collaborator.

    Each outcome is dispatched back into the store as soon as its request
    completes, so responses may land in any order.
    """

    store: EventStore
    persistence: EventPersistence

    async def dispatch(self, action: Action) -> Tuple[Mutation, ...]:
        mutations = self.store.dispatch(action)
        await self.submit(mutations)
        return mutations

    async def submit(self, mutations: Iterable[Mutation]) -> None:
        pending = [self._run(mutation) for mutation in mutations]
        if pending:
            await asyncio.gather(*pending)

    async def _call(self, mutation: Mutation) -> Optional[CalendarEvent]:
        event = mutation.event
        if mutation.kind is MutationKind.DELETE:
            await self.persistence.delete(event)
            return None
        payload = get_codec(event.provider_id).encode(event)
        if mutation.kind is MutationKind.CREATE:
            return await self.persistence.create(event, payload)
        return await self.persistence.update(event, payload)

    async def _run(self, mutation: Mutation) -> None:
        try:
            result = await self._call(mutation)
        except PersistenceError as exc:
            follow_up = self.store.dispatch(Reject(mutation.event_id, mutation.sequence, exc.reason))
        except Exception as exc:
            logger.exception("Persistence call for %s #%d failed", mutation.event_id, mutation.sequence)
            self.store.dispatch(Reject(mutation.event_id, mutation.sequence, str(exc)))
            raise
        else:
            logger.debug("%s #%d for %s confirmed", mutation.kind.value, mutation.sequence, mutation.event_id)
            follow_up = self.store.dispatch(SaveConfirmed(mutation.event_id, mutation.sequence, result))
        await self.submit(follow_up)
