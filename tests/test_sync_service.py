from __future__ import annotations

import asyncio
from datetime import datetime

import pytest

from calkit.domain import PersistenceError, ZonedCivilTime
from calkit.services import InMemoryPersistence, SyncService
from calkit.store import Delete, EntryPhase, EventStore, Move, Save

NEW_YORK = "America/New_York"


def at(hour):
    return ZonedCivilTime(datetime(2024, 3, 12, hour, 0), NEW_YORK)


class ExplodingPersistence(InMemoryPersistence):
    async def update(self, event, payload):
        raise RuntimeError("connection reset")


class BackwardsPersistence(InMemoryPersistence):
    async def update(self, event, payload):
        stored = await super().update(event, payload)
        return stored.with_times(stored.end, stored.start)


@pytest.fixture
def store(store_settings, calendar_settings, meeting):
    event_store = EventStore(settings=store_settings, default_calendar=calendar_settings)
    event_store.hydrate([meeting])
    return event_store


@pytest.fixture
def backend(meeting):
    return InMemoryPersistence(events={meeting.id: meeting})


@pytest.fixture
def service(store, backend):
    return SyncService(store=store, persistence=backend)


def test_saving_a_draft_creates_it_on_the_server(service, store, backend):
    draft = store.create_draft(start=at(15), end=at(16), title="Retro")

    asyncio.run(service.dispatch(Save(draft)))

    ((kind, server_id, payload),) = backend.payloads
    assert kind == "create"
    assert "id" not in payload
    assert payload["summary"] == "Retro"
    assert draft.id not in store
    assert store.get(server_id).title == "Retro"
    assert store.phase(server_id) is EntryPhase.CONFIRMED


def test_move_is_confirmed(service, store, backend, meeting):
    asyncio.run(service.dispatch(Move(meeting.id, at(11), at(12))))

    assert store.phase(meeting.id) is EntryPhase.CONFIRMED
    assert store.get(meeting.id).start == at(11)
    assert backend.events[meeting.id].start == at(11)
    assert backend.payloads[0][2]["start"] == {"dateTime": "2024-03-12T11:00:00-04:00", "timeZone": NEW_YORK}


def test_persistence_error_rolls_back(service, store, backend, meeting):
    backend.failures[meeting.id] = PersistenceError("conflict", status=409)

    asyncio.run(service.dispatch(Move(meeting.id, at(11), at(12))))

    assert store.get(meeting.id).start == meeting.start
    assert store.phase(meeting.id) is EntryPhase.CONFIRMED
    assert backend.events[meeting.id] == meeting


def test_delete_removes_event_everywhere(service, store, backend, meeting):
    asyncio.run(service.dispatch(Delete(meeting.id)))

    assert meeting.id not in backend.events
    assert meeting.id not in store.state.entries


def test_delete_queued_during_create_is_sent_after_confirmation(service, store, backend, meeting):
    draft = store.create_draft(start=at(15), end=at(16))
    mutations = store.save(draft)
    store.delete(draft.id)

    asyncio.run(service.submit(mutations))

    assert [kind for kind, _, _ in backend.payloads] == ["create", "delete"]
    assert list(backend.events) == [meeting.id]
    assert draft.id not in store.state.entries


def test_concurrent_moves_settle_on_latest(service, store, backend, meeting):
    first = store.move(meeting.id, at(11), at(12))
    second = store.move(meeting.id, at(13), at(14))

    asyncio.run(service.submit(first + second))

    assert store.get(meeting.id).start == at(13)
    assert store.phase(meeting.id) is EntryPhase.CONFIRMED
    assert backend.events[meeting.id].start == at(13)


def test_unexpected_errors_reject_and_propagate(store, meeting):
    service = SyncService(store=store, persistence=ExplodingPersistence(events={meeting.id: meeting}))

    with pytest.raises(RuntimeError):
        asyncio.run(service.dispatch(Move(meeting.id, at(11), at(12))))

    assert store.get(meeting.id).start == meeting.start


def test_invalid_server_copy_still_settles_the_move(store, meeting):
    service = SyncService(store=store, persistence=BackwardsPersistence(events={meeting.id: meeting}))

    asyncio.run(service.dispatch(Move(meeting.id, at(11), at(12))))

    assert store.phase(meeting.id) is EntryPhase.CONFIRMED
    assert store.get(meeting.id).start == at(11)
    assert store.get(meeting.id).end == at(12)
