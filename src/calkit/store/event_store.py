from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from ..config import DefaultCalendarSettings, StoreSettings, get_settings
from ..domain.all_day import display_bounds
from ..domain.models import CalendarEvent, create_draft_event
from ..domain.temporal import Instant, TemporalValue, load_zone
from .actions import Action, Delete, Draft, EntryPhase, Hydrate, Move, Mutation, Save, Select, Unselect
from .reducer import StoreState, reduce, selected_events, visible_events

logger = logging.getLogger(__name__)

Listener = Callable[[StoreState], None]


def _store_settings() -> StoreSettings:
    return get_settings().store


def _calendar_settings() -> DefaultCalendarSettings:
    return get_settings().default_calendar


@dataclass
class EventStore:
    """In-memory, optimistic view of the user's events.

    Wraps :func:`~calkit.store.reducer.reduce`. ``dispatch`` returns the
    mutations the caller must hand to the persistence collaborator.
    """

    settings: StoreSettings = field(default_factory=_store_settings)
    default_calendar: DefaultCalendarSettings = field(default_factory=_calendar_settings)
    state: StoreState = field(default_factory=StoreState)
    _listeners: List[Listener] = field(default_factory=list, init=False, repr=False)

    @property
    def reference_zone(self) -> str:
        return self.settings.default_time_zone

    def dispatch(self, action: Action) -> Tuple[Mutation, ...]:
        self.state = reduce(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state.outbox

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def events(self) -> List[CalendarEvent]:
        return visible_events(self.state, self.reference_zone)

    @property
    def selected_events(self) -> List[CalendarEvent]:
        return selected_events(self.state)

    @property
    def primary_selection(self) -> Optional[CalendarEvent]:
        selected = self.selected_events
        return selected[0] if selected else None

    def get(self, event_id: str) -> CalendarEvent:
        return self.state.visible_entry(event_id).event

    def phase(self, event_id: str) -> EntryPhase:
        return self.state.entry(event_id).phase

    def __contains__(self, event_id: object) -> bool:
        return isinstance(event_id, str) and event_id in self.state.entries and self.state.entries[event_id].visible

    def hydrate(self, events: Iterable[CalendarEvent]) -> None:
        self.dispatch(Hydrate(tuple(events)))

    def select(self, event: CalendarEvent | str) -> None:
        self.dispatch(Select(event if isinstance(event, str) else event.id))

    def unselect(self, event_id: Optional[str] = None) -> None:
        self.dispatch(Unselect(event_id))

    def create_draft(
        self,
        *,
        start: Optional[TemporalValue] = None,
        end: Optional[TemporalValue] = None,
        all_day: bool = False,
        title: Optional[str] = None,
        now: Optional[Instant] = None,
        select: bool = True,
    ) -> CalendarEvent:
        """Add a draft built from the configured defaults and return it."""

        draft = create_draft_event(
            time_zone=self.settings.default_time_zone,
            duration_minutes=self.settings.default_event_duration,
            start=start,
            end=end,
            all_day=all_day,
            provider_id=self.default_calendar.provider_id,
            account_id=self.default_calendar.account_id,
            calendar_id=self.default_calendar.calendar_id,
            title=title,
            now=now,
        )
        self.dispatch(Draft(draft, select=select))
        return draft

    def save(self, event: CalendarEvent) -> Tuple[Mutation, ...]:
        return self.dispatch(Save(event))

    def move(self, event_id: str, start: TemporalValue, end: TemporalValue) -> Tuple[Mutation, ...]:
        return self.dispatch(Move(event_id, start, end))

    def delete(self, event_id: str) -> Tuple[Mutation, ...]:
        return self.dispatch(Delete(event_id))

    def events_between(self, start: date, end: date) -> List[CalendarEvent]:
        """Visible events overlapping the local days ``start`` through ``end``."""

        zone = load_zone(self.reference_zone)
        window_start = datetime.combine(start, time(), tzinfo=zone)
        window_end = datetime.combine(end + timedelta(days=1), time(), tzinfo=zone)
        collected: list[CalendarEvent] = []
        for event in self.events:
            event_start, event_end = display_bounds(event, self.reference_zone)
            if event_start.value < window_end and (
                event_end.value > window_start or event_start.value >= window_start
            ):
                collected.append(event)
        return collected

    def events_for_day(self, target_day: date) -> List[CalendarEvent]:
        return self.events_between(target_day, target_day)


__all__ = ["EventStore", "Listener"]
