from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from dotenv import load_dotenv

from ..domain.enums import ProviderId

load_dotenv()


@dataclass(frozen=True)
class StoreSettings:
    default_time_zone: str
    default_event_duration: int
    week_starts_on: int

    @property
    def default_duration(self) -> timedelta:
        return timedelta(minutes=self.default_event_duration)


@dataclass(frozen=True)
class DefaultCalendarSettings:
    provider_id: ProviderId
    account_id: str
    calendar_id: str


@dataclass(frozen=True)
class TransitionSettings:
    horizon_years: int
    scan_step_hours: int

    @property
    def horizon(self) -> timedelta:
        return timedelta(days=366 * self.horizon_years)

    @property
    def scan_step(self) -> timedelta:
        return timedelta(hours=self.scan_step_hours)


@dataclass(frozen=True)
class IcsSettings:
    prod_id: str
    floating_time_zone: str


@dataclass(frozen=True)
class AppSettings:
    store: StoreSettings
    default_calendar: DefaultCalendarSettings
    transitions: TransitionSettings
    ics: IcsSettings


def _int_from_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _provider_from_env(name: str, default: ProviderId) -> ProviderId:
    raw = (os.getenv(name) or "").strip().lower()
    try:
        return ProviderId(raw) if raw else default
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    store = StoreSettings(
        default_time_zone=os.getenv("CALKIT_DEFAULT_TIMEZONE", "UTC"),
        default_event_duration=_int_from_env("CALKIT_DEFAULT_EVENT_DURATION", 60, minimum=1),
        week_starts_on=_int_from_env("CALKIT_WEEK_STARTS_ON", 1) % 7,
    )

    default_calendar = DefaultCalendarSettings(
        provider_id=_provider_from_env("CALKIT_DEFAULT_PROVIDER", ProviderId.GOOGLE),
        account_id=os.getenv("CALKIT_DEFAULT_ACCOUNT_ID", ""),
        calendar_id=os.getenv("CALKIT_DEFAULT_CALENDAR_ID", "primary"),
    )

    transitions = TransitionSettings(
        horizon_years=_int_from_env("CALKIT_TRANSITION_HORIZON_YEARS", 50, minimum=1),
        scan_step_hours=_int_from_env("CALKIT_TRANSITION_SCAN_HOURS", 24, minimum=1),
    )

    ics = IcsSettings(
        prod_id=os.getenv("CALKIT_ICS_PRODID", "-//calkit//calkit//EN"),
        floating_time_zone=os.getenv("CALKIT_ICS_FLOATING_TIMEZONE", "UTC"),
    )

    return AppSettings(store=store, default_calendar=default_calendar, transitions=transitions, ics=ics)
