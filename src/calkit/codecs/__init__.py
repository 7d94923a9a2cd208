"""Translators between provider payloads and :class:`CalendarEvent`."""

from __future__ import annotations

from typing import Dict

from ..domain.enums import ProviderId
from . import google, ics, microsoft
from .base import EventCodec, ImportFailure, ImportResult, checked, decode_batch

CODECS: Dict[ProviderId, EventCodec] = {
    ProviderId.GOOGLE: EventCodec(ProviderId.GOOGLE, google.decode, google.encode),
    ProviderId.MICROSOFT: EventCodec(ProviderId.MICROSOFT, microsoft.decode, microsoft.encode),
    ProviderId.ICS: EventCodec(ProviderId.ICS, ics.decode, ics.encode),
}


def get_codec(provider_id: ProviderId | str) -> EventCodec:
    return CODECS[ProviderId(provider_id)]


__all__ = [
    "CODECS",
    "EventCodec",
    "ImportFailure",
    "ImportResult",
    "checked",
    "decode_batch",
    "get_codec",
    "google",
    "ics",
    "microsoft",
]
