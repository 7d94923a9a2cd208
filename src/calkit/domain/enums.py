from __future__ import annotations

from enum import Enum


class ProviderId(str, Enum):
    GOOGLE = "google"
    MICROSOFT = "microsoft"
    ICS = "ics"


class AttendeeStatus(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"
    TENTATIVE = "tentative"
    NEEDS_ACTION = "needs-action"
    UNKNOWN = "unknown"


class AttendeeType(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    RESOURCE = "resource"


class Ordering(str, Enum):
    BEFORE = "before"
    EQUAL = "equal"
    AFTER = "after"


class ValidationCode(str, Enum):
    MISSING_ID = "missing-id"
    VARIANT_MISMATCH = "variant-mismatch"
    END_BEFORE_START = "end-before-start"
    ALL_DAY_MISMATCH = "all-day-mismatch"
    DUPLICATE_ATTENDEE = "duplicate-attendee"
