from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .enums import ValidationCode


class CalkitError(Exception):
    """Base class for every error raised by calkit."""


class DecodeError(CalkitError):
    """An external payload could not be turned into a canonical event."""

    def __init__(self, reason: str, *, item_id: Optional[str] = None) -> None:
        self.reason = reason
        self.item_id = item_id
        super().__init__(f"{reason} (item {item_id})" if item_id else reason)


class InvalidConversion(CalkitError, ValueError):
    """A temporal operation was applied to an incompatible variant."""


class InvalidArgument(CalkitError, ValueError):
    pass


class ReadOnlyEvent(CalkitError):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event '{event_id}' is read-only.")


class UnknownEvent(CalkitError, KeyError):
    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(event_id)

    def __str__(self) -> str:
        return f"Event '{self.event_id}' is not in the store."


class StaleMutation(CalkitError):
    """A server response for a local edit that a newer edit superseded.

    Only used for diagnostics inside the store, never raised to callers.
    """

    def __init__(self, event_id: str, sequence: int, current: int) -> None:
        self.event_id = event_id
        self.sequence = sequence
        self.current = current
        super().__init__(f"Response #{sequence} for '{event_id}' is older than #{current}.")


class PersistenceError(CalkitError):
    """Structured failure returned by the persistence collaborator."""

    def __init__(self, reason: str, *, status: Optional[int] = None) -> None:
        self.reason = reason
        self.status = status
        super().__init__(reason)


@dataclass(frozen=True, slots=True)
class ValidationError:
    code: ValidationCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidEvent(CalkitError, ValueError):
    def __init__(self, event_id: str, errors: Iterable[ValidationError]) -> None:
        self.event_id = event_id
        self.errors = tuple(errors)
        details = "; ".join(str(error) for error in self.errors)
        super().__init__(f"Event '{event_id}' is invalid: {details}")

    @property
    def codes(self) -> tuple[ValidationCode, ...]:
        return tuple(error.code for error in self.errors)


__all__ = [
    "CalkitError",
    "DecodeError",
    "InvalidArgument",
    "InvalidConversion",
    "InvalidEvent",
    "PersistenceError",
    "ReadOnlyEvent",
    "StaleMutation",
    "UnknownEvent",
    "ValidationError",
]
