"""calkit: canonical calendar events, provider codecs and an optimistic event store."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
