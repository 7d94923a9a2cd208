"""Time zone transition search."""

from __future__ import annotations

from .transitions import Transition, find_all_transitions, find_transitions, format_offset

__all__ = ["Transition", "find_all_transitions", "find_transitions", "format_offset"]
