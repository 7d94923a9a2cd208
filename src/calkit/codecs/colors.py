"""Display color tags and the provider color tables that feed them.

Lookups are total: an unrecognised provider color falls back to
``DEFAULT_COLOR`` and an absent one maps to ``None``.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

DEFAULT_COLOR = "peacock"

COLOR_HEX: Dict[str, str] = {
    "lavender": "#7986cb",
    "sage": "#33b679",
    "grape": "#8e24aa",
    "flamingo": "#e67c73",
    "banana": "#f6bf26",
    "tangerine": "#f4511e",
    "peacock": "#039be5",
    "graphite": "#616161",
    "blueberry": "#3f51b5",
    "basil": "#0b8043",
    "tomato": "#d50000",
}

GOOGLE_EVENT_COLORS: Dict[str, str] = {
    "1": "lavender",
    "2": "sage",
    "3": "grape",
    "4": "flamingo",
    "5": "banana",
    "6": "tangerine",
    "7": "peacock",
    "8": "graphite",
    "9": "blueberry",
    "10": "basil",
    "11": "tomato",
}

_GOOGLE_IDS = {color: color_id for color_id, color in GOOGLE_EVENT_COLORS.items()}

OUTLOOK_CATEGORY_COLORS: Dict[str, str] = {
    "red category": "tomato",
    "orange category": "tangerine",
    "yellow category": "banana",
    "green category": "basil",
    "blue category": "blueberry",
    "purple category": "grape",
}

OUTLOOK_PRESET_COLORS: Dict[str, str] = {
    "preset0": "tomato",
    "preset1": "tangerine",
    "preset2": "graphite",
    "preset3": "banana",
    "preset4": "basil",
    "preset5": "peacock",
    "preset6": "sage",
    "preset7": "blueberry",
    "preset8": "grape",
    "preset9": "flamingo",
}

_OUTLOOK_CATEGORIES = {color: name.capitalize() for name, color in OUTLOOK_CATEGORY_COLORS.items()}


def color_hex(color: Optional[str]) -> str:
    return COLOR_HEX.get(color or DEFAULT_COLOR, COLOR_HEX[DEFAULT_COLOR])


def color_from_google(color_id: Optional[str]) -> Optional[str]:
    if not color_id:
        return None
    return GOOGLE_EVENT_COLORS.get(str(color_id).strip(), DEFAULT_COLOR)


def color_to_google(color: Optional[str]) -> Optional[str]:
    if not color:
        return None
    return _GOOGLE_IDS.get(color)


def color_from_microsoft(categories: Sequence[str]) -> Optional[str]:
    if not categories:
        return None
    first = categories[0].strip().lower()
    return OUTLOOK_CATEGORY_COLORS.get(first) or OUTLOOK_PRESET_COLORS.get(first) or DEFAULT_COLOR


def color_to_microsoft(color: Optional[str]) -> Optional[str]:
    if not color:
        return None
    return _OUTLOOK_CATEGORIES.get(color)


def is_color_category(name: str) -> bool:
    key = name.strip().lower()
    return key in OUTLOOK_CATEGORY_COLORS or key in OUTLOOK_PRESET_COLORS
