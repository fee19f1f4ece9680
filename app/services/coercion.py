import json
import math
from typing import Any, Iterable, List, Optional, TypeVar

E = TypeVar("E")

# Keys the model tends to put the human-readable part of an object under
DISPLAY_KEYS = ("name", "title", "skill", "keyword", "label", "degree", "role")


def coerce_text(value: Any) -> str:
    """Render one LLM-produced list item as display text."""
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    if isinstance(value, dict):
        for key in DISPLAY_KEYS:
            if value.get(key):
                return str(value[key])
        return json.dumps(value, default=str)
    return str(value)


def coerce_text_list(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [text for text in (coerce_text(v) for v in values) if text]


def as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    if value in (None, ""):
        return []
    return [value]


def clamp_percentage(value: Any, default: int = 0) -> int:
    """Round into 0..100. Infinities pin to the nearest bound, NaN and junk fall back to ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = float(default)
    if math.isnan(number):
        number = float(default)
    return int(round(max(0.0, min(100.0, number))))


def coerce_enum(enum_cls: Iterable[E], value: Any, default: E) -> E:
    """Map a free-text category onto an enum member, falling back to ``default``."""
    if isinstance(value, str):
        normalized = value.strip().lower().replace(" ", "_").replace("-", "_")
        for member in enum_cls:
            if member.value == normalized:
                return member
    return default


def first_present(data: dict, *keys: str) -> Optional[Any]:
    for key in keys:
        if data.get(key):
            return data[key]
    return None
