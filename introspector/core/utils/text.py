"""Text helpers shared by the extractors, the graph and the renderers."""

import math
import re
from typing import Optional

# Declaration keys look like "T:Shop.Orders.OrderService" (XML docs) or
# "shop.orders.OrderService" (Python qualified names).
_KEY_SEPARATORS = re.compile(r"[:.]")


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


def trim_text(text: Optional[str]) -> Optional[str]:
    """Strip every line and drop blank ones.

    Returns None when nothing is left so callers can treat "no text" uniformly.
    """
    if text is None:
        return None
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    return "\n".join(lines) if lines else None


def join_label(text: Optional[str]) -> str:
    """Collapse multi-line text into a single PlantUML label.

    PlantUML renders the two-character sequence backslash-n as a line break.
    """
    if not text:
        return ""
    return "\\n".join(text.splitlines())


def name_from_key(key: Optional[str]) -> Optional[str]:
    """Derive a display name from a declaration key.

    "M:Shop.Orders.OrderService.Place(System.String)" -> "Place"
    "shop.orders.OrderService" -> "OrderService"
    """
    if is_blank(key):
        return None
    head = key.split("(", 1)[0]
    segment = _KEY_SEPARATORS.split(head)[-1].strip()
    return segment or None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Lenient float parsing: anything unparseable or non-finite is treated as absent."""
    if value is None:
        return None
    try:
        result = float(value.strip())
    except (TypeError, ValueError):
        return None
    # nan and inf do not order against other positions
    if math.isnan(result) or math.isinf(result):
        return None
    return result
