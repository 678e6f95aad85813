"""
Inline style resolution.

Parses the raw ``style`` attribute of an element into a camelCase property
map. Parsing never raises: malformed declarations are skipped and callers
supply defaults for absent properties.
"""

import re
from typing import Dict, Optional, Union

_KEBAB = re.compile(r"-([a-z])")
_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+))")
_HAS_UNIT = re.compile(r"[a-z%]$", re.IGNORECASE)

# Box shorthands expanded into Top/Right/Bottom/Left longhands
BOX_SHORTHANDS = ("padding",)


def kebab_to_camel(name: str) -> str:
    """Convert ``background-color`` to ``backgroundColor``."""
    return _KEBAB.sub(lambda m: m.group(1).upper(), name)


def expand_box_shorthand(out: Dict[str, str], value: str, prefix: str) -> None:
    """
    Expand a CSS box shorthand into four longhands.

    1 value → all sides, 2 → vertical/horizontal, 3 → top/horizontal/bottom,
    4 → top/right/bottom/left.
    """
    parts = value.split()
    if not parts:
        return
    top = parts[0]
    right = parts[1] if len(parts) > 1 else top
    bottom = parts[2] if len(parts) > 2 else top
    left = parts[3] if len(parts) > 3 else right

    out[f"{prefix}Top"] = top
    out[f"{prefix}Right"] = right
    out[f"{prefix}Bottom"] = bottom
    out[f"{prefix}Left"] = left


def parse_inline_style(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse an inline style string into a camelCase property map.

    Args:
        raw: Raw ``style`` attribute value (may be None).

    Returns:
        Mapping of camelCase property name to trimmed value.
    """
    result: Dict[str, str] = {}
    if not raw:
        return result

    for declaration in raw.split(";"):
        prop, sep, value = declaration.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = value.strip()
        if not prop or not value:
            continue

        if prop in BOX_SHORTHANDS:
            expand_box_shorthand(result, value, prop)
            continue

        result[kebab_to_camel(prop)] = value

    return result


def parse_px(value: Optional[str], fallback: float = 0) -> Union[int, float]:
    """Leading numeric part of a CSS length (``"16px"`` → 16)."""
    if not value:
        return fallback
    match = _LEADING_NUMBER.match(value)
    if not match:
        return fallback
    number = float(match.group(1))
    return int(number) if number.is_integer() else number


def ensure_px(value: Optional[str], fallback: str = "0px") -> str:
    """Append ``px`` to unitless lengths; keep values that carry a unit."""
    if not value:
        return fallback
    if _HAS_UNIT.search(value):
        return value
    return f"{value}px"


def format_px(value) -> str:
    """Format a pixel number without a trailing ``.0``."""
    if isinstance(value, str):
        return ensure_px(value.strip(), "0px")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}px"
