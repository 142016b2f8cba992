"""
Color Parsing

Host-style HTML color strings: ``#RGB``, ``#RGBA``, ``#RRGGBB``, ``#RRGGBBAA``
and a fixed set of names. A bare six-digit ``RRGGBB`` is accepted as well.
"""

from __future__ import annotations

RGBA = tuple[float, float, float, float]

NO_COLOR = "none"

HTML_COLORS: dict[str, str] = {
    "red": "#FF0000",
    "cyan": "#00FFFF",
    "blue": "#0000FF",
    "darkblue": "#0000A0",
    "lightblue": "#ADD8E6",
    "purple": "#800080",
    "yellow": "#FFFF00",
    "lime": "#00FF00",
    "fuchsia": "#FF00FF",
    "white": "#FFFFFF",
    "silver": "#C0C0C0",
    "grey": "#808080",
    "black": "#000000",
    "orange": "#FFA500",
    "brown": "#A52A2A",
    "maroon": "#800000",
    "green": "#008000",
    "olive": "#808000",
    "navy": "#000080",
    "teal": "#008080",
    "aqua": "#00FFFF",
    "magenta": "#FF00FF",
}


def color_given(value: str | None) -> bool:
    """True when a command carries a color other than the "none" sentinel."""
    return bool(value) and value != NO_COLOR


def parse_color(value: str | None) -> RGBA | None:
    """
    Parse a color string into normalized RGBA.

    Returns:
        The color, or None for a missing, "none" or unparseable value.
    """
    if not color_given(value):
        return None

    text = value.strip()
    if len(text) == 6 and not text.startswith("#"):
        text = "#" + text
    text = HTML_COLORS.get(text.lower(), text)
    if not text.startswith("#"):
        return None

    digits = text[1:]
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) == 6:
        digits += "FF"
    if len(digits) != 8:
        return None

    try:
        channels = [int(digits[i : i + 2], 16) for i in range(0, 8, 2)]
    except ValueError:
        return None
    r, g, b, a = (c / 255.0 for c in channels)
    return (r, g, b, a)
