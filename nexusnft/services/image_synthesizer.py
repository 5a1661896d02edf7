"""
Deterministic token artwork.

Produces the fallback SVG for tokens whose collection has no uploaded
image. Colour and pattern derive from a 32-bit string hash of the token
ID, so the same ID always renders to the same bytes and the response can
be cached forever.
"""

import math
from html import escape

CANVAS_SIZE = 500
CENTER = 250
RING_RADIUS = 100
BASE_CIRCLE_RADIUS = 50

SATURATION = 70
LIGHTNESS = 60


def token_hash(token_id: str) -> int:
    """
    Fold a string into a signed 32-bit hash.

    Iterates characters and computes hash = hash * 31 + unit, wrapping at
    32 bits. The unit is the first UTF-16 code unit of the character, so a
    character outside the BMP contributes only its high surrogate.
    """
    value = 0
    for ch in token_id:
        value = (value * 31 + _first_code_unit(ch)) & 0xFFFFFFFF

    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _first_code_unit(ch: str) -> int:
    point = ord(ch)
    if point < 0x10000:
        return point
    return 0xD800 + ((point - 0x10000) >> 10)


def token_color(token_id: str) -> str:
    """HSL background colour for a token."""
    hue = abs(token_hash(token_id)) % 360
    return f"hsl({hue}, {SATURATION}%, {LIGHTNESS}%)"


def circle_count(token_id: str) -> int:
    """Number of circles on the ring, between 3 and 7."""
    return abs(token_hash(token_id)) % 5 + 3


def circle_radius(token_id: str) -> int:
    """
    Radius of every circle in the pattern.

    The remainder keeps the sign of the hash (truncated division), so
    negative hashes shrink the circles below the base radius.
    """
    return BASE_CIRCLE_RADIUS + int(math.fmod(token_hash(token_id), 30))


def _format_number(value: float) -> str:
    """Render a coordinate without a trailing .0 for whole numbers."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def generate_pattern(token_id: str) -> str:
    """Circles evenly spaced on a ring around the canvas centre."""
    count = circle_count(token_id)
    radius = circle_radius(token_id)

    circles: list[str] = []
    for i in range(count):
        angle = i * (2 * math.pi / count)
        cx = CENTER + math.cos(angle) * RING_RADIUS
        cy = CENTER + math.sin(angle) * RING_RADIUS
        circles.append(
            f'<circle cx="{_format_number(cx)}" cy="{_format_number(cy)}" '
            f'r="{radius}" fill="rgba(255,255,255,0.2)"/>'
        )
    return "\n  ".join(circles)


def synthesize(token_id: str) -> str:
    """
    Render the SVG image for a token.

    Args:
        token_id: Token ID as it appears in the request path

    Returns:
        SVG document as a string
    """
    color = token_color(token_id)
    label = escape(token_id, quote=True)

    return (
        f'<svg width="{CANVAS_SIZE}" height="{CANVAS_SIZE}" '
        f'viewBox="0 0 {CANVAS_SIZE} {CANVAS_SIZE}" '
        'xmlns="http://www.w3.org/2000/svg" preserveAspectRatio="xMidYMid meet">\n'
        "  <defs>\n"
        '    <linearGradient id="grad" x1="0%" y1="0%" x2="100%" y2="100%">\n'
        f'      <stop offset="0%" style="stop-color:{color};stop-opacity:1"/>\n'
        f'      <stop offset="100%" style="stop-color:{color};stop-opacity:0.7"/>\n'
        "    </linearGradient>\n"
        "  </defs>\n"
        '  <rect width="100%" height="100%" fill="url(#grad)"/>\n'
        f"  {generate_pattern(token_id)}\n"
        '  <text x="50%" y="50%" dominant-baseline="middle" text-anchor="middle" '
        'font-family="Arial, sans-serif" font-size="48" font-weight="bold" fill="white" '
        'filter="drop-shadow(0 2px 4px rgba(0,0,0,0.2))">'
        f"#{label}</text>\n"
        "</svg>"
    )
