"""
Theme processing.

Renders ProjectSpec.theme as CSS custom properties (web, desktop), a
SwiftUI ``Color`` extension (ios) and a Compose colour object (android).
Colours that are not ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA`` hex strings
fall back to the default palette.
"""

from __future__ import annotations

import logging
import re

from capsulegen.core.ir import DEFAULT_COLORS, ThemeSpec
from capsulegen.core.strings import split_words, to_kebab_case, to_pascal_case

logger = logging.getLogger(__name__)

_HEX = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


def parse_hex(color: str) -> tuple[int, int, int, int] | None:
    """
    Parse a hex colour into (r, g, b, alpha) components.

    >>> parse_hex("#6366F1")
    (99, 102, 241, 255)
    >>> parse_hex("#fff")
    (255, 255, 255, 255)
    >>> parse_hex("red") is None
    True
    """
    match = _HEX.match(color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    alpha = int(digits[6:8], 16) if len(digits) == 8 else 255
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16), alpha


def resolved_palette(theme: ThemeSpec) -> dict[str, tuple[int, int, int, int]]:
    """Theme palette with every colour parsed, invalid entries replaced by defaults."""
    palette: dict[str, tuple[int, int, int, int]] = {}
    for key, color in theme.palette().items():
        if not split_words(key):
            continue
        rgba = parse_hex(color)
        if rgba is None:
            logger.warning("Theme colour %s=%r is not a hex colour; using default", key, color)
            rgba = parse_hex(DEFAULT_COLORS.get(key, "#000000"))
        assert rgba is not None
        palette[key] = rgba
    return palette


def to_hex(rgba: tuple[int, int, int, int]) -> str:
    r, g, b, a = rgba
    if a == 255:
        return f"#{r:02X}{g:02X}{b:02X}"
    return f"#{r:02X}{g:02X}{b:02X}{a:02X}"


def css_variables(theme: ThemeSpec) -> str:
    """``:root`` block with one ``--color-*`` variable per palette entry."""
    declarations = {}
    for key, rgba in resolved_palette(theme).items():
        declarations[f"--color-{to_kebab_case(key)}"] = to_hex(rgba)
    body = "\n".join(f"  {name}: {value};" for name, value in declarations.items())
    return f":root {{\n{body}\n}}\n"


def swift_colors(theme: ThemeSpec) -> str:
    """``extension Color`` exposing ``themePrimary``, ``themeTextPrimary``, ..."""
    members = {}
    for key, (r, g, b, a) in resolved_palette(theme).items():
        name = "theme" + to_pascal_case(key).lstrip("_")
        members[name] = (
            f"Color(red: {r / 255:.3f}, green: {g / 255:.3f}, blue: {b / 255:.3f}, opacity: {a / 255:.3f})"
        )
    lines = [f"    static let {name} = {value}" for name, value in members.items()]
    return "import SwiftUI\n\nextension Color {\n" + "\n".join(lines) + "\n}\n"


def kotlin_colors(theme: ThemeSpec, package: str) -> str:
    """``AppColors`` object exposing ``Primary``, ``TextPrimary``, ..."""
    members = {}
    for key, (r, g, b, a) in resolved_palette(theme).items():
        name = to_pascal_case(key)
        members[name] = f"Color(0x{a:02X}{r:02X}{g:02X}{b:02X})"
    lines = [f"    val {name} = {value}" for name, value in members.items()]
    return (
        f"package {package}\n\n"
        "import androidx.compose.ui.graphics.Color\n\n"
        "object AppColors {\n" + "\n".join(lines) + "\n}\n"
    )
