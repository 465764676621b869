"""
String utility functions for capsulegen.

Provides the identifier casings each target uses when it turns a capsule's
display name (or a screen id) into a file name or a type/function name.
"""

from __future__ import annotations

import re

# Acronym runs ("QR" in "QRCode"), capitalised words, lowercase runs, digit runs
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")
_SEPARATOR_PATTERN = re.compile(r"[^A-Za-z0-9]+")


def split_words(text: str) -> list[str]:
    """
    Split arbitrary text into identifier words.

    Non-alphanumeric characters separate words, and camel/Pascal boundaries
    inside a chunk are honoured.

    Examples:
        >>> split_words("Date Picker")
        ['Date', 'Picker']
        >>> split_words("QRCode")
        ['QR', 'Code']
        >>> split_words("social-share")
        ['social', 'share']
    """
    words: list[str] = []
    for chunk in _SEPARATOR_PATTERN.split(text):
        if chunk:
            words.extend(_WORD_PATTERN.findall(chunk))
    return words


def _guard_leading_digit(identifier: str) -> str:
    if identifier and identifier[0].isdigit():
        return f"_{identifier}"
    return identifier


def to_pascal_case(text: str) -> str:
    """
    Convert text to PascalCase, keeping acronyms intact.

    Examples:
        >>> to_pascal_case("pdf viewer")
        'PdfViewer'
        >>> to_pascal_case("PDF Viewer")
        'PDFViewer'
        >>> to_pascal_case("3d model")
        '_3DModel'
    """
    words = split_words(text)
    return _guard_leading_digit("".join(w[0].upper() + w[1:] for w in words))


def to_camel_case(text: str) -> str:
    """
    Convert text to camelCase.

    Examples:
        >>> to_camel_case("Date Picker")
        'datePicker'
        >>> to_camel_case("QRCode")
        'qrCode'
    """
    words = split_words(text)
    if not words:
        return ""
    head = words[0].lower()
    tail = "".join(w[0].upper() + w[1:] for w in words[1:])
    return _guard_leading_digit(head + tail)


def to_kebab_case(text: str) -> str:
    """Convert text to kebab-case (npm package names, Cargo crate names)."""
    return "-".join(w.lower() for w in split_words(text))


def to_package_segment(text: str) -> str:
    """
    Convert text to a single lowercase Java/Kotlin package segment.

    Examples:
        >>> to_package_segment("My Cool App")
        'mycoolapp'
    """
    segment = "".join(w.lower() for w in split_words(text))
    return _guard_leading_digit(segment) or "app"
