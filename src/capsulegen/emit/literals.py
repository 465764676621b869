"""
Per-target literal syntax.

Each target renders the four PropValue shapes (string, number, boolean,
array) plus handler stubs for ``function`` props. Arrays apply the same
rules recursively to their elements.
"""

from __future__ import annotations

import re
from typing import Any

from capsulegen.core.coercion import CoercedProp, format_number, is_number
from capsulegen.core.ir import PropType

_CONTROL = re.compile(r"[\x00-\x1f\x7f\u2028\u2029]")
_COMMENT_BREAKERS = re.compile(r"[\x00-\x1f\x7f\u2028\u2029]+")


def comment_text(text: str) -> str:
    """
    Make arbitrary text safe inside ``//`` and ``/* */`` comments.

    >>> comment_text("a */ b\\nc")
    'a * / b c'
    """
    text = _COMMENT_BREAKERS.sub(" ", text)
    return text.replace("*/", "* /").replace("/*", "/ *")


class LiteralStyle:
    """
    C-family literal syntax shared by all four targets.

    Subclasses override the pieces that differ: string escaping, array
    brackets and handler stubs.
    """

    true_keyword = "true"
    false_keyword = "false"
    array_open = "["
    array_close = "]"

    _simple_escapes = {
        "\\": "\\\\",
        '"': '\\"',
        "\n": "\\n",
        "\r": "\\r",
        "\t": "\\t",
    }

    def escape_char(self, char: str) -> str:
        if char in self._simple_escapes:
            return self._simple_escapes[char]
        if _CONTROL.match(char):
            return self.unicode_escape(char)
        return char

    def unicode_escape(self, char: str) -> str:
        return f"\\u{ord(char):04x}"

    def string(self, value: str) -> str:
        return '"' + "".join(self.escape_char(c) for c in value) + '"'

    def number(self, value: int | float) -> str:
        return format_number(value)

    def boolean(self, value: bool) -> str:
        return self.true_keyword if value else self.false_keyword

    def array(self, items: list[Any]) -> str:
        return self.array_open + ", ".join(self.value(item) for item in items) + self.array_close

    def handler(self, name: str) -> str:
        return "{ /* " + comment_text(name) + " */ }"

    def value(self, value: Any) -> str:
        """Render a coerced PropValue."""
        if isinstance(value, bool):
            return self.boolean(value)
        if is_number(value):
            return self.number(value)
        if isinstance(value, str):
            return self.string(value)
        if isinstance(value, list | tuple):
            return self.array(list(value))
        raise TypeError(f"cannot render {type(value).__name__} as a literal")

    def prop(self, prop: CoercedProp) -> str:
        """Render a coerced prop's value, honouring ``function`` props."""
        if prop.spec.type == PropType.FUNCTION:
            return self.handler(str(prop.value))
        return self.value(prop.value)


class JavaScriptLiterals(LiteralStyle):
    """TypeScript / JavaScript literals."""

    def handler(self, name: str) -> str:
        return "() => { /* " + comment_text(name) + " */ }"


class JSXAttributeLiterals(JavaScriptLiterals):
    """
    JSX attribute values.

    Plain strings stay as quoted attributes; anything JSX would not carry
    verbatim is wrapped in an expression container.
    """

    _UNSAFE_ATTRIBUTE = re.compile(r'["\\&{}<>\x00-\x1f\x7f\u2028\u2029]')

    def attribute(self, prop: CoercedProp) -> str:
        """Render ``name=value`` (or a bare name for ``true``)."""
        value = prop.value
        if prop.spec.type == PropType.FUNCTION:
            return f"{prop.name}={{{self.handler(str(value))}}}"
        if isinstance(value, bool):
            return prop.name if value else f"{prop.name}={{false}}"
        if isinstance(value, str) and not self._UNSAFE_ATTRIBUTE.search(value):
            return f'{prop.name}="{value}"'
        return f"{prop.name}={{{self.value(value)}}}"


class SwiftLiterals(LiteralStyle):
    """
    Swift literals.

    Escaping every backslash also neutralises ``\\(`` interpolation.
    """

    def unicode_escape(self, char: str) -> str:
        return f"\\u{{{ord(char):x}}}"


class KotlinLiterals(LiteralStyle):
    """Kotlin literals; ``$`` is escaped so templates never expand."""

    array_open = "listOf("
    array_close = ")"

    _simple_escapes = {**LiteralStyle._simple_escapes, "$": "\\$", "\b": "\\b"}

    def number(self, value: int | float) -> str:
        if isinstance(value, int) and not -(2**31) <= value < 2**31:
            return f"{value}L"
        return format_number(value)
