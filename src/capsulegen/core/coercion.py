"""
Prop coercion.

Validates an instance's raw prop map against its capsule's declared schema
and produces the fully-typed, schema-ordered prop list that every emitter
consumes. Nothing downstream ever sees the raw map.
"""

from __future__ import annotations

import copy
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from .errors import GenerationFailure
from .ir import CapsuleDefinition, Diagnostic, DiagnosticCode, PropSpec, PropType, ScreenNode
from .ir import fatal, warning

logger = logging.getLogger(__name__)

_NUMERIC = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_BOOLEANS = {"true": True, "false": False}
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")

MAX_ARRAY_NESTING = 16


class PropCoercionError(ValueError):
    """A single value does not match (and cannot be coerced to) its declared type."""

    pass


@dataclass(frozen=True)
class CoercedProp:
    """
    One schema entry with its final value.

    ``value`` is None only for an optional prop that was absent and declares
    no default; emitters leave such props out of the call site.
    """

    spec: PropSpec
    value: Any

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def is_set(self) -> bool:
        return self.value is not None


@dataclass
class CoercionOutcome:
    """Coerced props in schema order plus any recoverable diagnostics."""

    props: list[CoercedProp] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {p.name: p.value for p in self.props}


def is_number(value: Any) -> bool:
    """True for int/float values; booleans are not numbers."""
    return isinstance(value, int | float) and not isinstance(value, bool)


def format_number(value: int | float) -> str:
    """Lexical form of a number as written into every target."""
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def _parse_number(text: str) -> int | float:
    stripped = text.strip()
    if not _NUMERIC.match(stripped):
        raise PropCoercionError(f"expected a number, got {text!r}")
    if _INTEGER.match(stripped):
        return int(stripped)
    return float(stripped)


def _check_finite(value: int | float) -> int | float:
    if isinstance(value, float) and not math.isfinite(value):
        raise PropCoercionError(f"non-finite number {value!r} cannot be emitted")
    return value


def _check_text(value: str) -> str:
    # Unpaired surrogates have no UTF-8 encoding, so no target file could hold them
    match = _LONE_SURROGATE.search(value)
    if match:
        raise PropCoercionError(f"unpaired surrogate U+{ord(match.group()):04X} in {value!r}")
    return value


def _coerce_element(value: Any, depth: int) -> Any:
    if depth > MAX_ARRAY_NESTING:
        raise PropCoercionError(f"arrays nested deeper than {MAX_ARRAY_NESTING} levels")
    if isinstance(value, str):
        return _check_text(value)
    if isinstance(value, bool):
        return value
    if is_number(value):
        return _check_finite(value)
    if isinstance(value, list | tuple):
        return [_coerce_element(item, depth + 1) for item in value]
    raise PropCoercionError(
        f"array elements must be strings, numbers, booleans or arrays, got {type(value).__name__}"
    )


def coerce_value(spec: PropSpec, value: Any) -> Any:
    """
    Coerce one present value to the prop's declared type.

    Coercion happens only where it is unambiguous: numbers become strings
    for ``string`` props, numeric strings become numbers, ``"true"`` /
    ``"false"`` become booleans. Everything else is a mismatch.

    Raises:
        PropCoercionError: If the value cannot be represented as the declared type
    """
    prop_type = spec.type

    if prop_type == PropType.STRING:
        if isinstance(value, str):
            return _check_text(value)
        if is_number(value):
            return format_number(_check_finite(value))
        raise PropCoercionError(f"expected a string, got {type(value).__name__}")

    if prop_type == PropType.NUMBER:
        if is_number(value):
            return _check_finite(value)
        if isinstance(value, str):
            return _check_finite(_parse_number(value))
        raise PropCoercionError(f"expected a number, got {type(value).__name__}")

    if prop_type == PropType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _BOOLEANS:
            return _BOOLEANS[value.strip().lower()]
        raise PropCoercionError(f"expected a boolean, got {value!r}")

    if prop_type == PropType.SELECT:
        candidate = value
        if is_number(value):
            candidate = format_number(value)
        if isinstance(candidate, str) and candidate in spec.options:
            return candidate
        raise PropCoercionError(f"expected one of {', '.join(spec.options)}, got {value!r}")

    if prop_type == PropType.ARRAY:
        if isinstance(value, list | tuple):
            return [_coerce_element(item, 1) for item in value]
        raise PropCoercionError(f"expected an array, got {type(value).__name__}")

    if prop_type == PropType.FUNCTION:
        # A function prop names the handler the generated code should call
        if isinstance(value, str) and value.strip():
            return _check_text(value.strip())
        raise PropCoercionError(f"expected a handler name, got {value!r}")

    raise PropCoercionError(f"unsupported prop type {prop_type}")


class PropCoercer:
    """
    Validates and normalizes instance props against capsule schemas.

    Usage:
        coercer = PropCoercer()
        outcome = coercer.coerce(capsule, node, screen_id="home")
        for prop in outcome.props:
            ...
    """

    def coerce(
        self,
        capsule: CapsuleDefinition,
        node: ScreenNode,
        screen_id: str | None = None,
    ) -> CoercionOutcome:
        """
        Coerce ``node.props`` against ``capsule.props``.

        Raises:
            GenerationFailure: MISSING_REQUIRED_PROP or PROP_TYPE_MISMATCH
        """
        outcome = CoercionOutcome()
        raw = node.props

        for spec in capsule.props:
            value = raw.get(spec.name)
            if value is None:
                if spec.required:
                    raise GenerationFailure(
                        fatal(
                            DiagnosticCode.MISSING_REQUIRED_PROP,
                            f"Node '{node.id}' ({capsule.id}) is missing required prop '{spec.name}'",
                            screen_id=screen_id,
                            node_id=node.id,
                            capsule_id=capsule.id,
                            prop=spec.name,
                        )
                    )
                outcome.props.append(CoercedProp(spec, copy.deepcopy(spec.default)))
                continue

            try:
                coerced = coerce_value(spec, value)
            except PropCoercionError as e:
                raise GenerationFailure(
                    fatal(
                        DiagnosticCode.PROP_TYPE_MISMATCH,
                        f"Node '{node.id}' ({capsule.id}) prop '{spec.name}': {e}",
                        screen_id=screen_id,
                        node_id=node.id,
                        capsule_id=capsule.id,
                        prop=spec.name,
                    )
                ) from e
            outcome.props.append(CoercedProp(spec, coerced))

        declared = {spec.name for spec in capsule.props}
        for key in sorted(k for k in raw if k not in declared):
            logger.debug("Dropping unknown prop %s on node %s", key, node.id)
            outcome.warnings.append(
                warning(
                    DiagnosticCode.UNKNOWN_PROP,
                    f"Node '{node.id}' ({capsule.id}) sets undeclared prop '{key}'; it was dropped",
                    screen_id=screen_id,
                    node_id=node.id,
                    capsule_id=capsule.id,
                    prop=key,
                )
            )

        return outcome
