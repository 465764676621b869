"""Tests for the Prop Coercer."""

from __future__ import annotations

import math

import pytest

from capsulegen.core.coercion import PropCoercer, PropCoercionError, coerce_value, format_number
from capsulegen.core.errors import GenerationFailure
from capsulegen.core.ir import DiagnosticCode, PropSpec, PropType, ScreenNode, Severity
from capsulegen.core.registry import CapsuleRegistry


def _spec(prop_type: PropType, **kwargs) -> PropSpec:
    return PropSpec(name="value", type=prop_type, **kwargs)


# =============================================================================
# Single values
# =============================================================================


class TestCoerceValue:
    """Tests for coerce_value."""

    def test_string_passthrough_and_number_to_string(self) -> None:
        spec = _spec(PropType.STRING)
        assert coerce_value(spec, "hello") == "hello"
        assert coerce_value(spec, 3) == "3"
        assert coerce_value(spec, 2.5) == "2.5"

    def test_string_rejects_bool_and_list(self) -> None:
        spec = _spec(PropType.STRING)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, True)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, ["a"])

    def test_number_parses_numeric_strings(self) -> None:
        spec = _spec(PropType.NUMBER)
        assert coerce_value(spec, "42") == 42
        assert isinstance(coerce_value(spec, "42"), int)
        assert coerce_value(spec, " 1.5 ") == 1.5
        assert coerce_value(spec, "1e3") == 1000.0

    def test_number_rejects_ambiguous_values(self) -> None:
        spec = _spec(PropType.NUMBER)
        for bad in ("12px", "", True, [1]):
            with pytest.raises(PropCoercionError):
                coerce_value(spec, bad)

    def test_number_rejects_non_finite(self) -> None:
        spec = _spec(PropType.NUMBER)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, math.inf)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, "nan")

    def test_boolean(self) -> None:
        spec = _spec(PropType.BOOLEAN)
        assert coerce_value(spec, True) is True
        assert coerce_value(spec, "False") is False
        with pytest.raises(PropCoercionError):
            coerce_value(spec, 1)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, "yes")

    def test_select(self) -> None:
        spec = _spec(PropType.SELECT, options=["sm", "md", "1"])
        assert coerce_value(spec, "md") == "md"
        assert coerce_value(spec, 1) == "1"
        with pytest.raises(PropCoercionError, match="expected one of"):
            coerce_value(spec, "xl")

    def test_array_recurses(self) -> None:
        spec = _spec(PropType.ARRAY)
        assert coerce_value(spec, ["a", 1, [True, 2.5]]) == ["a", 1, [True, 2.5]]
        assert coerce_value(spec, ("x",)) == ["x"]

    def test_array_rejects_objects(self) -> None:
        """Objects are not PropValues."""
        spec = _spec(PropType.ARRAY)
        with pytest.raises(PropCoercionError):
            coerce_value(spec, [{"label": "Home"}])
        with pytest.raises(PropCoercionError):
            coerce_value(spec, {"a": 1})

    def test_array_nesting_is_bounded(self) -> None:
        spec = _spec(PropType.ARRAY)
        value: list = []
        for _ in range(40):
            value = [value]
        with pytest.raises(PropCoercionError, match="nested deeper"):
            coerce_value(spec, value)

    def test_function_takes_handler_name(self) -> None:
        spec = _spec(PropType.FUNCTION)
        assert coerce_value(spec, " navigate ") == "navigate"
        with pytest.raises(PropCoercionError):
            coerce_value(spec, "")

    def test_unpaired_surrogates_rejected(self) -> None:
        assert coerce_value(_spec(PropType.STRING), "Go \U0001F680") == "Go \U0001F680"
        for spec, value in [
            (_spec(PropType.STRING), "Go\ud800"),
            (_spec(PropType.FUNCTION), "on\udc00Tap"),
            (_spec(PropType.ARRAY), ["ok", ["\udfff"]]),
        ]:
            with pytest.raises(PropCoercionError, match="unpaired surrogate"):
                coerce_value(spec, value)

    def test_format_number(self) -> None:
        assert format_number(3) == "3"
        assert format_number(0.1) == "0.1"
        assert format_number(2.0) == "2.0"


# =============================================================================
# Whole nodes
# =============================================================================


class TestPropCoercer:
    """Tests for PropCoercer.coerce."""

    def test_schema_order_and_defaults(self, fake_registry: CapsuleRegistry) -> None:
        """Props come out in schema order with defaults applied."""
        capsule = fake_registry.lookup("label")
        node = ScreenNode(id="n1", capsule_id="label", props={"tone": "muted", "text": "Hi"})

        outcome = PropCoercer().coerce(capsule, node)

        assert [p.name for p in outcome.props] == ["text", "size", "bold", "tone"]
        assert outcome.as_dict() == {"text": "Hi", "size": 14, "bold": False, "tone": "muted"}
        assert outcome.warnings == []

    def test_missing_required_prop_is_fatal(self, fake_registry: CapsuleRegistry) -> None:
        capsule = fake_registry.lookup("label")
        node = ScreenNode(id="n1", capsule_id="label", props={"size": 10})

        with pytest.raises(GenerationFailure) as exc_info:
            PropCoercer().coerce(capsule, node, screen_id="home")

        diagnostic = exc_info.value.diagnostic
        assert diagnostic.code == DiagnosticCode.MISSING_REQUIRED_PROP
        assert diagnostic.severity == Severity.FATAL
        assert diagnostic.node_id == "n1"
        assert diagnostic.screen_id == "home"
        assert diagnostic.prop == "text"

    def test_null_counts_as_absent(self, fake_registry: CapsuleRegistry) -> None:
        capsule = fake_registry.lookup("label")

        outcome = PropCoercer().coerce(
            capsule, ScreenNode(id="n1", capsule_id="label", props={"text": "x", "size": None})
        )
        assert outcome.as_dict()["size"] == 14

        with pytest.raises(GenerationFailure):
            PropCoercer().coerce(capsule, ScreenNode(id="n2", capsule_id="label", props={"text": None}))

    def test_type_mismatch_names_prop_and_node(self, fake_registry: CapsuleRegistry) -> None:
        capsule = fake_registry.lookup("label")
        node = ScreenNode(id="n7", capsule_id="label", props={"text": "x", "bold": "maybe"})

        with pytest.raises(GenerationFailure) as exc_info:
            PropCoercer().coerce(capsule, node)

        diagnostic = exc_info.value.diagnostic
        assert diagnostic.code == DiagnosticCode.PROP_TYPE_MISMATCH
        assert diagnostic.prop == "bold"
        assert diagnostic.node_id == "n7"
        assert "n7" in diagnostic.message

    def test_unknown_props_dropped_with_sorted_warnings(self, fake_registry: CapsuleRegistry) -> None:
        capsule = fake_registry.lookup("label")
        node = ScreenNode(id="n1", capsule_id="label", props={"text": "x", "zeta": 1, "alpha": 2})

        outcome = PropCoercer().coerce(capsule, node)

        assert "zeta" not in outcome.as_dict()
        assert [w.prop for w in outcome.warnings] == ["alpha", "zeta"]
        assert all(w.code == DiagnosticCode.UNKNOWN_PROP for w in outcome.warnings)
        assert all(w.severity == Severity.WARNING for w in outcome.warnings)

    def test_optional_without_default_is_unset(self, fake_registry: CapsuleRegistry) -> None:
        capsule = fake_registry.lookup("box")
        outcome = PropCoercer().coerce(capsule, ScreenNode(id="b", capsule_id="box"))

        assert len(outcome.props) == 1
        assert outcome.props[0].is_set is False

    def test_defaults_are_copied(self, fake_registry: CapsuleRegistry) -> None:
        """Mutable defaults are never shared between nodes."""
        spec = PropSpec(name="items", type=PropType.ARRAY, default=["a"])
        capsule = fake_registry.lookup("box").model_copy(update={"props": [spec]})

        first = PropCoercer().coerce(capsule, ScreenNode(id="a", capsule_id=capsule.id))
        first.props[0].value.append("b")
        second = PropCoercer().coerce(capsule, ScreenNode(id="b", capsule_id=capsule.id))

        assert second.props[0].value == ["a"]
