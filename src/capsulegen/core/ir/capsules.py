"""
Capsule catalog types for capsulegen IR.

A capsule is one reusable UI component: an ordered prop schema plus one
opaque source implementation per target ecosystem.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Target(StrEnum):
    """Output ecosystems the engine can emit."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"
    DESKTOP = "desktop"


class PropType(StrEnum):
    """Declared type of a capsule prop."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    ARRAY = "array"
    FUNCTION = "function"


class PropSpec(BaseModel):
    """
    One entry of a capsule's prop schema.

    Attributes:
        name: Prop name, used verbatim as argument label/attribute in every target
        type: Declared prop type
        required: Whether an instance must supply a value
        default: Value substituted when an optional prop is absent
        options: Allowed values for ``select`` props
        description: Human-readable description
    """

    name: str
    type: PropType
    required: bool = False
    default: Any = None
    options: list[str] = Field(default_factory=list)
    description: str = ""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @field_validator("name")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"prop name {value!r} is not a valid identifier")
        return value

    @model_validator(mode="after")
    def _check_select_options(self) -> PropSpec:
        if self.type == PropType.SELECT and not self.options:
            raise ValueError(f"select prop {self.name!r} must declare options")
        return self


class PlatformImpl(BaseModel):
    """
    A capsule's implementation for one target.

    ``source_code`` is an opaque text asset: the engine copies it into the
    component-library file and never parses it.
    """

    source_code: str
    dependencies: list[str] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)
    min_version: str | None = None

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @field_validator("dependencies", "imports")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        return list(dict.fromkeys(v.strip() for v in values if v.strip()))

    @field_validator("min_version", mode="before")
    @classmethod
    def _stringify_version(cls, value: Any) -> Any:
        # YAML reads `minVersion: 24` as an int
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value


class CapsuleDefinition(BaseModel):
    """
    A catalogued capsule.

    Immutable once loaded; owned by the CapsuleRegistry.
    """

    id: str
    name: str
    category: str = "ui"
    description: str = ""
    version: str = "1.0.0"
    tags: list[str] = Field(default_factory=list)
    props: list[PropSpec] = Field(default_factory=list)
    platforms: dict[Target, PlatformImpl] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @model_validator(mode="after")
    def _check_unique_props(self) -> CapsuleDefinition:
        seen: set[str] = set()
        for prop in self.props:
            if prop.name in seen:
                raise ValueError(f"capsule {self.id!r} declares prop {prop.name!r} twice")
            seen.add(prop.name)
        return self

    def supports(self, target: Target) -> bool:
        """Whether the capsule has an implementation for ``target``."""
        return target in self.platforms

    def prop(self, name: str) -> PropSpec | None:
        """Get a prop spec by name."""
        for prop in self.props:
            if prop.name == name:
                return prop
        return None

    @property
    def supported_targets(self) -> list[Target]:
        """Targets with an implementation, in canonical target order."""
        return [t for t in Target if t in self.platforms]
