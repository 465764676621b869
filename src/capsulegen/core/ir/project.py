"""
Project composition types for capsulegen IR.

These mirror the request contract produced by the editor: a project with a
theme, a set of targets and an ordered list of screens, each owning a tree
of capsule instances.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..strings import to_pascal_case
from .capsules import Target

_MODEL_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

_BUNDLE_ID = re.compile(r"^[A-Za-z][A-Za-z0-9-]*(\.[A-Za-z0-9-]+)+$")
_PACKAGE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)+$")
_VERSION = re.compile(r"^\d+(\.\d+)*$")

# Fallback palette used when a theme omits a colour
DEFAULT_COLORS: dict[str, str] = {
    "primary": "#6366F1",
    "secondary": "#8B5CF6",
    "accent": "#06B6D4",
    "background": "#FFFFFF",
    "surface": "#F8FAFC",
    "error": "#EF4444",
    "success": "#22C55E",
    "warning": "#F59E0B",
    "text.primary": "#0F172A",
    "text.secondary": "#64748B",
    "text.disabled": "#94A3B8",
}


class ScreenNode(BaseModel):
    """
    One capsule instance in a screen tree.

    ``props`` holds the raw values sent by the editor; the Prop Coercer is
    the only component that interprets them. ``children`` order is the
    visual/declaration order and is preserved through emission.
    """

    id: str
    capsule_id: str
    props: dict[str, Any] = Field(default_factory=dict)
    children: list[ScreenNode] = Field(default_factory=list)

    model_config = _MODEL_CONFIG


class Screen(BaseModel):
    """A named screen rooted at a single node."""

    id: str
    name: str
    root: ScreenNode

    model_config = _MODEL_CONFIG

    @property
    def type_name(self) -> str:
        """PascalCase identifier the screen's view/function is declared with."""
        return f"{to_pascal_case(self.id) or 'Main'}Screen"


class NavigationType(StrEnum):
    """How the app entry point arranges its screens."""

    STACK = "stack"
    TABS = "tabs"
    DRAWER = "drawer"


class NavigationSpec(BaseModel):
    """
    App-level navigation.

    ``initial_screen`` is a screen id; the first screen when omitted.
    """

    type: NavigationType = NavigationType.STACK
    initial_screen: str | None = None

    model_config = _MODEL_CONFIG


class ThemeSpec(BaseModel):
    """
    Global theme.

    Nested colour groups (``{"text": {"primary": ...}}``) are flattened to
    dotted keys (``text.primary``).
    """

    name: str = "Default"
    colors: dict[str, str] = Field(default_factory=dict)

    model_config = _MODEL_CONFIG

    @field_validator("colors", mode="before")
    @classmethod
    def _flatten(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        flat: dict[str, Any] = {}
        for key, color in value.items():
            if isinstance(color, dict):
                for sub_key, sub_color in color.items():
                    flat[f"{key}.{sub_key}"] = sub_color
            else:
                flat[key] = color
        return flat

    def color(self, key: str) -> str:
        """Get a colour, falling back to the default palette."""
        return self.colors.get(key) or DEFAULT_COLORS.get(key, "#000000")

    def palette(self) -> dict[str, str]:
        """Default palette overlaid with the theme's colours, in stable key order."""
        merged = dict(DEFAULT_COLORS)
        merged.update(self.colors)
        return merged


class IOSConfig(BaseModel):
    """iOS project settings."""

    bundle_id: str | None = None
    min_version: str | None = None

    model_config = _MODEL_CONFIG

    @field_validator("bundle_id")
    @classmethod
    def _check_bundle_id(cls, value: str | None) -> str | None:
        if value is not None and not _BUNDLE_ID.match(value):
            raise ValueError(f"invalid bundle id {value!r}")
        return value

    @field_validator("min_version", mode="before")
    @classmethod
    def _check_version(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            value = str(value)
        if value is not None and not _VERSION.match(str(value)):
            raise ValueError(f"invalid version {value!r}")
        return value


class AndroidConfig(BaseModel):
    """Android project settings."""

    package_name: str | None = None
    min_sdk: int | None = Field(default=None, ge=1)

    model_config = _MODEL_CONFIG

    @field_validator("package_name")
    @classmethod
    def _check_package(cls, value: str | None) -> str | None:
        if value is not None and not _PACKAGE.match(value):
            raise ValueError(f"invalid package name {value!r}")
        return value


class WindowConfig(BaseModel):
    """Desktop main window geometry."""

    width: int = Field(default=1200, ge=1)
    height: int = Field(default=800, ge=1)
    resizable: bool = True

    model_config = _MODEL_CONFIG


class DesktopConfig(BaseModel):
    """Desktop shell settings."""

    app_id: str | None = None
    window: WindowConfig = Field(default_factory=WindowConfig)

    model_config = _MODEL_CONFIG

    @field_validator("app_id")
    @classmethod
    def _check_app_id(cls, value: str | None) -> str | None:
        if value is not None and not _BUNDLE_ID.match(value):
            raise ValueError(f"invalid app id {value!r}")
        return value


class PlatformConfig(BaseModel):
    """Optional per-target project settings."""

    ios: IOSConfig = Field(default_factory=IOSConfig)
    android: AndroidConfig = Field(default_factory=AndroidConfig)
    desktop: DesktopConfig = Field(default_factory=DesktopConfig)

    model_config = _MODEL_CONFIG


class ProjectSpec(BaseModel):
    """
    Complete generation request.

    Attributes:
        name: Project name (drives package names, bundle ids, window titles)
        version: Project version written into manifests
        description: Optional description
        targets: Requested targets, de-duplicated in request order
        theme: Global theme
        screens: Ordered screens
        navigation: Entry-point navigation style and initial screen
        platform_config: Optional per-target settings
    """

    name: str = Field(min_length=1)
    version: str = "1.0.0"
    description: str = ""
    targets: list[Target]
    theme: ThemeSpec = Field(default_factory=ThemeSpec)
    screens: list[Screen]
    navigation: NavigationSpec = Field(default_factory=NavigationSpec)
    platform_config: PlatformConfig = Field(default_factory=PlatformConfig)

    model_config = _MODEL_CONFIG

    @field_validator("targets")
    @classmethod
    def _check_targets(cls, value: list[Target]) -> list[Target]:
        if not value:
            raise ValueError("at least one target is required")
        return list(dict.fromkeys(value))

    @field_validator("screens")
    @classmethod
    def _check_screen_names(cls, value: list[Screen]) -> list[Screen]:
        # Every target derives file and type names from the screen id
        seen: dict[str, str] = {}
        for screen in value:
            other = seen.get(screen.type_name)
            if other == screen.id:
                raise ValueError(f"duplicate screen id {screen.id!r}")
            if other is not None:
                raise ValueError(
                    f"screens {other!r} and {screen.id!r} both map to the identifier {screen.type_name}"
                )
            seen[screen.type_name] = screen.id
        return value

    @model_validator(mode="after")
    def _check_initial_screen(self) -> ProjectSpec:
        initial = self.navigation.initial_screen
        if initial is not None and initial not in {s.id for s in self.screens}:
            raise ValueError(f"navigation.initialScreen {initial!r} does not name a screen")
        return self

    def initial_screen_index(self) -> int:
        """Index of the screen the app opens on."""
        initial = self.navigation.initial_screen
        for index, screen in enumerate(self.screens):
            if screen.id == initial:
                return index
        return 0

    def navigation_mode(self) -> NavigationType:
        """Effective navigation; tabs and drawers need more than one screen."""
        if len(self.screens) < 2:
            return NavigationType.STACK
        return self.navigation.type
