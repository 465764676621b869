"""Tests for the Capsule Registry and catalog asset loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from capsulegen.core.errors import CatalogError
from capsulegen.core.ir import CapsuleDefinition, PlatformImpl, Target
from capsulegen.core.registry import CapsuleRegistry, load_capsule_file, load_catalog_dir

SIMPLE_CAPSULE = """\
id: {id}
name: {name}
category: {category}
tags: [demo]
props:
  - name: count
    type: number
    default: "{default}"
platforms:
  web:
    dependencies: [react, " react ", ""]
    sourceCode: |
      export function {name}() {{ return null }}
  android:
    minVersion: 24
    sourceCode: "fun {name}() {{}}"
"""


def write_capsule(
    directory: Path,
    capsule_id: str,
    name: str = "Widget",
    category: str = "ui",
    default: str = "3",
    filename: str | None = None,
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / (filename or f"{capsule_id}.yaml")
    path.write_text(
        SIMPLE_CAPSULE.format(id=capsule_id, name=name, category=category, default=default),
        encoding="utf-8",
    )
    return path


# =============================================================================
# Asset loading
# =============================================================================


class TestLoadCapsuleFile:
    """Tests for load_capsule_file."""

    def test_loads_and_normalizes(self, tmp_path: Path) -> None:
        """Defaults are coerced, versions stringified and lists de-duplicated."""
        capsule = load_capsule_file(write_capsule(tmp_path, "widget"))

        assert capsule.id == "widget"
        assert capsule.prop("count").default == 3
        assert capsule.platforms[Target.ANDROID].min_version == "24"
        assert capsule.platforms[Target.WEB].dependencies == ["react"]
        assert capsule.supported_targets == [Target.WEB, Target.ANDROID]

    def test_invalid_default_rejected(self, tmp_path: Path) -> None:
        path = write_capsule(tmp_path, "widget", default="lots")

        with pytest.raises(CatalogError, match="invalid default"):
            load_capsule_file(path)

    def test_invalid_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("id: [unclosed\n", encoding="utf-8")

        with pytest.raises(CatalogError, match="Invalid YAML"):
            load_capsule_file(path)

    def test_schema_violation_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            "id: bad\nname: Bad\nprops:\n  - name: tone\n    type: select\n",
            encoding="utf-8",
        )

        with pytest.raises(CatalogError, match="Invalid capsule schema"):
            load_capsule_file(path)

    def test_empty_file_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(CatalogError, match="Empty"):
            load_capsule_file(path)


class TestLoadCatalogDir:
    """Tests for load_catalog_dir."""

    def test_skips_non_yaml_files(self, tmp_path: Path) -> None:
        write_capsule(tmp_path, "a")
        write_capsule(tmp_path, "b", filename="b.yml")
        (tmp_path / "README.md").write_text("# catalog\n", encoding="utf-8")

        assert [c.id for c in load_catalog_dir(tmp_path)] == ["a", "b"]

    def test_duplicate_ids_in_one_directory(self, tmp_path: Path) -> None:
        write_capsule(tmp_path, "a", filename="first.yaml")
        write_capsule(tmp_path, "a", filename="second.yaml")

        with pytest.raises(CatalogError, match="Duplicate capsule id 'a'"):
            load_catalog_dir(tmp_path)

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="not found"):
            load_catalog_dir(tmp_path / "nope")


# =============================================================================
# Registry queries
# =============================================================================


class TestCapsuleRegistry:
    """Tests for CapsuleRegistry."""

    def test_lookup_unknown_returns_none(self, fake_registry: CapsuleRegistry) -> None:
        assert fake_registry.lookup("box").name == "Box"
        assert fake_registry.lookup("nope") is None

    def test_implementation_for(self, fake_registry: CapsuleRegistry) -> None:
        """Unsupported target gives None, unknown capsule raises KeyError."""
        assert fake_registry.implementation_for("scanner", Target.IOS).min_version == "16.0"
        assert fake_registry.implementation_for("scanner", Target.WEB) is None
        with pytest.raises(KeyError):
            fake_registry.implementation_for("nope", Target.WEB)

    def test_supports(self, fake_registry: CapsuleRegistry) -> None:
        assert fake_registry.supports("scanner", Target.ANDROID)
        assert not fake_registry.supports("scanner", Target.DESKTOP)
        assert not fake_registry.supports("nope", Target.WEB)

    def test_duplicate_definitions_rejected(self) -> None:
        capsule = CapsuleDefinition(id="x", name="X")
        with pytest.raises(CatalogError):
            CapsuleRegistry.from_definitions([capsule, capsule])

    def test_list_is_sorted_and_filtered(self, fake_registry: CapsuleRegistry) -> None:
        assert [c.id for c in fake_registry.list()] == ["box", "clicker", "gallery", "label", "scanner"]
        assert [c.id for c in fake_registry.list(category="ui")] == ["clicker", "label"]
        assert "scanner" not in [c.id for c in fake_registry.list(target=Target.WEB)]
        assert [c.id for c in fake_registry.list(tag="camera")] == ["scanner"]

    def test_search(self, fake_registry: CapsuleRegistry) -> None:
        assert [c.id for c in fake_registry.search("qr")] == ["scanner"]
        assert [c.id for c in fake_registry.search("CAMERA")] == ["scanner"]
        assert [c.id for c in fake_registry.search("photo")] == ["gallery"]
        assert len(fake_registry.search("  ")) == len(fake_registry)

    def test_categories_and_membership(self, fake_registry: CapsuleRegistry) -> None:
        assert fake_registry.categories() == ["device", "layout", "media", "ui"]
        assert "label" in fake_registry
        assert "nope" not in fake_registry
        assert len(fake_registry) == 5

    def test_overlay_replaces_by_id(self, fake_registry: CapsuleRegistry) -> None:
        replacement = CapsuleDefinition(
            id="box",
            name="Fancy Box",
            platforms={Target.WEB: PlatformImpl(source_code="export function FancyBox() {}")},
        )

        overlaid = fake_registry.with_overlay([replacement])

        assert overlaid.lookup("box").name == "Fancy Box"
        assert fake_registry.lookup("box").name == "Box"
        assert len(overlaid) == len(fake_registry)

    def test_layered_directories(self, tmp_path: Path) -> None:
        """Later directories replace earlier capsules with the same id."""
        base = tmp_path / "base"
        extra = tmp_path / "extra"
        write_capsule(base, "a", name="Alpha")
        write_capsule(base, "b", name="Beta")
        write_capsule(extra, "a", name="Override")

        registry = CapsuleRegistry.from_directories(base, extra)

        assert registry.ids() == ["a", "b"]
        assert registry.lookup("a").name == "Override"
