"""
Path-unique file accumulator.

Every emitter writes into its own FileSet; a second file at the same path
is a PATH_COLLISION fatal rather than a silent overwrite.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterator

from capsulegen.core.errors import GenerationFailure
from capsulegen.core.ir import DiagnosticCode, GeneratedFile, GenerationStats, fatal

LANGUAGES = {
    ".tsx": "typescript",
    ".ts": "typescript",
    ".js": "javascript",
    ".json": "json",
    ".html": "html",
    ".css": "css",
    ".swift": "swift",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".xml": "xml",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".plist": "xml",
    ".toml": "toml",
    ".rs": "rust",
    ".md": "markdown",
}


def normalize_path(path: str) -> str:
    """
    Normalize a relative POSIX path.

    Raises:
        ValueError: If the path is absolute or escapes the output root
    """
    if not path or path.startswith("/") or "\\" in path:
        raise ValueError(f"invalid output path {path!r}")
    normalized = posixpath.normpath(path)
    if normalized == "." or normalized.startswith(".."):
        raise ValueError(f"output path {path!r} escapes the output root")
    return normalized


def language_for(path: str) -> str | None:
    """Language hint from a file extension."""
    _, ext = posixpath.splitext(path)
    return LANGUAGES.get(ext)


class FileSet:
    """Ordered, path-unique collection of generated files."""

    def __init__(self) -> None:
        self._files: dict[str, GeneratedFile] = {}

    def add(self, path: str, content: str, language: str | None = None) -> GeneratedFile:
        """
        Add a file.

        Raises:
            GenerationFailure: PATH_COLLISION if ``path`` was already emitted
        """
        normalized = normalize_path(path)
        if normalized in self._files:
            raise GenerationFailure(
                fatal(
                    DiagnosticCode.PATH_COLLISION,
                    f"Two generated files share the path '{normalized}'",
                )
            )
        if content and not content.endswith("\n"):
            content += "\n"
        generated = GeneratedFile(
            path=normalized,
            content=content,
            language=language or language_for(normalized),
        )
        self._files[normalized] = generated
        return generated

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[GeneratedFile]:
        return iter(self._files.values())

    def files(self) -> list[GeneratedFile]:
        """Files in emission order."""
        return list(self._files.values())

    def stats(self, capsule_count: int = 0, screen_count: int = 0) -> GenerationStats:
        return GenerationStats(
            file_count=len(self._files),
            total_size=sum(len(f.content.encode("utf-8")) for f in self._files.values()),
            capsule_count=capsule_count,
            screen_count=screen_count,
        )
