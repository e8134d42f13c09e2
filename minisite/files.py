"""Source and output files for minisite.

A SourceFile is the unit passed through the pipeline: it is read from disk
(or synthesised by an injector), annotated with the Resource built from it,
and finally carries the output path and rendered contents.

Key items:
- SourceFile: Mutable file record with base, path and contents.
- normalize_injected: Turns an injector's return value into SourceFiles.
- iter_source_files: Filesystem walker used by the command line.
- write_outputs: Writes rendered files below an output directory.
- ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .errors import InvalidInjectionError

if TYPE_CHECKING:
    from .resource import Resource


@dataclass(eq=False)
class SourceFile:
    """A file flowing through the pipeline.

    Attributes:
        base: Directory the file is relative to.
        path: Absolute location; rewritten to the output filepath by the builder.
        contents: Raw bytes; replaced by rendered output for documents.
        resource: The Resource built from this file, once the builder ran.
        source_relative: Path relative to ``base`` at construction time.
            Routing is derived from it, never from ``path``.
    """

    base: Path
    path: Path
    contents: bytes = b""
    resource: Resource | None = None
    source_relative: str = field(init=False, default="")

    def __post_init__(self):
        self.source_relative = self.relative

    @classmethod
    def from_relative(
        cls, base: Path | str, relative: str, contents: bytes | str = b""
    ) -> SourceFile:
        """Create a file from a base directory and a relative path.

        Args:
            base: Base directory.
            relative: Path relative to ``base``, ``/`` separated.
            contents: Bytes, or text that is encoded as UTF-8.

        Returns:
            A new SourceFile.
        """
        base = Path(base)
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        return cls(base=base, path=base / relative, contents=contents)

    @property
    def relative(self) -> str:
        """Current path relative to ``base``, ``/`` separated."""
        return self.path.relative_to(self.base).as_posix()

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"<SourceFile {self.relative}>"


def _from_mapping(value: Mapping[str, Any], base: Path) -> SourceFile:
    path = value.get("path")
    contents = value.get("contents", b"")
    if not isinstance(path, (str, Path)) or not isinstance(contents, (str, bytes)):
        raise InvalidInjectionError(value)
    file_base = Path(value.get("base") or base)
    path = Path(path)
    if ".." in path.parts:
        raise InvalidInjectionError(value)
    if path.is_absolute():
        if not path.is_relative_to(file_base):
            raise InvalidInjectionError(value)
        if isinstance(contents, str):
            contents = contents.encode("utf-8")
        return SourceFile(base=file_base, path=path, contents=contents)
    return SourceFile.from_relative(file_base, path.as_posix(), contents)


def normalize_injected(value: Any, base: Path) -> list[SourceFile]:
    """Normalise an injector's return value into a list of SourceFiles.

    Accepted values are a SourceFile, a mapping with ``path`` and
    ``contents`` (and optionally ``base``), or a list or tuple of those.
    Mapping paths must stay below their base.

    Args:
        value: The value returned (or resolved) by the injector.
        base: Base directory for mappings that do not name one.

    Returns:
        List of SourceFiles in the order they were returned.

    Raises:
        InvalidInjectionError: If any item cannot be turned into a file.
    """
    items = list(value) if isinstance(value, (list, tuple)) else [value]
    files: list[SourceFile] = []
    for item in items:
        if isinstance(item, SourceFile):
            files.append(item)
        elif isinstance(item, Mapping):
            files.append(_from_mapping(item, base))
        else:
            raise InvalidInjectionError(item)
    return files


def iter_source_files(source_dir: Path) -> list[SourceFile]:
    """Read every file below a directory.

    Args:
        source_dir: Directory to walk.

    Returns:
        SourceFiles sorted by relative path.
    """
    files: list[SourceFile] = []
    for path in sorted(source_dir.rglob("*")):
        if path.is_dir():
            continue
        files.append(
            SourceFile(base=source_dir, path=path, contents=path.read_bytes())
        )
    return files


def write_outputs(files: Iterable[SourceFile], output_dir: Path) -> list[Path]:
    """Write output files below a directory, keeping their relative layout.

    Args:
        files: Files produced by the pipeline.
        output_dir: Target directory.

    Returns:
        Paths that were written.
    """
    written: list[Path] = []
    for file in files:
        target = output_dir / file.relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(file.contents)
        written.append(target)
    return written


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path))
    path.mkdir(parents=True, exist_ok=True)
