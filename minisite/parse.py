"""Filename parsing for minisite.

Source filenames carry routing metadata. A name such as
``news/_drafts/.#002.hello.ja.yml`` is read as:

    news/_drafts/   directories, ``_`` marks the whole subtree as a draft
    .               hidden marker, kept for lookups but never rendered
    #002.           order tag, compared as a string
    hello           slug
    .ja             locale tag, only when ``ja`` is a configured locale
    .yml            extension

Key function:
- parse_name: Pure function mapping a relative path to a ParsedName.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from .errors import ParseError

DRAFT_MARKER = "_"
HIDDEN_MARKER = "."
INDEX_SLUG = "index"

NAME_RE = re.compile(
    r"^_?(?P<hidden>\.)?(?:#(?P<order>[^.]*)\.)?(?P<slug>.+?)(?:\.(?P<locale>[^.]+))?$"
)


@dataclass(frozen=True)
class ParsedName:
    """Structural metadata derived from a relative source path.

    Attributes:
        source: The relative path that was parsed.
        dirnames: Directory segments with the draft marker stripped.
        raw_dirnames: Directory segments exactly as they appear in the path.
        basename: Filename without its extension, markers included.
        extension: Final suffix without the dot, or an empty string.
        order: Order tag from a ``#<tag>.`` prefix, or None.
        slug: Stem without markers, order tag and recognised locale.
        locale: Recognised locale tag, or None.
        hidden: Whether the filename carries the hidden marker.
        draft: Whether the filename or any directory carries the draft marker.
    """

    source: str
    dirnames: list[str] = field(default_factory=list)
    raw_dirnames: list[str] = field(default_factory=list)
    basename: str = ""
    extension: str = ""
    order: str | None = None
    slug: str = ""
    locale: str | None = None
    hidden: bool = False
    draft: bool = False

    @property
    def index(self) -> bool:
        return self.slug == INDEX_SLUG


def strip_draft_marker(segment: str) -> str:
    """Remove a single leading draft marker from a path segment.

    Examples:
        >>> strip_draft_marker("_drafts")
        'drafts'
    """
    if segment.startswith(DRAFT_MARKER):
        return segment[len(DRAFT_MARKER) :]
    return segment


def parse_name(relative_path: str, locales: Iterable[str] | None = None) -> ParsedName:
    """Parse a relative source path into a ParsedName.

    Args:
        relative_path: Path relative to the source base, ``/`` separated.
        locales: Configured locale tags. A trailing ``.tag`` is only treated
            as a locale when it appears here.

    Returns:
        ParsedName for the path.

    Raises:
        ParseError: If the filename has no usable slug.

    Examples:
        >>> parse_name("items/#1.foo.ja.yml", ["ja"]).slug
        'foo'
        >>> parse_name("foo.bar.yml").slug
        'foo.bar'
    """
    rel = PurePosixPath(relative_path)
    raw_dirnames = [part for part in rel.parent.parts if part not in (".", "")]
    basename = rel.stem
    extension = rel.suffix[1:]

    if not basename.lstrip(DRAFT_MARKER + HIDDEN_MARKER):
        raise ParseError(relative_path, "malformed filename: missing slug")
    match = NAME_RE.match(basename)
    if match is None:  # pragma: no cover - the slug group accepts any text
        raise ParseError(relative_path, "malformed filename")

    order = match.group("order") or None
    slug = match.group("slug")
    tag = match.group("locale")
    if order is None and slug.startswith("#"):
        raise ParseError(relative_path, "malformed filename: unterminated order tag")

    known = list(locales or [])
    if tag is not None and tag in known:
        locale = tag
    else:
        locale = None
        if tag is not None:
            slug = f"{slug}.{tag}"

    draft = any(part.startswith(DRAFT_MARKER) for part in raw_dirnames + [basename])

    return ParsedName(
        source=rel.as_posix(),
        dirnames=[strip_draft_marker(part) for part in raw_dirnames],
        raw_dirnames=raw_dirnames,
        basename=basename,
        extension=extension,
        order=order,
        slug=slug,
        locale=locale,
        hidden=match.group("hidden") is not None,
        draft=draft,
    )
