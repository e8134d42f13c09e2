"""Resource model for minisite.

A Resource is the in-memory model of one source file: its parsed name, its
routing (path, filepath, ids), its data and body, and relationship slots
that the graph builder fills in afterwards.

Key items:
- Resource: Dataclass with a fixed reserved schema plus open attributes.
- RouteResolver: Derives dirnames, paths and ids from a ParsedName.
- ResourceBuilder: Builds Resources from SourceFiles.
- build_resource: Default resource factory.

Attributes from a document's data are not injected as fields. They live in
``Resource.attributes`` and are reachable through ``get``, item access and
attribute access, all of which check the reserved fields first.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .extractors import extract_document, has_frontmatter
from .parse import HIDDEN_MARKER, ParsedName, parse_name

if TYPE_CHECKING:
    from .config import Options
    from .files import SourceFile

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "index.html"


@dataclass(eq=False)
class Resource:
    """Model of one source file.

    Attributes:
        src_relative: Original relative source path, for diagnostics.
        document: Whether the file is a page/data document or a plain asset.
        locale: Resolved locale; the default locale or "" when untagged.
        index: Whether this is a document named ``index``.
        slug: Name used for routing.
        order: Order tag, compared as a string.
        draft: Whether the file or one of its directories is a draft.
        hidden: Whether the filename carries the hidden marker.
        extension: Source extension without the dot.
        dirnames: Output directory segments (locale prefix included).
        path: Site-relative URL path.
        filepath: Output file location.
        resource_id: Identity shared by translations of the same document.
        collection_id: Id of the collection the resource belongs to.
        data: Parsed attributes, None for assets.
        body: Text after the front matter, None for assets.
        attributes: Data keys promoted for template access.
        file: The SourceFile this resource was built from.
        locales: Translations of this resource keyed by locale.
        collection: Documents whose collection id equals this resource id.
        prev: Previous sibling in the ordered collection.
        next: Next sibling in the ordered collection.
    """

    src_relative: str
    document: bool
    locale: str
    index: bool
    slug: str
    order: str | None
    draft: bool
    hidden: bool
    extension: str
    dirnames: list[str]
    path: str
    filepath: Path
    resource_id: str
    collection_id: str
    data: Any = field(default=None, repr=False)
    body: str | None = field(default=None, repr=False)
    attributes: dict[str, Any] = field(default_factory=dict, repr=False)
    file: SourceFile | None = field(default=None, repr=False)
    locales: dict[str, Resource] = field(default_factory=dict, repr=False)
    collection: list[Resource] | None = field(default=None, repr=False)
    prev: Resource | None = field(default=None, repr=False)
    next: Resource | None = field(default=None, repr=False)

    @classmethod
    def reserved_names(cls) -> frozenset[str]:
        """Names that data attributes may not shadow."""
        return _reserved_names(cls)

    @classmethod
    def from_file(cls, file: SourceFile, options: Options) -> Resource:
        """Build a Resource with the default strategy."""
        return ResourceBuilder(options).build(file)

    def promote(self, data: Any) -> None:
        """Copy mapping keys from ``data`` into ``attributes``.

        Keys that collide with a reserved name are skipped and logged.

        Args:
            data: Parsed document data.
        """
        if not isinstance(data, Mapping):
            return
        reserved = self.reserved_names()
        for key, value in data.items():
            if key in reserved:
                logger.warning(
                    "%s: A property named %r is not assigned to page object "
                    "because the name is already reserved.",
                    self.src_relative,
                    key,
                )
                continue
            self.attributes[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a reserved field, then a promoted attribute."""
        if key in self.reserved_names():
            return getattr(self, key)
        return self.attributes.get(key, default)

    def __getitem__(self, key: str) -> Any:
        if key in self.reserved_names():
            return getattr(self, key)
        return self.attributes[key]

    def __contains__(self, key: str) -> bool:
        return key in self.reserved_names() or key in self.attributes

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, so reserved fields win.
        attributes = self.__dict__.get("attributes")
        if attributes is not None and name in attributes:
            return attributes[name]
        raise AttributeError(name)

    def __repr__(self) -> str:
        return f"<Resource {self.src_relative}>"


@functools.lru_cache(maxsize=None)
def _reserved_names(cls: type) -> frozenset[str]:
    names = {f.name for f in fields(cls)}
    names.update(name for name in dir(cls) if not name.startswith("__"))
    return frozenset(names)


class RouteResolver:
    """Derives routing fields from a parsed name.

    Attributes:
        default_locale: Locale whose paths carry no prefix.
    """

    def __init__(self, default_locale: str | None = None):
        self.default_locale = default_locale

    def output_name(self, name: ParsedName) -> str:
        """Filename of an asset in the output tree.

        Assets keep their hidden marker so files such as ``.htaccess``
        survive; order tags, locale tags and draft markers are dropped.
        """
        stem = f"{HIDDEN_MARKER}{name.slug}" if name.hidden else name.slug
        return f"{stem}.{name.extension}" if name.extension else stem

    def dirnames(self, name: ParsedName, locale: str, document: bool, index: bool) -> list[str]:
        dirnames: list[str] = []
        if locale and locale != self.default_locale:
            dirnames.append(locale)
        dirnames.extend(name.dirnames)
        if document and not index:
            dirnames.append(name.slug)
        return dirnames

    def path(self, name: ParsedName, dirnames: list[str], document: bool) -> str:
        """Derive the site-relative URL path.

        Examples:
            ``index.yml`` -> ``/``, ``foo/bar.yml`` -> ``/foo/bar/``,
            ``ja/logo.png`` -> ``/ja/logo.png``
        """
        if document:
            joined = "/".join(dirnames)
            return f"/{joined}/" if joined else "/"
        return "/" + "/".join(dirnames + [self.output_name(name)])

    def filepath(self, base: Path, name: ParsedName, dirnames: list[str], document: bool) -> Path:
        if document:
            return base.joinpath(*dirnames, OUTPUT_FILENAME)
        return base.joinpath(*dirnames, self.output_name(name))

    def resource_id(self, name: ParsedName, document: bool, index: bool) -> str:
        if document and index:
            parts = name.raw_dirnames
        elif document:
            parts = name.raw_dirnames + [name.slug]
        else:
            parts = name.raw_dirnames + [self.output_name(name)]
        return "/".join(parts)


class ResourceBuilder:
    """Builds Resource objects from source files.

    Attributes:
        options: Build options.
        routes: Route resolver for the configured default locale.
    """

    def __init__(self, options: Options):
        self.options = options
        self.routes = RouteResolver(options.default_locale)

    def is_document(self, name: ParsedName, contents: bytes) -> bool:
        """Decide whether a file is a document.

        A file is a document when its extension is a configured document
        type or, failing that, when it starts with front matter.
        """
        types = self.options.document_types
        if types and name.extension in types:
            return True
        return has_frontmatter(contents)

    def build(self, file: SourceFile) -> Resource:
        """Build a Resource from a source file.

        Args:
            file: Source file to model.

        Returns:
            Resource with empty relationship slots.

        Raises:
            ParseError: If the filename is malformed.
            DataFormatError: If a document's data cannot be parsed.
        """
        relative = file.source_relative
        name = parse_name(relative, self.options.locales)
        locale = name.locale or self.options.default_locale or ""
        document = self.is_document(name, file.contents)
        index = document and name.index
        dirnames = self.routes.dirnames(name, locale, document, index)

        if document:
            data, body = extract_document(file.contents, relative, name.extension)
        else:
            data, body = None, None

        resource = Resource(
            src_relative=relative,
            document=document,
            locale=locale,
            index=index,
            slug=name.slug,
            order=name.order,
            draft=name.draft,
            hidden=name.hidden,
            extension=name.extension,
            dirnames=dirnames,
            path=self.routes.path(name, dirnames, document),
            filepath=self.routes.filepath(file.base, name, dirnames, document),
            resource_id=self.routes.resource_id(name, document, index),
            collection_id="/".join(name.raw_dirnames),
            data=data,
            body=body,
            file=file,
            collection=[] if document else None,
        )
        resource.promote(data)
        return resource


def build_resource(file: SourceFile, options: Options) -> Resource:
    """Default resource factory.

    Args:
        file: Source file to model.
        options: Build options.

    Returns:
        The Resource for ``file``.
    """
    return ResourceBuilder(options).build(file)
