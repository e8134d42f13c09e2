"""Build state for minisite.

BuildState holds everything the graph builder accumulates across passes.
Injectors and templates read it; only the builder writes to it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .config import Options
    from .resource import Resource


@dataclass
class LocaleState:
    """Pages, collections and references for one locale.

    Attributes:
        locale: Locale key ("" for untagged content without a default locale).
        site: Site data visible to this locale.
        pages: Documents in registration order.
        collections: Collection id to ordered documents.
        references: Resource id to document.
    """

    locale: str
    site: Any = None
    pages: list[Resource] = field(default_factory=list)
    collections: dict[str, list[Resource]] = field(default_factory=dict)
    references: dict[str, Resource] = field(default_factory=dict)

    def collection(self, collection_id: str) -> list[Resource]:
        """Return the collection list for an id, creating it when missing."""
        return self.collections.setdefault(collection_id, [])


def is_multilocale_site(site: Any, locales: list[str] | None) -> bool:
    """Check whether ``site`` holds one entry per configured locale.

    Args:
        site: The ``site`` option.
        locales: Configured locales.

    Returns:
        True if the non-empty keys of ``site`` are exactly ``locales``.
    """
    if not locales or not isinstance(site, Mapping):
        return False
    keys = sorted(key for key in site if key)
    return keys == sorted(locales)


class BuildState(Mapping[str, LocaleState]):
    """Locale-keyed build state plus cross-pass bookkeeping.

    Attributes:
        resource_group: Resource id to translations keyed by locale. The
            inner dicts are shared with ``Resource.locales``.
        filepaths: Output filepath to the resource that claimed it.
    """

    def __init__(self, locales: Mapping[str, LocaleState]):
        self._locales = dict(locales)
        self.resource_group: dict[str, dict[str, Resource]] = {}
        self.filepaths: dict[Path, Resource] = {}

    @classmethod
    def for_options(cls, options: Options) -> BuildState:
        """Create an empty state partitioned by the configured locales."""
        multilocale = is_multilocale_site(options.site, options.locales)
        locales: dict[str, LocaleState] = {}
        for key in options.locale_keys:
            site = options.site.get(key) if multilocale else options.site
            locales[key] = LocaleState(locale=key, site=site)
        return cls(locales)

    def __getitem__(self, locale: str) -> LocaleState:
        return self._locales[locale]

    def __iter__(self) -> Iterator[str]:
        return iter(self._locales)

    def __len__(self) -> int:
        return len(self._locales)

    def locale(self, locale: str) -> LocaleState:
        """Return the state for a locale, creating it when missing."""
        if locale not in self._locales:
            self._locales[locale] = LocaleState(locale=locale)
        return self._locales[locale]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"BuildState({list(self._locales)})"
