"""Configuration for minisite.

Options is the in-memory configuration consumed by the pipeline. The
command line fills it from ``minisite.yaml``.

Key items:
- Options: Build options dataclass.
- load_config: Loads ``minisite.yaml`` over DEFAULT_CONFIG.
- options_from_config: Builds Options from a loaded configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError
from .protocols import Injector, RenderFunction, ResourceFactory, ResourceTransform

CONFIG_FILE = "minisite.yaml"

DEFAULT_DOCUMENT_TYPES = ["yml", "yaml", "json"]

DEFAULT_CONFIG: dict[str, Any] = {
    "source_dir": "site",
    "output_dir": "output",
    "template_dir": "template",
    "locales": None,
    "default_locale": None,
    "document_types": DEFAULT_DOCUMENT_TYPES,
    "site": None,
}


def _default_factory() -> ResourceFactory:
    from .resource import build_resource

    return build_resource


@dataclass
class Options:
    """Options for one build.

    Attributes:
        locales: Locale tags recognised in filenames.
        default_locale: Locale assigned to files without a locale tag. Its
            output paths carry no locale prefix.
        site: Site-wide data exposed to templates. When its non-empty keys
            are exactly ``locales``, each locale sees its own entry.
        document_types: Extensions treated as documents. None disables
            extension matching, leaving only front-matter sniffing.
        draft: Whether draft resources are kept.
        inject: Injector, list of injectors, or None.
        render: Render function for documents that declare a template.
        resource_factory: Strategy building a Resource from a file.
        resource_transforms: Steps applied to each Resource after the factory.
        base: Base directory for injected files that do not name one.
    """

    locales: list[str] | None = None
    default_locale: str | None = None
    site: Any = None
    document_types: list[str] | None = field(
        default_factory=lambda: list(DEFAULT_DOCUMENT_TYPES)
    )
    draft: bool = False
    inject: Injector | list[Injector] | None = None
    render: RenderFunction | None = None
    resource_factory: ResourceFactory = field(default_factory=_default_factory)
    resource_transforms: list[ResourceTransform] = field(default_factory=list)
    base: Path | None = None

    @property
    def injectors(self) -> list[Injector]:
        """Injectors in the order their passes run."""
        if self.inject is None:
            return []
        if isinstance(self.inject, (list, tuple)):
            return list(self.inject)
        return [self.inject]

    @property
    def locale_keys(self) -> list[str]:
        """Every locale key the build state is partitioned by."""
        keys = [""] + list(self.locales or [])
        if self.default_locale and self.default_locale not in keys:
            keys.append(self.default_locale)
        return keys


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from minisite.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    config_path = project_root / CONFIG_FILE
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(CONFIG_FILE, str(exc), exc) from exc
        if not isinstance(loaded, dict):
            raise ConfigurationError(CONFIG_FILE, "expected a mapping")
        config.update(loaded)
    return config


def options_from_config(
    config: dict[str, Any], project_root: Path, draft: bool = False
) -> Options:
    """Build Options from a configuration dictionary.

    Args:
        config: Values returned by load_config.
        project_root: Directory relative paths in the config resolve against.
        draft: Whether draft resources are kept.

    Returns:
        Options with a Jinja2 TemplateEngine as render function.
    """
    from .templates import TemplateEngine

    return Options(
        locales=config.get("locales"),
        default_locale=config.get("default_locale"),
        site=config.get("site"),
        document_types=config.get("document_types"),
        draft=draft,
        render=TemplateEngine(project_root / config["template_dir"]),
        base=project_root / config["source_dir"],
    )
