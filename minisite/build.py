"""Site building functionality for minisite.

This module turns source files into a resource graph and renders it.

Key items:
- ResourceGraphBuilder: Runs build passes against one BuildState.
- build_graph: Builds the graph for a file set and its injectors.
- run_pipeline: Builds the graph and renders the output files.
- build: Synchronous wrapper around run_pipeline.
- build_site: Reads a source directory and writes the rendered site.

Passes run strictly one after another. Pass 0 consumes the queued files;
every injector then sees the state left by all earlier passes and returns
more files for the next pass.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .collections import sort_collection
from .config import Options
from .errors import ConfigurationError, PathCollisionError
from .files import (
    SourceFile,
    ensure_clean_dir,
    iter_source_files,
    normalize_injected,
    write_outputs,
)
from .protocols import Injector
from .render import render_resources
from .resource import Resource
from .state import BuildState

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of building the resource graph.

    Attributes:
        resources: Retained resources, pass 0 first, then each injected pass.
        state: The final build state.
    """

    resources: list[Resource]
    state: BuildState


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ResourceGraphBuilder:
    """Builds the resource graph one pass at a time.

    Attributes:
        options: Build options.
        state: Build state shared by every pass.
        resources: Retained resources in output order.
    """

    def __init__(self, options: Options | None = None):
        self.options = options or Options()
        if not callable(self.options.resource_factory):
            raise ConfigurationError(
                None,
                f"Invalid resource factory: {type(self.options.resource_factory).__name__}",
            )
        self.state = BuildState.for_options(self.options)
        self.resources: list[Resource] = []
        self._default_base = self.options.base

    async def add_pass(self, files: Iterable[SourceFile]) -> list[Resource]:
        """Model and register one pass worth of files.

        Args:
            files: Files of this pass.

        Returns:
            Resources retained by this pass.

        Raises:
            BuildError: On the first fatal error of the pass.
        """
        files = list(files)
        if self._default_base is None and files:
            self._default_base = files[0].base
        resources = await self._construct(files)
        if not self.options.draft:
            resources = [r for r in resources if not r.draft]
        self._register(resources)
        self.resources.extend(resources)
        logger.debug("Pass registered %d of %d files", len(resources), len(files))
        return resources

    async def inject(self, injector: Injector) -> list[Resource]:
        """Run an injector and build a pass from the files it returns.

        Args:
            injector: Callable receiving the state and the options.

        Returns:
            Resources retained by the injected pass.

        Raises:
            InvalidInjectionError: If the injector's value is not file-like.
        """
        value = await _resolve(injector(self.state, self.options))
        files = normalize_injected(value, self._default_base or Path.cwd())
        logger.debug("Injector %r returned %d files", injector, len(files))
        return await self.add_pass(files)

    async def _construct(self, files: list[SourceFile]) -> list[Resource]:
        factory = self.options.resource_factory
        pending = [factory(file, self.options) for file in files]
        built = await asyncio.gather(*(_resolve(value) for value in pending))
        resources: list[Resource] = []
        for file, resource in zip(files, built):
            if not isinstance(resource, Resource):
                raise ConfigurationError(
                    file.source_relative,
                    f"Resource factory returned {type(resource).__name__}",
                )
            for transform in self.options.resource_transforms:
                resource = transform(resource)
            resources.append(resource)
        return resources

    def _register(self, resources: list[Resource]) -> None:
        state = self.state

        for resource in resources:
            existing = state.filepaths.get(resource.filepath)
            if existing is not None:
                raise PathCollisionError(
                    resource.filepath, existing.src_relative, resource.src_relative
                )
            state.filepaths[resource.filepath] = resource
            if resource.file is not None:
                resource.file.resource = resource
                resource.file.path = resource.filepath

        documents = [r for r in resources if r.document]
        touched: set[tuple[str, str]] = set()

        for resource in documents:
            scope = state.locale(resource.locale)
            scope.references[resource.resource_id] = resource
            if not resource.index:
                scope.collection(resource.collection_id).append(resource)
                touched.add((resource.locale, resource.collection_id))
            scope.pages.append(resource)

        for resource in documents:
            group = state.resource_group.setdefault(resource.resource_id, {})
            group[resource.locale] = resource
            resource.locales = group
            resource.collection = state.locale(resource.locale).collection(
                resource.resource_id
            )

        for locale, collection_id in sorted(touched):
            sort_collection(state[locale].collections[collection_id])


async def build_graph(
    files: Iterable[SourceFile], options: Options | None = None
) -> BuildResult:
    """Build the resource graph for a file set and the configured injectors.

    Args:
        files: Files of pass 0.
        options: Build options.

    Returns:
        BuildResult with the retained resources and the final state.
    """
    builder = ResourceGraphBuilder(options)
    await builder.add_pass(files)
    for injector in builder.options.injectors:
        await builder.inject(injector)
    return BuildResult(resources=builder.resources, state=builder.state)


async def run_pipeline(
    files: Iterable[SourceFile], options: Options | None = None
) -> list[SourceFile]:
    """Build the graph and render every output file.

    Args:
        files: Files of pass 0.
        options: Build options.

    Returns:
        Output files in order: pass 0 in input order, then injected passes.
    """
    options = options or Options()
    result = await build_graph(files, options)
    return await render_resources(result.resources, result.state, options)


def build(files: Iterable[SourceFile], options: Options | None = None) -> list[SourceFile]:
    """Synchronous wrapper around run_pipeline."""
    return asyncio.run(run_pipeline(files, options))


def build_site(
    source_dir: Path,
    output_dir: Path,
    options: Options,
    clean_output: bool = True,
) -> list[SourceFile]:
    """Build a site from a directory into another directory.

    Args:
        source_dir: Directory with the source files.
        output_dir: Directory receiving the output.
        options: Build options.
        clean_output: Whether to wipe the output directory first.

    Returns:
        The output files that were written.
    """
    if not source_dir.exists():
        raise FileNotFoundError(f"Expected source directory at {source_dir}")
    outputs = build(iter_source_files(source_dir), options)
    if clean_output:
        ensure_clean_dir(output_dir)
    else:
        output_dir.mkdir(parents=True, exist_ok=True)
    write_outputs(outputs, output_dir)
    return outputs
