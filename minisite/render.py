"""Render dispatch for minisite.

Turns retained resources into output files. Documents that declare a
template go through the render function; other documents emit their body;
assets pass through untouched. Hidden documents are never emitted.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .errors import ConfigurationError, RenderError

if TYPE_CHECKING:
    from .config import Options
    from .files import SourceFile
    from .resource import Resource
    from .state import BuildState

logger = logging.getLogger(__name__)


def build_context(resource: Resource, state: BuildState) -> dict[str, Any]:
    """Build the template context for a document.

    Args:
        resource: The document being rendered.
        state: Final build state.

    Returns:
        Context with ``page``, ``site``, ``pages``, ``collections``,
        ``references`` for the document's locale and ``global`` for all locales.
    """
    scope = state[resource.locale]
    return {
        "page": resource,
        "site": scope.site,
        "pages": scope.pages,
        "collections": scope.collections,
        "references": scope.references,
        "global": state,
    }


async def render_resource(
    resource: Resource, state: BuildState, options: Options
) -> SourceFile:
    """Produce the output file of one resource.

    Args:
        resource: Resource to render.
        state: Final build state.
        options: Build options.

    Returns:
        The resource's file with its final contents.

    Raises:
        RenderError: If the render function fails.
    """
    file = resource.file
    if not resource.document:
        return file

    if not resource.get("template"):
        file.contents = (resource.body or "").encode("utf-8")
        return file

    if options.render is None:
        raise ConfigurationError(
            resource.src_relative, "document declares a template but no render function is set"
        )
    try:
        output = options.render(build_context(resource, state))
        if inspect.isawaitable(output):
            output = await output
    except Exception as exc:
        raise RenderError(resource.src_relative, str(exc), exc) from exc
    file.contents = str(output).encode("utf-8")
    logger.debug("Rendered %s", resource.src_relative)
    return file


async def render_resources(
    resources: Iterable[Resource], state: BuildState, options: Options
) -> list[SourceFile]:
    """Render every emitted resource concurrently.

    Args:
        resources: Retained resources in output order.
        state: Final build state.
        options: Build options.

    Returns:
        Output files in the order of ``resources``, hidden documents removed.
    """
    emitted = [r for r in resources if not (r.document and r.hidden)]
    return list(
        await asyncio.gather(*(render_resource(r, state, options) for r in emitted))
    )
