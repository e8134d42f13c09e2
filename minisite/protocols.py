"""Protocol definitions for minisite.

These are the callable extension points of the pipeline. Each one may be a
plain function; asynchronous implementations return an awaitable and the
pipeline awaits it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from .config import Options
    from .files import SourceFile
    from .resource import Resource
    from .state import BuildState


@runtime_checkable
class ResourceFactory(Protocol):
    """Builds a Resource from a source file.

    The default implementation is ``minisite.resource.build_resource``.
    """

    def __call__(
        self, file: SourceFile, options: Options
    ) -> Union[Resource, Awaitable[Resource]]:
        """Build the resource.

        Args:
            file: Source file to model.
            options: Build options.

        Returns:
            The Resource, or an awaitable resolving to it.
        """
        ...


@runtime_checkable
class ResourceTransform(Protocol):
    """Post-construction step composed after the resource factory."""

    def __call__(self, resource: Resource) -> Resource: ...


@runtime_checkable
class Injector(Protocol):
    """Synthesises additional source files from the current build state.

    The return value may be a SourceFile, a ``{path, contents}`` mapping, a
    list of either, or an awaitable resolving to any of these.
    """

    def __call__(self, state: BuildState, options: Options) -> Any: ...


@runtime_checkable
class RenderFunction(Protocol):
    """Renders one document from its template context.

    The context holds ``page``, ``site``, ``pages``, ``collections``,
    ``references`` and ``global``.
    """

    def __call__(
        self, context: Mapping[str, Any]
    ) -> Union[str, Awaitable[str]]: ...
