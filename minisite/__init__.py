"""minisite static site generator.

minisite turns a flat tree of YAML, JSON and front-matter documents plus
static assets into a site. Routing comes from filenames: order tags, locale
tags, draft and hidden markers. Documents are grouped into collections and
cross-locale resource groups, and those with a template are rendered through
a pluggable render function (Jinja2 by default).

The pipeline is build_graph (filenames to a resource graph, with optional
injection passes) followed by render_resources.
"""

from .build import BuildResult, ResourceGraphBuilder, build, build_graph, run_pipeline
from .config import Options
from .files import SourceFile
from .resource import Resource, build_resource

__all__ = [
    "BuildResult",
    "Options",
    "Resource",
    "ResourceGraphBuilder",
    "SourceFile",
    "__version__",
    "build",
    "build_graph",
    "build_resource",
    "run_pipeline",
]
__version__ = "0.1.0"
