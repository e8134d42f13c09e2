"""Command-line interface for minisite.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site into the output directory.
- routes: Print the output path of every source file.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

from . import __version__
from .config import load_config, options_from_config
from .errors import BuildError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _report(exc: BuildError) -> None:
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    if exc.source_path:
        click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


@click.group()
@click.version_option(version=__version__, prog_name="minisite")
def cli():
    """minisite static site generator."""


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("-v", "--verbose", is_flag=True, help="Log build passes")
def build(drafts: bool, verbose: bool):
    """Build the site into the output directory."""
    _configure_logging(verbose)
    project_root = Path.cwd()
    from .build import build_site

    try:
        config = load_config(project_root)
        options = options_from_config(config, project_root, draft=drafts)
        outputs = build_site(
            project_root / config["source_dir"],
            project_root / config["output_dir"],
            options,
        )
    except BuildError as exc:
        _report(exc)
        raise SystemExit(1) from None
    except FileNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Built {len(outputs)} files into {project_root / config['output_dir']}")


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
def routes(drafts: bool):
    """Print the output path of every source file."""
    _configure_logging(False)
    project_root = Path.cwd()
    from .build import build_graph
    from .files import iter_source_files

    try:
        config = load_config(project_root)
        source_dir = project_root / config["source_dir"]
        if not source_dir.exists():
            raise click.ClickException(f"Expected source directory at {source_dir}")
        options = options_from_config(config, project_root, draft=drafts)
        result = asyncio.run(build_graph(iter_source_files(source_dir), options))
    except BuildError as exc:
        _report(exc)
        raise SystemExit(1) from None
    for resource in result.resources:
        marker = " (hidden)" if resource.document and resource.hidden else ""
        click.echo(f"{resource.src_relative} -> {resource.path}{marker}")


def main():
    """Entry point for the CLI application."""
    cli()
