"""Error types raised while building a minisite.

Every error aborts the whole build. Each carries the source path that
caused the failure, a human-readable message and, when there is one,
the underlying exception.
"""

from __future__ import annotations


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Relative path of the source file that caused the error,
            or None when the error is not tied to a single file.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: str | None,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        if source_path:
            super().__init__(f"{source_path}: {message}")
        else:
            super().__init__(message)


class ParseError(BuildError):
    """A source filename does not match the naming convention."""


class DataFormatError(BuildError):
    """A document's YAML or JSON content could not be parsed."""


class PathCollisionError(BuildError):
    """Two resources resolve to the same output file."""

    def __init__(self, filepath, first: str, second: str):
        self.filepath = filepath
        self.first = first
        self.second = second
        message = "\n".join(
            [
                f"creating two files into the same path: {filepath}",
                f"file 1: {first}",
                f"file 2: {second}",
            ]
        )
        super().__init__(second, message)


class InvalidInjectionError(BuildError):
    """An injector returned a value that cannot become a source file."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            None, f"Invalid file returned by injector: {type(value).__name__}"
        )


class RenderError(BuildError):
    """The render function raised while rendering a document."""


class ConfigurationError(BuildError):
    """Options or the configuration file are unusable."""
