from pathlib import Path

import pytest
import yaml

from minisite.files import SourceFile

BASE = Path("/root/base")


def make_file(filename: str, attr=None, body=None) -> SourceFile:
    """Create an in-memory source file below BASE.

    With both ``attr`` and ``body`` the attributes become front matter; with
    only ``attr`` the file is a plain YAML document.
    """
    parts = []
    if attr is not None and body is not None:
        parts.extend(["---", yaml.safe_dump(attr), "---", body])
    elif attr is not None:
        parts.append(yaml.safe_dump(attr))
    elif body is not None:
        parts.append(body)
    return SourceFile.from_relative(BASE, filename, "\n".join(parts))


@pytest.fixture
def create():
    return make_file
