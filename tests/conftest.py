from __future__ import annotations

from typing import Callable, Mapping

import pytest

from repolens.models import SourceFile
from repolens.source_scanner import class_name_for


@pytest.fixture
def make_sources() -> Callable[[Mapping[str, str]], list[SourceFile]]:
    """Build `SourceFile` values from `path -> content` entries, in order."""

    def _make(files: Mapping[str, str]) -> list[SourceFile]:
        return [
            SourceFile(path=path, content=content, class_name=class_name_for(path))
            for path, content in files.items()
        ]

    return _make
