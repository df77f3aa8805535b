"""Line count and branching complexity per file."""

from __future__ import annotations

import re
from typing import Iterable, List

from ..models import GridDatum, SourceFile

_COMPLEXITY_PATTERN = re.compile(r"\b(?:if|switch|for|while)\b")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def grid_datum(source: SourceFile) -> GridDatum:
    """Count non-blank lines and branching keywords, comments and strings included."""
    line_count = 0
    complexity = 0
    for line in _LINE_BREAK.split(source.content):
        if line.strip():
            line_count += 1
        complexity += len(_COMPLEXITY_PATTERN.findall(line))
    return GridDatum(path=source.path, line_count=line_count, complexity=complexity)


def analyze_grid(sources: Iterable[SourceFile]) -> List[GridDatum]:
    return [grid_datum(source) for source in sources]


__all__ = ["analyze_grid", "grid_datum"]
