"""Text-level structural parser for Java sources.

The parser never builds a syntax tree. Each fact is read from the raw
text with regular expressions, so the results are a heuristic: comments,
strings and imports all contribute identifiers. Relation classification
is line-local; each distinct uppercase identifier on a line lands in the
first bucket whose test matches that line:

1. composition when the line instantiates it (``new Foo``),
2. aggregation when it is part of a field declaration's type,
3. dependency when it appears in a signature or parameter list,
4. association otherwise.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Callable, FrozenSet, Iterable, List, Optional, Pattern

from ..errors import AnalysisCancelled
from ..models import ParsedClass, SourceFile

_IDENTIFIER = re.compile(r"\b[A-Z][A-Za-z0-9_]*\b")
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_TYPE_ARGUMENTS = re.compile(r"<[^<>]*>")
_JAVA_NAME = re.compile(r"[A-Za-z_$][\w$]*")
# Characters that may appear between a field's type and its name.
_TYPE_RUN = re.compile(r"[\w<>\[\],.?\s]+")

# Optional generic parameter list following a declared class name.
_TYPE_PARAMS = r"(?:\s*<[^{]*?>)?"


def parse_source(source: SourceFile) -> ParsedClass:
    """Extract kind flags, inheritance and relation buckets from one file."""
    name = source.class_name
    content = source.content
    quoted = re.escape(name)

    parsed = ParsedClass(path=source.path, class_name=name)
    parsed.is_interface = re.search(rf"\binterface\s+{quoted}\b", content) is not None
    parsed.is_abstract = re.search(rf"\babstract\s+class\s+{quoted}\b", content) is not None
    parsed.parent = _find_parent(content, quoted)
    parsed.implements = _find_implements(content, quoted)

    for line in _LINE_BREAK.split(content):
        identifiers = dict.fromkeys(_IDENTIFIER.findall(line))
        if not identifiers:
            continue
        field_types = _field_type_names(line)
        for identifier in identifiers:
            if identifier == name:
                continue
            bucket = getattr(parsed, _classify(line, identifier, field_types))
            if identifier not in bucket:
                bucket.append(identifier)
    return parsed


def parse_sources(
    sources: Iterable[SourceFile],
    *,
    should_continue: Callable[[], bool] = lambda: True,
) -> List[ParsedClass]:
    parsed: List[ParsedClass] = []
    for source in sources:
        if not should_continue():
            raise AnalysisCancelled("Analysis cancelled while parsing sources")
        parsed.append(parse_source(source))
    return parsed


def classify_reference(line: str, identifier: str) -> str:
    """Return the relation bucket ``identifier`` falls into on ``line``."""
    return _classify(line, identifier, _field_type_names(line))


def _classify(line: str, identifier: str, field_types: FrozenSet[str]) -> str:
    patterns = _patterns_for(identifier)
    if patterns.composition.search(line):
        return "compositions"
    if identifier in field_types:
        return "aggregations"
    if any(pattern.search(line) for pattern in patterns.signature):
        return "dependencies"
    return "associations"


def _field_type_names(line: str) -> FrozenSet[str]:
    """Return identifiers used in the type part of a field declaration on ``line``.

    A declaration is a run of type characters ending in ``=`` or ``;`` whose
    last whitespace-separated token is the field name, as in
    ``private final Map<String, Foo> foos = ...``.
    """
    names: set[str] = set()
    for run in _TYPE_RUN.finditer(line):
        end = run.end()
        if end >= len(line) or line[end] not in "=;":
            continue
        parts = run.group(0).rstrip().rsplit(None, 1)
        if len(parts) < 2 or not _JAVA_NAME.fullmatch(parts[1]):
            continue
        names.update(_IDENTIFIER.findall(parts[0]))
    return frozenset(names)


def _find_parent(content: str, quoted: str) -> Optional[str]:
    match = re.search(
        rf"\bclass\s+{quoted}{_TYPE_PARAMS}\s+extends\s+([A-Z][A-Za-z0-9_]*)",
        content,
    )
    return match.group(1) if match else None


def _find_implements(content: str, quoted: str) -> List[str]:
    match = re.search(
        rf"\bclass\s+{quoted}{_TYPE_PARAMS}"
        rf"(?:\s+extends\s+[\w.]+(?:\s*<[^{{]*?>)?)?"
        rf"\s+implements\s+([^{{;]+)",
        content,
    )
    if not match:
        return []

    raw = match.group(1)
    while _TYPE_ARGUMENTS.search(raw):
        raw = _TYPE_ARGUMENTS.sub("", raw)

    names: List[str] = []
    for part in raw.split(","):
        candidate = part.strip().rsplit(".", 1)[-1]
        if _JAVA_NAME.fullmatch(candidate) and candidate not in names:
            names.append(candidate)
    return names


class _ReferencePatterns:
    __slots__ = ("composition", "signature")

    def __init__(self, composition: Pattern[str], signature: tuple[Pattern[str], ...]) -> None:
        self.composition = composition
        self.signature = signature


@lru_cache(maxsize=4096)
def _patterns_for(identifier: str) -> _ReferencePatterns:
    name = re.escape(identifier)
    return _ReferencePatterns(
        composition=re.compile(rf"\bnew\s+{name}\b"),
        signature=(
            # return type or call: `Foo build(` / `Foo(`
            re.compile(rf"\b{name}\b(?:\s*<[^;=(){{}}]*>)?(?:\s*\[\s*\])*\s*(?:[A-Za-z_$][\w$]*)?\s*\("),
            # first parameter: `(Foo foo`
            re.compile(rf"\(\s*{name}\b"),
            # later parameter: `, Foo foo)`
            re.compile(rf",\s*{name}\b(?:\s*<[^;=(){{}}]*>)?(?:\s*\[\s*\])*\s+[A-Za-z_$][\w$]*\s*[,)]"),
        ),
    )


__all__ = ["classify_reference", "parse_source", "parse_sources"]
