"""PlantUML class diagram emission."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Dict, List, Set

from .analyzers.graph import ClassGraph
from .models import ARROWS, ParsedClass, UmlDocument

START = "@startuml\n"
END = "@enduml"

_EDGE_LINE = re.compile(
    r"^(\S+) (" + "|".join(re.escape(arrow) for arrow in ARROWS.values()) + r") (\S+)$"
)
_KIND_BY_ARROW = {arrow: kind for kind, arrow in ARROWS.items()}


def declaration(node: ParsedClass) -> str:
    if node.is_interface:
        return f"interface {node.class_name}"
    if node.is_abstract:
        return f"abstract class {node.class_name}"
    return f"class {node.class_name}"


def _targets(node: ParsedClass, kind: str) -> List[str]:
    if kind == "implements":
        return list(node.implements)
    if kind == "extends":
        return [node.parent] if node.parent is not None else []
    return list(getattr(node, kind))


def build_uml(graph: ClassGraph) -> UmlDocument:
    """Emit one declaration per class and at most one edge per ordered pair.

    Edges are emitted by precedence level (implements, extends, composition,
    aggregation, association, dependency), so the first kind that claims a
    pair is the one drawn.
    """
    nodes = graph.nodes()
    lines: List[str] = [declaration(node) for node in nodes]

    emitted: Set[str] = set()
    for kind in ARROWS:
        arrow = ARROWS[kind]
        for node in nodes:
            for target in _targets(node, kind):
                if target == node.class_name:
                    continue
                key = f"{node.class_name}->{target}"
                if key in emitted:
                    continue
                emitted.add(key)
                lines.append(f"{node.class_name} {arrow} {target}")

    body = "".join(f"{line}\n" for line in lines)
    return UmlDocument(text=f"{START}{body}{END}")


def parse_relation_histogram(text: str) -> Dict[str, Dict[str, int]]:
    """Count emitted edges per source class and relation kind."""
    histogram: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for line in text.splitlines():
        match = _EDGE_LINE.match(line.strip())
        if not match:
            continue
        source, arrow, _ = match.groups()
        histogram[source][_KIND_BY_ARROW[arrow]] += 1
    return {source: dict(kinds) for source, kinds in histogram.items()}


def declared_classes(text: str) -> List[str]:
    names: List[str] = []
    for line in text.splitlines():
        for prefix in ("abstract class ", "interface ", "class "):
            if line.startswith(prefix):
                names.append(line[len(prefix):].strip())
                break
    return names


__all__ = ["ARROWS", "build_uml", "declaration", "declared_classes", "parse_relation_histogram"]
