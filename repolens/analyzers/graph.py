"""Dependency graph restricted to classes defined in the analyzed repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from ..errors import InternalAnalysisError
from ..logging import get_logger
from ..models import RELATION_KINDS, ParsedClass

_logger = get_logger("graph")


@dataclass
class ClassGraph:
    """Parsed classes keyed by name, in discovery order."""

    classes: Dict[str, ParsedClass] = field(default_factory=dict)

    @property
    def repo_classes(self) -> Set[str]:
        return set(self.classes)

    def nodes(self) -> List[ParsedClass]:
        return list(self.classes.values())

    def node_for(self, class_name: str) -> ParsedClass:
        try:
            return self.classes[class_name]
        except KeyError as exc:
            raise InternalAnalysisError(f"Class '{class_name}' is not part of the graph") from exc

    def outgoing(self, class_name: str) -> int:
        return len(self.node_for(class_name).all_outgoing())

    def incoming(self, class_name: str) -> int:
        return self.node_for(class_name).incoming_count

    def verify(self) -> None:
        """Raise when a relation escapes the repository or points at itself."""
        repo = self.repo_classes
        for node in self.classes.values():
            targets = list(node.implements)
            if node.parent is not None:
                targets.append(node.parent)
            for kind in RELATION_KINDS:
                targets.extend(getattr(node, kind))
            for target in targets:
                if target == node.class_name:
                    raise InternalAnalysisError(f"{node.class_name} references itself")
                if target not in repo:
                    raise InternalAnalysisError(
                        f"{node.class_name} references '{target}' outside the repository"
                    )


def build_graph(parsed: Iterable[ParsedClass]) -> ClassGraph:
    """Merge classes by name, drop foreign targets and count incoming edges.

    When two files share a class name the first one wins for kind flags and
    parent; relation buckets are merged in discovery order.
    """
    graph = ClassGraph()
    for item in parsed:
        existing = graph.classes.get(item.class_name)
        if existing is None:
            graph.classes[item.class_name] = _copy(item)
            continue
        _logger.warning(
            "Class name %s appears in both %s and %s; keeping the first declaration",
            item.class_name,
            existing.path,
            item.path,
        )
        _extend(existing.implements, item.implements)
        for kind in RELATION_KINDS:
            _extend(getattr(existing, kind), getattr(item, kind))

    repo = graph.repo_classes
    for node in graph.classes.values():
        _restrict(node, repo)

    for node in graph.classes.values():
        for target in node.all_outgoing():
            graph.classes[target].incoming_count += 1

    _logger.debug("Graph built with %d classes", len(graph.classes))
    return graph


def _restrict(node: ParsedClass, repo: Set[str]) -> None:
    def _keep(name: str) -> bool:
        return name in repo and name != node.class_name

    if node.parent is not None and not _keep(node.parent):
        node.parent = None
    node.implements = [name for name in node.implements if _keep(name)]
    for kind in RELATION_KINDS:
        setattr(node, kind, [name for name in getattr(node, kind) if _keep(name)])
    node.incoming_count = 0


def _copy(item: ParsedClass) -> ParsedClass:
    return ParsedClass(
        path=item.path,
        class_name=item.class_name,
        is_interface=item.is_interface,
        is_abstract=item.is_abstract,
        parent=item.parent,
        implements=list(item.implements),
        compositions=list(item.compositions),
        aggregations=list(item.aggregations),
        associations=list(item.associations),
        dependencies=list(item.dependencies),
    )


def _extend(target: List[str], extra: Iterable[str]) -> None:
    for name in extra:
        if name not in target:
            target.append(name)


__all__ = ["ClassGraph", "build_graph"]
