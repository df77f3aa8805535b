"""Martin's abstractness, instability and distance metrics."""

from __future__ import annotations

from typing import Iterable, List

from ..models import DiaDatum, ParsedClass, SourceFile
from .graph import ClassGraph


def dia_datum(path: str, node: ParsedClass, *, incoming: int, outgoing: int) -> DiaDatum:
    abstractness = 1.0 if (node.is_abstract or node.is_interface) else 0.0
    denominator = incoming + outgoing
    instability = outgoing / denominator if denominator > 0 else 0.0
    distance = abs(abstractness + instability - 1.0)
    return DiaDatum(
        path=path,
        abstractness=abstractness,
        instability=instability,
        distance=distance,
        incoming=incoming,
        outgoing=outgoing,
    )


def calculate_dia(sources: Iterable[SourceFile], graph: ClassGraph) -> List[DiaDatum]:
    """Return one datum per source file, using the graph node of its class."""
    metrics: List[DiaDatum] = []
    for source in sources:
        node = graph.node_for(source.class_name)
        metrics.append(
            dia_datum(
                source.path,
                node,
                incoming=graph.incoming(source.class_name),
                outgoing=graph.outgoing(source.class_name),
            )
        )
    return metrics


__all__ = ["calculate_dia", "dia_datum"]
