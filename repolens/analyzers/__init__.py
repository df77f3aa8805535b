"""Analysis stages turning downloaded sources into grid, graph and DIA data."""

from __future__ import annotations

from .dia import calculate_dia, dia_datum
from .graph import ClassGraph, build_graph
from .grid import analyze_grid, grid_datum
from .structure import classify_reference, parse_source, parse_sources

__all__ = [
    "ClassGraph",
    "analyze_grid",
    "build_graph",
    "calculate_dia",
    "classify_reference",
    "dia_datum",
    "grid_datum",
    "parse_source",
    "parse_sources",
]
