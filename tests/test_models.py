from __future__ import annotations

import pytest

from repolens.models import AnalysisResult, DiaDatum, GridDatum, ParsedClass, UmlDocument


def _dia(path: str, instability: float, distance: float) -> DiaDatum:
    return DiaDatum(
        path=path,
        abstractness=0.0,
        instability=instability,
        distance=distance,
        incoming=0,
        outgoing=0,
    )


@pytest.fixture
def result() -> AnalysisResult:
    return AnalysisResult(
        source="https://github.com/acme/shop",
        grid=[
            GridDatum(path="core/Order.java", line_count=40, complexity=3),
            GridDatum(path="core/sub/Item.java", line_count=12, complexity=0),
            GridDatum(path="corex/Other.java", line_count=7, complexity=1),
        ],
        dia=[
            _dia("core/Order.java", 1.0, 0.0),
            _dia("core/sub/Item.java", 0.0, 1.0),
            _dia("corex/Other.java", 0.5, 0.5),
        ],
        uml=UmlDocument("@startuml\nclass Order\nclass Item\nclass Other\nOrder o-- Item\n@enduml"),
    )


def test_summary_reports_averages(result: AnalysisResult) -> None:
    assert result.max_line_count == 40
    assert result.summary() == "3 files analyzed | Avg Instability: 0.50 | Avg Distance: 0.50"


def test_summary_without_metrics() -> None:
    empty = AnalysisResult(source="x", grid=[], dia=[], uml=UmlDocument("@startuml\n@enduml"))
    assert empty.summary() == "0 files analyzed."
    assert empty.max_line_count == 0
    assert empty.average_distance == 0.0


def test_for_folder_filters_by_path_prefix(result: AnalysisResult) -> None:
    scoped = result.for_folder("/core/")

    assert [datum.path for datum in scoped.grid] == ["core/Order.java", "core/sub/Item.java"]
    assert [datum.path for datum in scoped.dia] == ["core/Order.java", "core/sub/Item.java"]
    assert scoped.uml is result.uml
    assert result.for_folder(None) is result
    assert result.for_folder("  ") is result


def test_to_dict_is_json_ready(result: AnalysisResult) -> None:
    payload = result.to_dict()

    assert payload["source"] == "https://github.com/acme/shop"
    assert payload["grid"][0] == {"path": "core/Order.java", "line_count": 40, "complexity": 3}
    assert payload["dia"][2]["instability"] == 0.5
    assert payload["uml"].startswith("@startuml\n")


def test_relation_count_counts_edge_lines(result: AnalysisResult) -> None:
    assert result.uml.relation_count() == 1


def test_simple_name_strips_folders_and_extension() -> None:
    assert _dia("core/sub/Item.java", 0.0, 1.0).simple_name == "Item"
    assert _dia("Makefile", 0.0, 1.0).simple_name == "Makefile"


def test_all_outgoing_is_ordered_union_without_self() -> None:
    parsed = ParsedClass(
        path="A.java",
        class_name="A",
        parent="B",
        implements=["I"],
        compositions=["C", "B"],
        dependencies=["A", "D", "C"],
    )
    assert parsed.all_outgoing() == ["I", "B", "C", "D"]
