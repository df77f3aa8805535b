"""Tests for the grid analyzer."""

from __future__ import annotations

from repolens.analyzers.grid import analyze_grid, grid_datum
from repolens.models import GridDatum, SourceFile


def _source(content: str, path: str = "A.java") -> SourceFile:
    return SourceFile(path=path, content=content, class_name="A")


def test_grid_single_line_class() -> None:
    assert grid_datum(_source("class A {}")) == GridDatum(path="A.java", line_count=1, complexity=0)


def test_grid_counts_branch_keywords() -> None:
    content = "class A {\n    void f() { if (x) while (y) for(;;) {} }\n}\n"
    datum = grid_datum(_source(content))
    assert datum.complexity == 3
    assert datum.line_count == 3


def test_grid_splits_on_every_line_terminator() -> None:
    datum = grid_datum(_source("a\r\nb\rc\n\n   \n\td"))
    assert datum.line_count == 4


def test_grid_counts_keywords_in_comments_and_strings() -> None:
    content = '// if this switch\nString s = "for while";\n'
    assert grid_datum(_source(content)).complexity == 4


def test_grid_respects_word_boundaries() -> None:
    content = "items.forEach(x -> notify());\nformat(ifx, whileLoop);\nelse if (ok) {}\n"
    assert grid_datum(_source(content)).complexity == 1


def test_grid_empty_content() -> None:
    assert grid_datum(_source("")) == GridDatum(path="A.java", line_count=0, complexity=0)


def test_analyze_grid_is_ordered_and_deterministic() -> None:
    sources = [
        _source("class A {}", "pkg/A.java"),
        _source("class B {\n if (x) {}\n}", "pkg/B.java"),
    ]
    first = analyze_grid(sources)
    second = analyze_grid(sources)
    assert first == second
    assert [datum.path for datum in first] == ["pkg/A.java", "pkg/B.java"]
    assert first[1] == GridDatum(path="pkg/B.java", line_count=3, complexity=1)


def test_grid_single_line_method_with_three_branches() -> None:
    datum = grid_datum(_source("class A { void f() { if (x) while (y) for(;;) {} } }"))
    assert datum == GridDatum(path="A.java", line_count=1, complexity=3)
