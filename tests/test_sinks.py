from __future__ import annotations

from repolens.models import AnalysisResult, UmlDocument
from repolens.sinks import ResultStore, StatusLog


def _result(source: str = "https://github.com/acme/shop") -> AnalysisResult:
    return AnalysisResult(source=source, grid=[], dia=[], uml=UmlDocument("@startuml\n@enduml"))


def test_status_log_keeps_ordered_history() -> None:
    status = StatusLog()
    assert status.latest is None

    status.set_status("one")
    status.set_status("two")

    assert status.latest == "two"
    assert status.messages == ["one", "two"]


def test_status_log_trims_history() -> None:
    status = StatusLog(history_limit=2)
    for message in ("a", "b", "c"):
        status.set_status(message)

    assert status.messages == ["b", "c"]


def test_status_log_notifies_subscribers_until_unsubscribed() -> None:
    status = StatusLog()
    seen = []
    unsubscribe = status.subscribe(seen.append)

    status.set_status("first")
    unsubscribe()
    status.set_status("second")

    assert seen == ["first"]


def test_result_store_publishes_and_clears() -> None:
    store = ResultStore()
    seen = []
    store.subscribe(seen.append)
    result = _result()

    store.set_result(result)
    assert store.snapshot() is result

    store.clear()
    store.clear()

    assert store.snapshot() is None
    assert seen == [result, None]


def test_result_store_listener_may_read_snapshot() -> None:
    store = ResultStore()
    observed = []
    store.subscribe(lambda _: observed.append(store.snapshot()))

    result = _result()
    store.set_result(result)

    assert observed == [result]
