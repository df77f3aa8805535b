"""Status and result sinks that the orchestrator publishes into."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional, Protocol

from .logging import get_logger
from .models import AnalysisResult

StatusListener = Callable[[str], None]
ResultListener = Callable[[Optional[AnalysisResult]], None]


class StatusSink(Protocol):
    def set_status(self, message: str) -> None:
        ...


class ResultSink(Protocol):
    def set_result(self, result: AnalysisResult) -> None:
        ...

    def clear(self) -> None:
        ...


class StatusLog:
    """Keeps the latest status message and the ordered history."""

    def __init__(self, *, history_limit: int = 200) -> None:
        self._lock = threading.Lock()
        self._messages: List[str] = []
        self._listeners: List[StatusListener] = []
        self._history_limit = history_limit
        self.logger = get_logger("status")

    def set_status(self, message: str) -> None:
        with self._lock:
            self._messages.append(message)
            if len(self._messages) > self._history_limit:
                del self._messages[: -self._history_limit]
            listeners = list(self._listeners)
        self.logger.debug("status: %s", message)
        for listener in listeners:
            listener(message)

    @property
    def latest(self) -> Optional[str]:
        with self._lock:
            return self._messages[-1] if self._messages else None

    @property
    def messages(self) -> List[str]:
        with self._lock:
            return list(self._messages)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe


class ResultStore:
    """Holds the most recently published analysis result."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._result: Optional[AnalysisResult] = None
        self._listeners: List[ResultListener] = []

    def set_result(self, result: AnalysisResult) -> None:
        with self._lock:
            self._result = result
            listeners = list(self._listeners)
        for listener in listeners:
            listener(result)

    def clear(self) -> None:
        with self._lock:
            if self._result is None:
                return
            self._result = None
            listeners = list(self._listeners)
        for listener in listeners:
            listener(None)

    def snapshot(self) -> Optional[AnalysisResult]:
        with self._lock:
            return self._result

    def subscribe(self, listener: ResultListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe


__all__ = ["ResultSink", "ResultStore", "StatusLog", "StatusSink"]
