"""Pipeline orchestration for repository analysis runs."""

from __future__ import annotations

import logging
import re
import threading
from typing import List, Optional, cast

from .analyzers import analyze_grid, build_graph, calculate_dia, parse_sources
from .config import RepoLensConfig, default_config
from .errors import AnalysisCancelled, InvalidUrlError
from .github import GitHubClient
from .logging import get_logger
from .models import AnalysisResult
from .sinks import ResultSink, ResultStore, StatusLog, StatusSink
from .source_scanner import SourceScanner
from .uml import build_uml

STATUS_FETCHING = "Fetching file list..."
STATUS_DOWNLOADING = "Downloading sources..."
STATUS_DIA = "Calculating DIA metrics..."
STATUS_UML = "Building UML..."
STATUS_CLEARED = "Cleared."
STATUS_NOTHING_TO_RELOAD = "Nothing to reload."

_WHITESPACE = re.compile(r"\s")


class AnalysisRun:
    """Handle for one invocation of the pipeline."""

    def __init__(self, url: str, generation: int) -> None:
        self.url = url
        self.generation = generation
        self.result: Optional[AnalysisResult] = None
        self.error: Optional[Exception] = None
        self._cancelled = threading.Event()
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the run to finish; return True when it has."""
        return self._done.wait(timeout)


class Orchestrator:
    """Runs fetch, grid, parse, graph, DIA and UML stages and publishes the result."""

    def __init__(
        self,
        client: GitHubClient | None = None,
        *,
        config: RepoLensConfig | None = None,
        status_sink: StatusSink | None = None,
        result_sink: ResultSink | None = None,
        scanner: SourceScanner | None = None,
    ) -> None:
        self.config = config or default_config()
        github = self.config.github
        self.client = client or GitHubClient(
            github.token,
            api_url=github.api_url,
            request_timeout=github.request_timeout,
        )
        analysis = self.config.analysis
        self.scanner = scanner or SourceScanner(
            self.client,
            extensions=analysis.extensions,
            exclude_paths=analysis.exclude_paths,
        )
        self.status_sink: StatusSink = status_sink or StatusLog()
        self.result_sink: ResultSink = result_sink or ResultStore()
        self.logger = get_logger("orchestrator")
        self.last_url: Optional[str] = None
        self._lock = threading.RLock()
        self._generation = 0
        self._active: List[AnalysisRun] = []

    def analyze(self, url: str) -> AnalysisResult:
        """Run the pipeline on the calling thread and return the published result."""
        run = self._begin(url)
        self._execute(run)
        if run.error is not None:
            raise run.error
        return cast(AnalysisResult, run.result)

    def start(self, url: str) -> AnalysisRun:
        """Run the pipeline on a background thread, superseding older runs."""
        run = self._begin(url)
        thread = threading.Thread(
            target=self._execute,
            args=(run,),
            name="repolens-analysis",
            daemon=True,
        )
        run._thread = thread
        thread.start()
        return run

    def reload(self) -> Optional[AnalysisRun]:
        """Restart the most recent URL in the background."""
        if not self.last_url:
            self.status_sink.set_status(STATUS_NOTHING_TO_RELOAD)
            return None
        return self.start(self.last_url)

    def clear(self) -> None:
        self.result_sink.clear()
        self.status_sink.set_status(STATUS_CLEARED)

    def cancel(self) -> None:
        """Cancel every in-flight run; none of them will publish."""
        with self._lock:
            for run in self._active:
                run.cancel()

    def _begin(self, url: str) -> AnalysisRun:
        with self._lock:
            self._generation += 1
            for previous in self._active:
                previous.cancel()
            run = AnalysisRun(url, self._generation)
            self._active.append(run)
            if url and url.strip():
                self.last_url = url.strip()
        return run

    def _execute(self, run: AnalysisRun) -> None:
        try:
            result = self._run_pipeline(run)
            self._publish(run, result)
        except AnalysisCancelled as exc:
            run.error = exc
            self.logger.info("Analysis of %s cancelled", run.url)
        except Exception as exc:
            run.error = exc
            self._fail(run, exc)
        finally:
            with self._lock:
                if run in self._active:
                    self._active.remove(run)
            run._done.set()

    def _run_pipeline(self, run: AnalysisRun) -> AnalysisResult:
        url = self._validate_url(run.url)

        self._stage(run, STATUS_FETCHING)
        ref = self.client.parse_url(url)
        if ref.is_blob:
            raise InvalidUrlError("URL must point to a folder.")
        sources = self.scanner.scan(
            ref,
            should_continue=lambda: not run.cancelled,
            on_listed=lambda _paths: self._stage(run, STATUS_DOWNLOADING),
        )
        grid = analyze_grid(sources)

        self._checkpoint(run)
        graph = build_graph(parse_sources(sources, should_continue=lambda: not run.cancelled))
        graph.verify()

        self._stage(run, STATUS_DIA)
        dia = calculate_dia(sources, graph)
        self.logger.info("Calculated DIA metrics for %d files", len(dia))

        self._stage(run, STATUS_UML)
        uml = build_uml(graph)
        self.logger.info("Built UML diagram with %d relations", uml.relation_count())

        self._checkpoint(run)
        return AnalysisResult(source=url, grid=grid, dia=dia, uml=uml)

    def _publish(self, run: AnalysisRun, result: AnalysisResult) -> None:
        # Holding the lock keeps a newer run from starting between the check and the publish.
        with self._lock:
            if not self._is_current(run):
                raise AnalysisCancelled(f"Analysis of {run.url} was superseded")
            self.result_sink.set_result(result)
            run.result = result

        if not result.grid:
            self.status_sink.set_status(self._empty_message())
            self.logger.info("Fetch completed for %s: no matching files", run.url)
            return

        self.status_sink.set_status(result.summary())
        self.logger.info(
            "Fetch completed: %d files, avg instability %.2f, avg distance %.2f",
            len(result.grid),
            result.average_instability,
            result.average_distance,
        )

    def _fail(self, run: AnalysisRun, exc: Exception) -> None:
        self._log_exception(f"Analysis failed for URL {run.url}", exc)
        with self._lock:
            if not self._is_current(run):
                return
            self.result_sink.clear()
        message = str(exc) or exc.__class__.__name__
        self.status_sink.set_status(f"Error: {message}")

    def _stage(self, run: AnalysisRun, message: str) -> None:
        self._checkpoint(run)
        self.status_sink.set_status(message)

    def _checkpoint(self, run: AnalysisRun) -> None:
        if run.cancelled:
            raise AnalysisCancelled(f"Analysis of {run.url} was cancelled")

    def _is_current(self, run: AnalysisRun) -> bool:
        return not run.cancelled and run.generation == self._generation

    def _empty_message(self) -> str:
        extensions = ", ".join(self.scanner.extensions)
        return f"No {extensions} files found."

    @staticmethod
    def _validate_url(url: str | None) -> str:
        if url is None or not url.strip():
            raise InvalidUrlError("Please provide a URL.")
        candidate = url.strip()
        if _WHITESPACE.search(candidate):
            raise InvalidUrlError("URL must not contain whitespace.")
        if "github.com" not in candidate.lower():
            raise InvalidUrlError("URL must point to github.com.")
        return candidate

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["AnalysisRun", "Orchestrator"]
