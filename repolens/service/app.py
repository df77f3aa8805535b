"""FastAPI application entrypoint for repolens service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import RepoLensConfig
from ..errors import AnalysisCancelled, AnalysisError, FetchError, InvalidUrlError
from ..models import AnalysisResult
from ..orchestrator import Orchestrator
from ..sinks import ResultStore, StatusLog


class AnalyzeRequest(BaseModel):
    url: str


class GridRow(BaseModel):
    path: str
    line_count: int
    complexity: int


class DiaRow(BaseModel):
    path: str
    abstractness: float
    instability: float
    distance: float
    incoming: int
    outgoing: int


class AnalysisResponse(BaseModel):
    source: str
    grid: List[GridRow]
    dia: List[DiaRow]
    uml: str
    summary: str


class StatusResponse(BaseModel):
    status: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _to_response(result: AnalysisResult) -> AnalysisResponse:
    payload = result.to_dict()
    return AnalysisResponse(
        source=payload["source"],
        grid=[GridRow(**row) for row in payload["grid"]],
        dia=[DiaRow(**row) for row in payload["dia"]],
        uml=payload["uml"],
        summary=result.summary(),
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] | None = None,
    *,
    config: RepoLensConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing repolens operations."""

    app = FastAPI(title="repolens", version="1.0.0")

    if orchestrator_factory is not None:
        orchestrator = orchestrator_factory()
    else:
        orchestrator = Orchestrator(config=config, status_sink=StatusLog(), result_sink=ResultStore())
    app.state.orchestrator = orchestrator

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalysisResponse)
    async def analyze(payload: AnalyzeRequest) -> AnalysisResponse:
        # The pipeline blocks on network I/O; keep it off the event loop.
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, orchestrator.analyze, payload.url)
        return _to_response(result)

    @app.get("/result", response_model=AnalysisResponse)
    async def get_result(folder: Optional[str] = None) -> AnalysisResponse:
        snapshot = _snapshot(orchestrator)
        if snapshot is None:
            raise HTTPException(status_code=404, detail="No analysis result available")
        return _to_response(snapshot.for_folder(folder))

    @app.delete("/result")
    async def clear_result() -> dict[str, str]:
        orchestrator.clear()
        return {"status": "cleared"}

    @app.get("/status", response_model=StatusResponse)
    async def status() -> StatusResponse:
        sink = orchestrator.status_sink
        return StatusResponse(status=getattr(sink, "latest", None))

    @app.exception_handler(InvalidUrlError)
    async def invalid_url_handler(_: Any, exc: InvalidUrlError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(FetchError)
    async def fetch_error_handler(_: Any, exc: FetchError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(AnalysisCancelled)
    async def cancelled_handler(_: Any, exc: AnalysisCancelled) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": f"Analysis superseded: {exc}"})

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(_: Any, exc: AnalysisError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def _snapshot(orchestrator: Orchestrator) -> Optional[AnalysisResult]:
    snapshot = getattr(orchestrator.result_sink, "snapshot", None)
    if snapshot is None:
        return None
    return snapshot()


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, config: RepoLensConfig | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=host, port=port)
