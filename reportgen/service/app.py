"""FastAPI application serving the report form and JSON API."""

from __future__ import annotations

import asyncio
import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import load_config
from ..errors import ReportError, ReportGenerationError, ReportValidationError
from ..logging import get_logger, uvicorn_log_level
from ..models import ReportRequest, ReportResponse
from ..orchestrator import ReportOrchestrator, serialize_repositories

STATIC_DIR = Path(__file__).with_name("static")

logger = get_logger("service")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateSummaryRequest(_CamelModel):
    repo_paths: Optional[List[str]] = Field(None, alias="repoPaths")
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    next_steps: Optional[str] = Field(None, alias="nextSteps")


class CommitPayload(_CamelModel):
    date: datetime.date
    repo: str
    hash: str
    author: str
    message: str


class RepoSummaryPayload(_CamelModel):
    repo_name: str = Field(alias="repoName")
    repo_path: str = Field(alias="repoPath")
    summary: str
    commits_count: int = Field(alias="commitsCount")
    commits: List[CommitPayload]


class GenerateSummaryResponse(_CamelModel):
    overview_summary: Optional[str] = Field(None, alias="overviewSummary")
    summaries: List[RepoSummaryPayload]
    total_commits: int = Field(alias="totalCommits")
    repo_count: int = Field(alias="repoCount")


class RepositoryPayload(BaseModel):
    path: str
    name: str


class DiscoverResponse(BaseModel):
    repositories: List[RepositoryPayload]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> ReportOrchestrator:
    return ReportOrchestrator(load_config(Path.cwd()))


def to_response_payload(response: ReportResponse) -> GenerateSummaryResponse:
    return GenerateSummaryResponse(
        overview_summary=response.overview.html if response.overview else None,
        summaries=[
            RepoSummaryPayload(
                repo_name=result.repo_name,
                repo_path=result.repo_path,
                summary=result.summary_html,
                commits_count=result.commit_count,
                commits=[
                    CommitPayload(
                        date=commit.date,
                        repo=commit.repo,
                        hash=commit.hash,
                        author=commit.author,
                        message=commit.message,
                    )
                    for commit in result.commits
                ],
            )
            for result in response.summaries
        ],
        total_commits=response.total_commits,
        repo_count=response.repo_count,
    )


def create_app(
    orchestrator_factory: Callable[[], ReportOrchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing report operations."""

    app = FastAPI(title="reportgen", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def build_orchestrator() -> ReportOrchestrator:
        # Built per request; nothing is shared between requests.
        try:
            return orchestrator_factory()
        except ReportError:
            raise
        except Exception as exc:
            logger.error("Could not initialise report service: %s", exc)
            raise ReportGenerationError(str(exc) or None) from exc

    async def get_orchestrator() -> ReportOrchestrator:
        return build_orchestrator()

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/api/discover-repos", response_model=DiscoverResponse)
    async def discover_repos() -> DiscoverResponse:
        loop = asyncio.get_running_loop()
        try:
            orchestrator = build_orchestrator()
            repos = await loop.run_in_executor(None, orchestrator.discover)
        except Exception as exc:
            logger.error("Error discovering repos: %s", exc, exc_info=True)
            repos = []
        return DiscoverResponse(
            repositories=[RepositoryPayload(**item) for item in serialize_repositories(repos)]
        )

    @app.post("/api/generate-summary", response_model=GenerateSummaryResponse)
    async def generate_summary(
        payload: GenerateSummaryRequest,
        orchestrator: ReportOrchestrator = Depends(get_orchestrator),
    ) -> GenerateSummaryResponse:
        request = ReportRequest(
            repo_paths=list(payload.repo_paths or []),
            start_date=payload.start_date or "",
            end_date=payload.end_date or "",
            next_steps=payload.next_steps,
        )
        response = await orchestrator.generate(request)
        return to_response_payload(response)

    @app.exception_handler(ReportValidationError)
    async def validation_error_handler(_: Any, exc: ReportValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ReportGenerationError)
    async def generation_error_handler(_: Any, exc: ReportGenerationError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 3001) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port, log_level=uvicorn_log_level())
