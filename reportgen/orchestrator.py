"""Report pipeline orchestration: discover, extract, narrate, synthesise."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

from .config import LLMConfig, ReportGenConfig
from .discovery import RepoDiscoverer
from .errors import ReportError, ReportGenerationError, ReportValidationError
from .git.log import CommitExtractor
from .llm.runner import LLMRunner
from .logging import get_logger
from .metadata import MetadataExtractor
from .models import (
    CommitRecord,
    NarrativeResult,
    OverviewResult,
    ProjectMetadata,
    ReportRequest,
    ReportResponse,
    RepositoryRef,
)
from .narrative import NarrativeGenerator, OverviewSynthesizer, TextGenerator
from .prompting.builder import PromptBuilder

MISSING_REPO_PATHS_MESSAGE = "Missing required fields: repoPaths are required"


class ReportOrchestrator:
    """Coordinates one report request across the requested repositories.

    Each repository runs its own pipeline (metadata, commits, narrative).
    Pipelines are started together and joined in request order; the overview
    is generated afterwards when more than one repository was requested.
    Blocking steps run in the event loop's default executor.
    """

    def __init__(
        self,
        config: ReportGenConfig | None = None,
        *,
        discoverer: RepoDiscoverer | None = None,
        metadata_extractor: MetadataExtractor | None = None,
        commit_extractor: CommitExtractor | None = None,
        prompt_builder: PromptBuilder | None = None,
        llm_runner: TextGenerator | None = None,
    ) -> None:
        self.config = config
        self.discoverer = discoverer or RepoDiscoverer()
        self.metadata_extractor = metadata_extractor or MetadataExtractor()
        self.commit_extractor = commit_extractor or CommitExtractor()
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._llm_runner = llm_runner
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # Discovery

    def discover(self, root: str | Path | None = None) -> List[RepositoryRef]:
        """Return repositories under ``root`` or the configured search root."""
        search_root = root or (self.config.search_root if self.config else None)
        if search_root is None:
            self.logger.warning("No repository search root configured; set search_root or REPORTGEN_SEARCH_ROOT")
            return []
        return self.discoverer.discover(search_root)

    # ------------------------------------------------------------------
    # Report generation

    async def generate(self, request: ReportRequest) -> ReportResponse:
        """Run the full pipeline for ``request``.

        Raises ``ReportValidationError`` when no repository is named and
        ``ReportGenerationError`` for any other request-level failure.
        """
        if not request.repo_paths:
            raise ReportValidationError(MISSING_REPO_PATHS_MESSAGE)

        self.logger.info(
            "Generating report for %d repositories (%s to %s)",
            len(request.repo_paths),
            request.start_date,
            request.end_date,
        )
        try:
            runner = self._resolve_llm_runner()
            narrator = NarrativeGenerator(runner, self.prompt_builder)
            summaries = await self._run_pipelines(request, narrator)

            overview: Optional[OverviewResult] = None
            if len(request.repo_paths) > 1:
                synthesizer = OverviewSynthesizer(runner, self.prompt_builder)
                overview = await self._in_executor(
                    synthesizer.synthesize, summaries, request.start_date, request.end_date
                )
        except ReportError:
            raise
        except Exception as exc:
            self.logger.error("Error generating summary: %s", exc, exc_info=True)
            raise ReportGenerationError(str(exc) or None) from exc

        response = ReportResponse(overview=overview, summaries=summaries)
        self.logger.info(
            "Report ready: %d repositories, %d commits", response.repo_count, response.total_commits
        )
        return response

    async def _run_pipelines(
        self, request: ReportRequest, narrator: NarrativeGenerator
    ) -> List[NarrativeResult]:
        tasks = [
            self._in_executor(self._run_repository, path, request, narrator)
            for path in request.repo_paths
        ]
        # Join-all: one failing pipeline never cancels its siblings.
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        failures = [
            (path, outcome)
            for path, outcome in zip(request.repo_paths, outcomes)
            if isinstance(outcome, BaseException)
        ]
        for path, failure in failures:
            self.logger.error("Narrative generation failed for %s: %s", path, failure)
        if failures:
            raise failures[0][1]
        return [outcome for outcome in outcomes if isinstance(outcome, NarrativeResult)]

    def _run_repository(
        self, path: str, request: ReportRequest, narrator: NarrativeGenerator
    ) -> NarrativeResult:
        repo = RepositoryRef.from_path(path)
        metadata = self._safe_metadata(repo)
        commits = self._safe_commits(repo, request.start_date, request.end_date)
        summary = narrator.generate(
            metadata, commits, request.start_date, request.end_date, request.next_steps
        )
        return NarrativeResult(
            repo_name=metadata.name,
            repo_path=path,
            summary_html=summary,
            commits=commits,
        )

    def _safe_metadata(self, repo: RepositoryRef) -> ProjectMetadata:
        try:
            return self.metadata_extractor.extract(repo)
        except Exception as exc:
            self.logger.warning("Could not extract metadata from %s: %s", repo.path, exc)
            return ProjectMetadata(name=repo.name)

    def _safe_commits(self, repo: RepositoryRef, start_date: str, end_date: str) -> List[CommitRecord]:
        try:
            return self.commit_extractor.extract(repo, start_date, end_date)
        except Exception as exc:
            self.logger.warning("Error reading repo %s: %s", repo.path, exc, exc_info=True)
            return []

    @staticmethod
    async def _in_executor(func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _resolve_llm_runner(self) -> TextGenerator:
        if self._llm_runner is None:
            llm_config = self.config.llm if self.config and self.config.llm else LLMConfig()
            self._llm_runner = build_llm_runner(llm_config)
        return self._llm_runner


def build_llm_runner(llm_config: LLMConfig) -> LLMRunner:
    """Create an ``LLMRunner`` from file configuration, deferring to env defaults."""
    kwargs: dict[str, object] = {}
    if llm_config.temperature is not None:
        kwargs["temperature"] = llm_config.temperature
    if llm_config.request_timeout is not None:
        kwargs["request_timeout"] = llm_config.request_timeout
    return LLMRunner(
        llm_config.model,
        backend=llm_config.runner,
        base_url=llm_config.base_url,
        api_key=llm_config.api_key,
        max_tokens=llm_config.max_tokens,
        **kwargs,  # type: ignore[arg-type]
    )


def serialize_repositories(repos: Sequence[RepositoryRef]) -> List[dict[str, str]]:
    """Serialise discovered repositories for selection UIs."""
    return [{"path": str(repo.path), "name": repo.name} for repo in repos]


__all__ = [
    "MISSING_REPO_PATHS_MESSAGE",
    "ReportOrchestrator",
    "build_llm_runner",
    "serialize_repositories",
]
