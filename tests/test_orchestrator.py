"""Tests for reportgen.orchestrator."""

from __future__ import annotations

import asyncio
import threading
from datetime import date
from pathlib import Path

import pytest

from reportgen.config import LLMConfig, ReportGenConfig
from reportgen.errors import LLMError, ReportGenerationError, ReportValidationError
from reportgen.llm.runner import LLMRunner
from reportgen.models import CommitRecord, ProjectMetadata, ReportRequest, RepositoryRef
from reportgen.orchestrator import (
    MISSING_REPO_PATHS_MESSAGE,
    ReportOrchestrator,
    build_llm_runner,
)
from reportgen.prompting.constants import SYSTEM_PROMPTS, PromptMode


class RecordingLLMRunner:
    """Runner double that records prompts and echoes the project name."""

    def __init__(self, fail_for: str | None = None) -> None:
        self.fail_for = fail_for
        self.calls: list[dict[str, object]] = []
        self._lock = threading.Lock()

    def run(self, prompt: str, *, system: str | None = None) -> str:
        with self._lock:
            self.calls.append({"prompt": prompt, "system": system})
        if self.fail_for and f"project_name: {self.fail_for}" in prompt:
            raise LLMError(f"quota exceeded for {self.fail_for}")
        if system == SYSTEM_PROMPTS[PromptMode.OVERVIEW]:
            return "<div>overview</div>"
        name = next(
            line.split(": ", 1)[1] for line in prompt.splitlines() if line.startswith("project_name: ")
        )
        return f"<div>{name} narrative</div>"

    def overview_calls(self) -> list[dict[str, object]]:
        return [call for call in self.calls if call["system"] == SYSTEM_PROMPTS[PromptMode.OVERVIEW]]


class StubMetadataExtractor:
    def extract(self, repo: RepositoryRef) -> ProjectMetadata:
        return ProjectMetadata(name=repo.name, goal=f"{repo.name} goal")


class StubCommitExtractor:
    """Serves canned commits per repository name; raises for names in ``broken``."""

    def __init__(self, commits: dict[str, list[CommitRecord]], broken: set[str] | None = None) -> None:
        self.commits = commits
        self.broken = broken or set()
        self.calls: list[tuple[str, str, str]] = []

    def extract(self, repo: RepositoryRef, start_date: str, end_date: str) -> list[CommitRecord]:
        self.calls.append((repo.name, start_date, end_date))
        if repo.name in self.broken:
            raise RuntimeError(f"cannot read {repo.name}")
        return list(self.commits.get(repo.name, []))


def _commit(repo: str, day: int, sha: str) -> CommitRecord:
    return CommitRecord(date(2025, 1, day), repo, sha, "Dana", f"{repo} work {day}")


def _scenario_commits() -> dict[str, list[CommitRecord]]:
    return {
        "repo-a": [_commit("repo-a", 2, "a1"), _commit("repo-a", 5, "a2")],
        "repo-b": [_commit("repo-b", 3, "b1")],
    }


def _orchestrator(
    runner: RecordingLLMRunner,
    commit_extractor: StubCommitExtractor,
) -> ReportOrchestrator:
    return ReportOrchestrator(
        metadata_extractor=StubMetadataExtractor(),  # type: ignore[arg-type]
        commit_extractor=commit_extractor,  # type: ignore[arg-type]
        llm_runner=runner,
    )


def _request(*paths: str, next_steps: str | None = None) -> ReportRequest:
    return ReportRequest(
        repo_paths=list(paths),
        start_date="2025-01-01",
        end_date="2025-01-31",
        next_steps=next_steps,
    )


def test_empty_request_fails_validation_without_work() -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor({})

    with pytest.raises(ReportValidationError) as excinfo:
        asyncio.run(_orchestrator(runner, extractor).generate(_request()))

    assert str(excinfo.value) == MISSING_REPO_PATHS_MESSAGE
    assert extractor.calls == []
    assert runner.calls == []


def test_single_repository_has_no_overview() -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor(_scenario_commits())

    response = asyncio.run(_orchestrator(runner, extractor).generate(_request("/src/repo-a")))

    assert response.overview is None
    assert response.repo_count == 1
    assert response.total_commits == 2
    [summary] = response.summaries
    assert summary.repo_name == "repo-a"
    assert summary.repo_path == "/src/repo-a"
    assert summary.summary_html == "<div>repo-a narrative</div>"
    assert summary.commit_count == len(summary.commits) == 2
    assert runner.overview_calls() == []
    assert extractor.calls == [("repo-a", "2025-01-01", "2025-01-31")]


def test_results_follow_request_order_and_overview_merges_chronologically() -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor(_scenario_commits())

    response = asyncio.run(
        _orchestrator(runner, extractor).generate(_request("/src/repo-b", "/src/repo-a"))
    )

    assert [summary.repo_name for summary in response.summaries] == ["repo-b", "repo-a"]
    assert response.overview is not None
    assert response.overview.html == "<div>overview</div>"
    assert response.total_commits == 3
    assert response.repo_count == 2

    [overview_call] = runner.overview_calls()
    table = str(overview_call["prompt"]).split("# MERGED COMMITS TABLE\n", 1)[1]
    rows = table.splitlines()[2:]
    assert [row.split("|")[3].strip() for row in rows] == ["a1", "b1", "a2"]


def test_next_steps_reach_each_narrative_prompt() -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor(_scenario_commits())

    asyncio.run(
        _orchestrator(runner, extractor).generate(
            _request("/src/repo-a", "/src/repo-b", next_steps="Beta launch")
        )
    )

    narrative_calls = [call for call in runner.calls if call not in runner.overview_calls()]
    assert len(narrative_calls) == 2
    assert all("next_steps:\nBeta launch" in str(call["prompt"]) for call in narrative_calls)


def test_extractor_failure_is_isolated_to_its_repository(caplog) -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor(_scenario_commits(), broken={"repo-a"})

    with caplog.at_level("WARNING", logger="reportgen.orchestrator"):
        response = asyncio.run(
            _orchestrator(runner, extractor).generate(_request("/src/repo-a", "/src/repo-b"))
        )

    broken, healthy = response.summaries
    assert broken.commits == []
    assert "No commits found for repo-a" in broken.summary_html
    assert healthy.summary_html == "<div>repo-b narrative</div>"
    assert response.total_commits == 1
    assert "cannot read repo-a" in caplog.text


def test_missing_repository_path_reports_zero_commits(tmp_path: Path) -> None:
    runner = RecordingLLMRunner()
    orchestrator = ReportOrchestrator(llm_runner=runner)
    missing = tmp_path / "nowhere"

    response = asyncio.run(orchestrator.generate(_request(str(missing))))

    [summary] = response.summaries
    assert summary.commits == []
    assert summary.commit_count == 0
    assert "No commits found for nowhere between 2025-01-01 and 2025-01-31." in summary.summary_html
    assert runner.calls == []


def test_unexpandable_home_path_reports_zero_commits_without_aborting_siblings() -> None:
    runner = RecordingLLMRunner()
    extractor = StubCommitExtractor(_scenario_commits())

    response = asyncio.run(
        _orchestrator(runner, extractor).generate(
            _request("~no_such_user_zz/repo-c", "/src/repo-b")
        )
    )

    unknown, healthy = response.summaries
    assert unknown.repo_path == "~no_such_user_zz/repo-c"
    assert unknown.repo_name == "repo-c"
    assert unknown.commits == []
    assert "No commits found for repo-c" in unknown.summary_html
    assert healthy.summary_html == "<div>repo-b narrative</div>"
    assert response.total_commits == 1


def test_unexpandable_home_path_with_real_extractors(tmp_path: Path) -> None:
    runner = RecordingLLMRunner()
    orchestrator = ReportOrchestrator(llm_runner=runner)

    response = asyncio.run(
        orchestrator.generate(_request("~no_such_user_zz/alpha", str(tmp_path / "missing")))
    )

    assert [summary.repo_name for summary in response.summaries] == ["alpha", "missing"]
    assert all(summary.commit_count == 0 for summary in response.summaries)
    assert response.overview is not None
    assert [call for call in runner.calls if call not in runner.overview_calls()] == []


def test_generation_failure_fails_request_after_siblings_finish() -> None:
    runner = RecordingLLMRunner(fail_for="repo-a")
    extractor = StubCommitExtractor(_scenario_commits())

    with pytest.raises(ReportGenerationError) as excinfo:
        asyncio.run(
            _orchestrator(runner, extractor).generate(_request("/src/repo-a", "/src/repo-b"))
        )

    assert "quota exceeded for repo-a" in str(excinfo.value)
    assert {name for name, _, _ in extractor.calls} == {"repo-a", "repo-b"}
    assert any("project_name: repo-b" in str(call["prompt"]) for call in runner.calls)
    assert runner.overview_calls() == []


def test_overview_failure_is_request_level() -> None:
    class OverviewFailingRunner(RecordingLLMRunner):
        def run(self, prompt: str, *, system: str | None = None) -> str:
            if system == SYSTEM_PROMPTS[PromptMode.OVERVIEW]:
                raise LLMError("")
            return super().run(prompt, system=system)

    extractor = StubCommitExtractor(_scenario_commits())

    with pytest.raises(ReportGenerationError) as excinfo:
        asyncio.run(
            _orchestrator(OverviewFailingRunner(), extractor).generate(
                _request("/src/repo-a", "/src/repo-b")
            )
        )

    assert str(excinfo.value) == "Failed to generate summary"


def test_discover_uses_configured_search_root(tmp_path: Path) -> None:
    (tmp_path / "alpha" / ".git").mkdir(parents=True)
    config = ReportGenConfig(root=tmp_path, search_root=tmp_path)

    repos = ReportOrchestrator(config).discover()

    assert [repo.name for repo in repos] == ["alpha"]


def test_discover_without_search_root_returns_empty(caplog) -> None:
    with caplog.at_level("WARNING", logger="reportgen.orchestrator"):
        assert ReportOrchestrator().discover() == []
    assert "No repository search root configured" in caplog.text


def test_build_llm_runner_applies_config() -> None:
    runner = build_llm_runner(
        LLMConfig(
            runner="http",
            model="local-model",
            base_url="http://localhost:8080/v1/",
            temperature=0.4,
            max_tokens=512,
            request_timeout=30,
        )
    )

    assert isinstance(runner, LLMRunner)
    assert runner.backend == "http"
    assert runner.model == "local-model"
    assert runner.base_url == "http://localhost:8080/v1"
    assert runner.temperature == 0.4
    assert runner.max_tokens == 512
    assert runner.request_timeout == 30
