"""Per-repository narratives and the cross-repository overview."""

from __future__ import annotations

from typing import Iterable, List, Protocol, Sequence

from .failsafe import build_no_commits_fragment
from .git.log import sort_commits
from .logging import get_logger
from .models import CommitRecord, NarrativeResult, OverviewResult, ProjectMetadata
from .prompting.builder import PromptBuilder, PromptRequest


class TextGenerator(Protocol):
    def run(self, prompt: str, *, system: str | None = None) -> str:
        ...


def merge_commits(results: Iterable[NarrativeResult]) -> List[CommitRecord]:
    """Union every repository's commits and re-sort the lot by date."""
    merged: List[CommitRecord] = []
    for result in results:
        merged.extend(result.commits)
    return sort_commits(merged)


class NarrativeGenerator:
    """Turns one repository's commits into an HTML narrative."""

    def __init__(self, runner: TextGenerator, prompt_builder: PromptBuilder | None = None) -> None:
        self.runner = runner
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("narrative")

    def generate(
        self,
        metadata: ProjectMetadata,
        commits: Sequence[CommitRecord],
        start_date: str,
        end_date: str,
        next_steps: str | None = None,
    ) -> str:
        if not commits:
            self.logger.info("No commits for %s between %s and %s", metadata.name, start_date, end_date)
            return build_no_commits_fragment(metadata.name, start_date, end_date)

        request = self.prompt_builder.build_narrative_prompt(
            metadata, commits, start_date, end_date, next_steps
        )
        self.logger.info("Generating narrative for %s from %d commits", metadata.name, len(commits))
        return _invoke(self.runner, request)


class OverviewSynthesizer:
    """Produces one executive narrative across several repositories."""

    def __init__(self, runner: TextGenerator, prompt_builder: PromptBuilder | None = None) -> None:
        self.runner = runner
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.logger = get_logger("overview")

    def synthesize(
        self,
        results: Sequence[NarrativeResult],
        start_date: str,
        end_date: str,
    ) -> OverviewResult:
        merged = merge_commits(results)
        request = self.prompt_builder.build_overview_prompt(results, merged, start_date, end_date)
        self.logger.info(
            "Generating overview across %d repositories (%d commits)", len(results), len(merged)
        )
        return OverviewResult(html=_invoke(self.runner, request))


def _invoke(runner: TextGenerator, request: PromptRequest) -> str:
    # Output is passed through verbatim; callers own any sanitising.
    return runner.run(request.prompt, system=request.system)


__all__ = ["NarrativeGenerator", "OverviewSynthesizer", "TextGenerator", "merge_commits"]
