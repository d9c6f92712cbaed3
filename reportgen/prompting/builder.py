"""Builds generation prompts from project metadata and commit tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Sequence

from ..models import CommitRecord, NarrativeResult, ProjectMetadata
from .constants import (
    AUDIENCE,
    EMPHASIS_NOTES,
    GENERIC_GOAL,
    OVERVIEW_EMPHASIS_NOTES,
    SYSTEM_PROMPTS,
    PromptMode,
)
from .table import format_commit_table


@dataclass(frozen=True)
class PromptRequest:
    """A system instruction paired with the runtime context for one call."""

    mode: PromptMode
    system: str
    prompt: str


class PromptBuilder:
    """Assembles the structured runtime input sent alongside a system prompt."""

    def __init__(self, system_prompts: Mapping[PromptMode, str] | None = None) -> None:
        self.system_prompts = dict(SYSTEM_PROMPTS)
        if system_prompts:
            self.system_prompts.update(system_prompts)

    def build_narrative_prompt(
        self,
        metadata: ProjectMetadata,
        commits: Sequence[CommitRecord],
        start_date: str,
        end_date: str,
        next_steps: str | None = None,
    ) -> PromptRequest:
        lines = [
            "# PROJECT CONTEXT",
            f"project_name: {metadata.name}",
            f"project_goal: {metadata.goal or GENERIC_GOAL}",
            f"audience: {AUDIENCE}",
            f"date_range: {start_date} to {end_date}",
            f"commit_count: {len(commits)}",
            "",
            "notes_for_emphasis:",
        ]
        lines.extend(f"- {note}" for note in EMPHASIS_NOTES)
        lines.extend(self._next_steps_block(next_steps))
        lines.extend(["", "# COMMITS TABLE", format_commit_table(commits)])
        return self._request(PromptMode.NARRATIVE, lines)

    def build_overview_prompt(
        self,
        results: Sequence[NarrativeResult],
        merged_commits: Sequence[CommitRecord],
        start_date: str,
        end_date: str,
    ) -> PromptRequest:
        total = sum(result.commit_count for result in results)
        lines = [
            "# PORTFOLIO CONTEXT",
            f"projects: {', '.join(result.repo_name for result in results)}",
            f"project_count: {len(results)}",
            f"total_commits: {total}",
            f"audience: {AUDIENCE}",
            f"date_range: {start_date} to {end_date}",
            "",
            "notes_for_emphasis:",
        ]
        lines.extend(f"- {note}" for note in OVERVIEW_EMPHASIS_NOTES)
        lines.extend(["", "# PROJECT UPDATES"])
        for result in results:
            lines.extend(
                [
                    "",
                    f"## {result.repo_name} ({result.commit_count} commits)",
                    result.summary_html,
                ]
            )
        lines.extend(["", "# MERGED COMMITS TABLE", format_commit_table(merged_commits)])
        return self._request(PromptMode.OVERVIEW, lines)

    @staticmethod
    def _next_steps_block(next_steps: str | None) -> List[str]:
        if not next_steps or not next_steps.strip():
            return []
        return ["", "next_steps:", next_steps.strip()]

    def _request(self, mode: PromptMode, lines: Sequence[str]) -> PromptRequest:
        return PromptRequest(
            mode=mode,
            system=self.system_prompts[mode],
            prompt="\n".join(lines),
        )


__all__ = ["PromptBuilder", "PromptRequest"]
