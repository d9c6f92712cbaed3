"""Fixed-width commit table embedded in generation prompts."""

from __future__ import annotations

from typing import Sequence

from ..models import CommitRecord
from .constants import NO_COMMITS_TABLE

DATE_WIDTH = 10
REPO_WIDTH = 23
HASH_WIDTH = 9
AUTHOR_WIDTH = 7

TABLE_HEADER = (
    "| Date       | Repo                    | Commit ID | Author  "
    "| Message                          |"
)
TABLE_SEPARATOR = (
    "| ---------- | ----------------------- | --------- | ------- "
    "| -------------------------------- |"
)


def format_commit_row(commit: CommitRecord) -> str:
    # Widths are minimums; longer values are never truncated.
    return (
        f"| {commit.date.isoformat():<{DATE_WIDTH}} "
        f"| {commit.repo:<{REPO_WIDTH}} "
        f"| {commit.hash:<{HASH_WIDTH}} "
        f"| {commit.author:<{AUTHOR_WIDTH}} "
        f"| {commit.message} |"
    )


def format_commit_table(commits: Sequence[CommitRecord]) -> str:
    """Render commits as a pipe-delimited table, one line per commit."""
    if not commits:
        return NO_COMMITS_TABLE
    lines = [TABLE_HEADER, TABLE_SEPARATOR]
    lines.extend(format_commit_row(commit) for commit in commits)
    return "\n".join(lines)


__all__ = ["TABLE_HEADER", "TABLE_SEPARATOR", "format_commit_row", "format_commit_table"]
