"""Commit history extraction from `git log`."""

from __future__ import annotations

import subprocess
from datetime import date
from typing import Iterable, List, Sequence

from ..errors import MalformedLogLine
from ..logging import get_logger
from ..models import CommitRecord, RepositoryRef
from .command import CommandRunner, run_command

LOG_DELIMITER = "|"
# short hash | author date (ISO-like) | subject | author name | author email
LOG_FORMAT = "%h|%ai|%s|%an|%ae"
LOG_FIELD_COUNT = 5


def build_log_command(start_date: str, end_date: str) -> List[str]:
    """Return the git invocation for commits between the two dates."""
    return [
        "git",
        "log",
        f"--since={start_date}",
        f"--until={end_date}",
        f"--format={LOG_FORMAT}",
    ]


def parse_log_line(line: str, repo_name: str) -> CommitRecord:
    """Parse one ``LOG_FORMAT`` line into a commit record.

    Exactly ``LOG_FIELD_COUNT`` fields are expected. A subject that itself
    contains the delimiter produces extra fields; those are folded back into
    the subject since the hash/date lead and the author fields trail.
    """
    fields = line.split(LOG_DELIMITER)
    if len(fields) < LOG_FIELD_COUNT:
        raise MalformedLogLine(
            f"expected {LOG_FIELD_COUNT} fields, got {len(fields)}: {line!r}"
        )
    commit_hash, stamp = fields[0].strip(), fields[1].strip()
    author, email = fields[-2], fields[-1]
    subject = LOG_DELIMITER.join(fields[2:-2])
    if not commit_hash:
        raise MalformedLogLine(f"missing commit hash: {line!r}")
    if not stamp:
        raise MalformedLogLine(f"missing author date: {line!r}")

    try:
        commit_date = date.fromisoformat(stamp.split(" ")[0])
    except ValueError as exc:
        raise MalformedLogLine(f"unparseable author date {stamp!r}") from exc

    return CommitRecord(
        date=commit_date,
        repo=repo_name,
        hash=commit_hash,
        author=author.strip(),
        message=subject,
        email=email.strip(),
    )


def sort_commits(commits: Iterable[CommitRecord]) -> List[CommitRecord]:
    """Sort ascending by calendar date; equal dates keep their input order."""
    return sorted(commits, key=lambda commit: commit.date)


class CommitExtractor:
    """Reads and normalises commit history for one repository."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or run_command
        self.logger = get_logger("git.log")

    def extract(
        self, repo: RepositoryRef, start_date: str, end_date: str
    ) -> List[CommitRecord]:
        """Return commits in ``[start_date, end_date]``, or [] when git fails."""
        try:
            output = self._runner(build_log_command(start_date, end_date), repo.path)
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.strip() if isinstance(exc.stderr, str) else ""
            self.logger.warning(
                "git log failed for %s (exit %s): %s", repo.path, exc.returncode, stderr
            )
            return []
        except OSError as exc:
            self.logger.warning("Error reading repo %s: %s", repo.path, exc)
            return []

        commits = list(self._parse_lines(output.splitlines(), repo.name))
        self.logger.debug("Read %d commits from %s", len(commits), repo.path)
        return sort_commits(commits)

    def _parse_lines(self, lines: Sequence[str], repo_name: str) -> Iterable[CommitRecord]:
        for line in lines:
            if not line.strip():
                continue
            try:
                yield parse_log_line(line, repo_name)
            except MalformedLogLine as exc:
                self.logger.debug("Skipping log line for %s: %s", repo_name, exc)


__all__ = [
    "CommitExtractor",
    "LOG_DELIMITER",
    "LOG_FIELD_COUNT",
    "LOG_FORMAT",
    "build_log_command",
    "parse_log_line",
    "sort_commits",
]
