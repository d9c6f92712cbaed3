"""Core data models shared across reportgen components."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class RepositoryRef:
    """A git repository on disk, identified by its path."""

    path: Path
    name: str

    @classmethod
    def from_path(cls, path: str | Path) -> "RepositoryRef":
        resolved = Path(path)
        try:
            resolved = resolved.expanduser()
        except RuntimeError:
            # Unknown "~user" prefix; keep the path as given so it reads as missing.
            pass
        return cls(path=resolved, name=resolved.name or str(resolved))


@dataclass
class ProjectMetadata:
    """Display name and optional goal statement for a project."""

    name: str
    goal: Optional[str] = None


@dataclass(frozen=True)
class CommitRecord:
    """One normalised git log entry."""

    date: date
    repo: str
    hash: str
    author: str
    message: str
    email: str = ""


@dataclass
class NarrativeResult:
    """Generated narrative for one requested repository."""

    repo_name: str
    repo_path: str
    summary_html: str
    commits: List[CommitRecord] = field(default_factory=list)

    @property
    def commit_count(self) -> int:
        return len(self.commits)


@dataclass
class OverviewResult:
    """Cross-repository executive narrative."""

    html: str


@dataclass
class ReportRequest:
    """Inputs for a single report run."""

    repo_paths: List[str]
    start_date: str
    end_date: str
    next_steps: Optional[str] = None


@dataclass
class ReportResponse:
    """Assembled output of a report run."""

    overview: Optional[OverviewResult]
    summaries: List[NarrativeResult]

    @property
    def total_commits(self) -> int:
        return sum(result.commit_count for result in self.summaries)

    @property
    def repo_count(self) -> int:
        return len(self.summaries)
