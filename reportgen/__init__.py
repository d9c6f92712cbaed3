"""Generate HTML progress reports from local git history."""

from .models import (
    CommitRecord,
    NarrativeResult,
    OverviewResult,
    ProjectMetadata,
    ReportRequest,
    ReportResponse,
    RepositoryRef,
)
from .orchestrator import ReportOrchestrator

__version__ = "1.0.0"

__all__ = [
    "CommitRecord",
    "NarrativeResult",
    "OverviewResult",
    "ProjectMetadata",
    "ReportOrchestrator",
    "ReportRequest",
    "ReportResponse",
    "RepositoryRef",
]
