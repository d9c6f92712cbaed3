"""Git-backed commit extraction."""

from .log import CommitExtractor, parse_log_line, sort_commits

__all__ = ["CommitExtractor", "parse_log_line", "sort_commits"]
