"""Locates git repositories beneath a search root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List

from .logging import get_logger
from .models import RepositoryRef

GIT_MARKER = ".git"

_EXCLUDED_DIRS = {"node_modules"}


class RepoDiscoverer:
    """Walks a directory tree looking for `.git` directories."""

    def __init__(
        self,
        *,
        max_depth: int = 2,
        excluded_dirs: Iterable[str] | None = None,
    ) -> None:
        # Depth counts the marker itself: max_depth=2 finds ROOT/.git and ROOT/*/.git.
        self.max_depth = max_depth
        self.excluded_dirs = set(excluded_dirs) if excluded_dirs is not None else set(_EXCLUDED_DIRS)
        self.logger = get_logger("discovery")

    def discover(self, root: str | Path) -> List[RepositoryRef]:
        """Return repositories under ``root`` in filesystem traversal order."""
        root_path = Path(root).expanduser()
        if not root_path.is_dir():
            self.logger.warning("Repository search root is not a readable directory: %s", root_path)
            return []

        def _on_error(exc: OSError) -> None:
            self.logger.warning("Could not read %s: %s", exc.filename, exc.strerror or exc)

        repositories: List[RepositoryRef] = []
        for dirpath, dirnames, _ in os.walk(root_path, onerror=_on_error):
            current = Path(dirpath)
            depth = len(current.relative_to(root_path).parts)

            if GIT_MARKER in dirnames and (current / GIT_MARKER).is_dir():
                repositories.append(RepositoryRef.from_path(current))

            if depth + 1 >= self.max_depth:
                dirnames[:] = []
                continue
            dirnames[:] = [
                name
                for name in dirnames
                if name != GIT_MARKER and name not in self.excluded_dirs
            ]

        self.logger.debug("Discovered %d repositories under %s", len(repositories), root_path)
        return repositories


__all__ = ["GIT_MARKER", "RepoDiscoverer"]
