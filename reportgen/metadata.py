"""Project name and goal resolution for a repository."""

from __future__ import annotations

import json
import subprocess
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from .git.command import CommandRunner, run_command
from .logging import get_logger
from .models import ProjectMetadata, RepositoryRef

GIT_DEFAULT_DESCRIPTION = (
    "Unnamed repository; edit this file 'description' to name the repository."
)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution step: an optional value and why it is missing."""

    value: Optional[str] = None
    diagnostic: Optional[str] = None


@dataclass(frozen=True)
class ManifestInfo:
    name: Optional[str] = None
    description: Optional[str] = None
    diagnostic: Optional[str] = None


class MetadataExtractor:
    """Derives project metadata from manifests and git settings.

    Steps run left to right and never raise; the first step that yields a
    goal wins. The manifest may also rename the project. Without one the
    repository directory name is used and the goal stays ``None``.
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self._runner = runner or run_command
        self.logger = get_logger("metadata")

    def extract(self, repo: RepositoryRef) -> ProjectMetadata:
        manifest = read_manifest(repo.path)
        self._note(repo, "manifest", manifest.diagnostic)
        name = manifest.name or repo.name

        goal_steps: Sequence[tuple[str, Callable[[], Resolution]]] = (
            ("manifest", lambda: Resolution(manifest.description)),
            ("git description", lambda: read_git_description(repo.path)),
            ("git config", lambda: self.read_config_description(repo.path)),
        )
        goal: Optional[str] = None
        for label, step in goal_steps:
            resolution = step()
            if resolution.value:
                goal = resolution.value
                break
            self._note(repo, label, resolution.diagnostic)

        return ProjectMetadata(name=name, goal=goal)

    def read_config_description(self, repo_path: Path) -> Resolution:
        try:
            output = self._runner(["git", "config", "--get", "project.description"], repo_path)
        except subprocess.CalledProcessError:
            return Resolution(diagnostic="project.description is not set")
        except OSError as exc:
            return Resolution(diagnostic=f"git config failed: {exc}")
        value = output.strip()
        return Resolution(value or None, None if value else "project.description is empty")

    def _note(self, repo: RepositoryRef, step: str, diagnostic: Optional[str]) -> None:
        if diagnostic:
            self.logger.debug("%s: %s step skipped (%s)", repo.name, step, diagnostic)


def read_manifest(repo_path: Path) -> ManifestInfo:
    """Read name/description from package.json or pyproject.toml at the root."""
    package_json = repo_path / "package.json"
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            return ManifestInfo(diagnostic=f"package.json unreadable: {exc}")
        if isinstance(data, dict):
            return ManifestInfo(
                name=_clean(data.get("name")),
                description=_clean(data.get("description")),
            )
        return ManifestInfo(diagnostic="package.json is not an object")

    pyproject = repo_path / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            return ManifestInfo(diagnostic=f"pyproject.toml unreadable: {exc}")
        project = data.get("project")
        if isinstance(project, dict):
            return ManifestInfo(
                name=_clean(project.get("name")),
                description=_clean(project.get("description")),
            )
        return ManifestInfo(diagnostic="pyproject.toml has no [project] table")

    return ManifestInfo(diagnostic="no package manifest")


def read_git_description(repo_path: Path) -> Resolution:
    path = repo_path / ".git" / "description"
    try:
        text = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return Resolution(diagnostic=".git/description not found")
    except (OSError, UnicodeDecodeError) as exc:
        return Resolution(diagnostic=f".git/description unreadable: {exc}")
    if not text or text == GIT_DEFAULT_DESCRIPTION:
        return Resolution(diagnostic=".git/description holds the default placeholder")
    return Resolution(text)


def _clean(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = [
    "GIT_DEFAULT_DESCRIPTION",
    "ManifestInfo",
    "MetadataExtractor",
    "Resolution",
    "read_git_description",
    "read_manifest",
]
