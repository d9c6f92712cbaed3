"""Subprocess helper shared by the git-backed components."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Sequence

CommandRunner = Callable[[Sequence[str], Path], str]


def run_command(args: Sequence[str], cwd: Path) -> str:
    """Run ``args`` inside ``cwd`` and return stdout, raising on non-zero exit."""
    completed = subprocess.run(
        list(args),
        cwd=str(cwd),
        check=True,
        text=True,
        capture_output=True,
    )
    return completed.stdout


__all__ = ["CommandRunner", "run_command"]
