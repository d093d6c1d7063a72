"""Git access for branchcheck."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Protocol

from .errors import VcsError

REMOTE_HEAD_PREFIX = "refs/heads/"

_logger = logging.getLogger("branchcheck.vcs")


class VcsAdapter(Protocol):
    def repo_root(self) -> Path: ...

    def current_branch(self) -> str: ...

    def remote_branch_names(self) -> list[str]: ...

    def checkout_branch(self, name: str) -> None: ...

    def fetch(self) -> None: ...

    def stash(self) -> None: ...


def parse_remote_heads(text: str) -> list[str]:
    """Parse ``git ls-remote --heads`` output into short branch names."""
    branches: list[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) < 2 or not fields[1].startswith(REMOTE_HEAD_PREFIX):
            raise VcsError(f"Unexpected line in git ls-remote output: {line!r}")
        branches.append(fields[1][len(REMOTE_HEAD_PREFIX) :])
    return branches


class GitAdapter:
    def __init__(self, root: Path, git_cmd: str = "git") -> None:
        self.root = root
        self.git_cmd = git_cmd

    def repo_root(self) -> Path:
        return Path(self._git(["rev-parse", "--show-toplevel"]).strip()).resolve()

    def current_branch(self) -> str:
        branch = self._git(["rev-parse", "--abbrev-ref", "HEAD"]).strip()
        if not branch:
            raise VcsError("git rev-parse printed an empty branch name.")
        return branch

    def remote_branch_names(self) -> list[str]:
        return parse_remote_heads(self._git(["ls-remote", "--heads"]))

    def checkout_branch(self, name: str) -> None:
        self._git(["checkout", name])

    def fetch(self) -> None:
        self._git(["fetch"])

    def stash(self) -> None:
        self._git(["stash", "--include-untracked"])

    def _git(self, args: list[str]) -> str:
        argv = [self.git_cmd, *args]
        _logger.debug("Running %s", " ".join(argv))
        try:
            cp = _run(argv, cwd=self.root)
        except OSError as exc:
            raise VcsError(f"Cannot run {' '.join(argv)}: {exc}") from exc
        if cp.returncode != 0:
            stderr = (cp.stderr or "").strip()
            raise VcsError(f"{' '.join(argv)} failed with exit code {cp.returncode}: {stderr}")
        return cp.stdout


def _run(argv: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env.setdefault("GIT_TERMINAL_PROMPT", "0")
    return subprocess.run(
        argv,
        cwd=str(cwd) if cwd else None,
        check=False,
        capture_output=True,
        text=True,
        env=env,
    )
