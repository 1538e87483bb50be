"""Read-only version-control inspection."""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from singbox_rules.errors import GitCommandError
from singbox_rules.models import GitInfo

logger = logging.getLogger(__name__)


class IRepositoryInspector(ABC):
    @abstractmethod
    def inspect(self) -> GitInfo:
        raise NotImplementedError


class GitRepositoryInspector(IRepositoryInspector):
    def __init__(self, repo_dir: Path, binary: str = "git", timeout: float = 10) -> None:
        self.repo_dir = repo_dir
        self.binary = binary
        self.timeout = timeout

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                [self.binary, *args],
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GitCommandError(list(args), str(exc)) from exc

    def _output(self, *args: str) -> str:
        completed = self._run(*args)
        if completed.returncode != 0:
            raise GitCommandError(list(args), completed.stderr.strip())
        return completed.stdout.strip()

    def _is_clean(self, *args: str) -> bool:
        return self._run(*args).returncode == 0

    def _remote_url(self) -> Optional[str]:
        try:
            return self._output("config", "--get", "remote.origin.url") or None
        except GitCommandError:
            return None

    def inspect(self) -> GitInfo:
        try:
            branch = self._output("rev-parse", "--abbrev-ref", "HEAD")
            commit = self._output("rev-parse", "HEAD")
            commit_time = self._output("log", "-1", "--format=%cI")
            is_dirty = not (
                self._is_clean("diff", "--quiet")
                and self._is_clean("diff", "--cached", "--quiet")
            )
        except GitCommandError as exc:
            logger.warning("Failed to get git info: %s", exc)
            return GitInfo()
        return GitInfo(
            branch=branch,
            commit=commit,
            commit_time=commit_time,
            remote_url=self._remote_url(),
            is_dirty=is_dirty,
        )
