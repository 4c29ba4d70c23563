#!/usr/bin/env python3
"""
Git helpers used by the heal command
"""

from typing import List

import logger
from constants import BOT_EMAIL, BOT_NAME, DEFAULT_REMOTE
from models import HealError, ProcessResult
from process_runner import ProcessStartError, run_args


class GitError(HealError):
    """Raised when a git command fails or the checkout cannot be used"""


class GitClient:
    """Thin wrapper around ``git`` for one working tree"""

    def __init__(self, cwd=None, remote: str = DEFAULT_REMOTE):
        self.cwd = cwd
        self.remote = remote

    def _git(self, args: List[str]) -> ProcessResult:
        try:
            result = run_args(["git", *args], cwd=self.cwd)
        except ProcessStartError as e:
            raise GitError(str(e)) from e
        if not result.succeeded:
            message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
            raise GitError(f"git {' '.join(args)} failed: {message}")
        return result

    def current_branch(self) -> str:
        """Current branch name, empty on a detached HEAD"""
        return self._git(["branch", "--show-current"]).stdout.strip()

    def head_sha(self) -> str:
        return self._git(["rev-parse", "HEAD"]).stdout.strip()

    def has_uncommitted_changes(self) -> bool:
        return bool(self._git(["status", "--porcelain"]).stdout.strip())

    def create_and_switch(self, branch_name: str) -> None:
        self._git(["checkout", "-b", branch_name])

    def commit_all(self, message: str) -> None:
        self._git(["add", "-A"])
        self._git(["commit", "-m", message])

    def push(self, branch_name: str) -> None:
        self._git(["push", "--set-upstream", self.remote, branch_name])

    def configure_bot_identity(self) -> None:
        self._git(["config", "user.name", BOT_NAME])
        self._git(["config", "user.email", BOT_EMAIL])
        logger.info(f"Configured commit identity {BOT_NAME} <{BOT_EMAIL}>")
