#!/usr/bin/env python3
"""
Data models for the self-healing CLI
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class HealError(Exception):
    """Base class for failures that abort a collect or heal invocation"""


class LogReadError(HealError):
    """Raised when the failure log artifact cannot be read"""


@dataclass
class ProcessResult:
    """Outcome of a finished subprocess"""
    succeeded: bool
    stdout: str
    stderr: str
    exit_code: int

    @property
    def output(self) -> str:
        """Combined stdout and stderr"""
        return self.stdout + self.stderr


@dataclass
class FailureLog:
    """Lines of a persisted failure log, read-only once loaded"""
    path: Path
    lines: List[str] = field(default_factory=list)

    @classmethod
    def load(cls, path) -> "FailureLog":
        path = Path(path)
        try:
            # newline="" keeps \r progress output inside its line
            with open(path, encoding="utf-8", errors="replace", newline="") as f:
                content = f.read()
        except OSError as e:
            raise LogReadError(f"Cannot read log file {path}: {e}") from e

        lines = content.split("\n")
        if lines[-1] == "":
            lines.pop()
        return cls(path=path, lines=lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def tail(self, count: int) -> str:
        """Last ``count`` lines joined with newlines"""
        if count <= 0:
            return ""
        return "\n".join(self.lines[-count:])


@dataclass
class FixAttempt:
    """State of one heal invocation"""
    base_branch: str
    head_sha: str
    fix_branch: str


class HealOutcome(Enum):
    """The four ways a heal attempt can end"""
    PR_CREATED = "pr_created"
    NO_CHANGES = "no_changes"
    VERIFICATION_FAILED = "verification_failed"
    AGENT_CRASHED = "agent_crashed"


@dataclass
class HealResult:
    """Terminal outcome of a heal attempt with its publication reference"""
    outcome: HealOutcome
    branch: str
    pr_url: Optional[str] = None
    comment_url: Optional[str] = None
    comment: Optional[str] = None

    @property
    def fixed(self) -> bool:
        return self.outcome is HealOutcome.PR_CREATED


@dataclass
class CollectResult:
    """Outcome of a log capture run"""
    exit_code: int
    log_file: Path
