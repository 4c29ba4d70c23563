#!/usr/bin/env python3
"""
Heal workflow: hand a failure log to the agent, verify its fix, publish the outcome
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from uuid import uuid4

import logger
from agent_client import CopilotClient, build_fix_prompt
from constants import (
    DEFAULT_TAIL_LINES,
    FIX_BRANCH_PREFIX,
    FIX_COMMIT_MESSAGE,
    PR_LOG_SNIPPET_CHARS,
    PR_TITLE_TEMPLATE,
)
from git_client import GitClient, GitError
from github_client import (
    GitHubClient,
    build_agent_crash_comment,
    build_no_changes_comment,
    build_pr_body,
    build_tooling_failure_comment,
    build_verification_failed_comment,
)
from models import FailureLog, FixAttempt, HealOutcome, HealResult, ProcessResult
from process_runner import ProcessStartError, run


@dataclass
class HealConfig:
    """Inputs of one heal attempt"""
    log_file: Path
    verify_command: str
    tail_lines: int = DEFAULT_TAIL_LINES
    model: Optional[str] = None
    cwd: Optional[Path] = None
    # Used when the checkout is a detached HEAD
    fallback_base_branch: Optional[str] = None


def read_log_tail(log_file, lines: int = DEFAULT_TAIL_LINES) -> str:
    """Last ``lines`` lines of ``log_file``"""
    return FailureLog.load(log_file).tail(lines)


def generate_branch_name() -> str:
    """Unique isolation branch name: millisecond timestamp plus random suffix"""
    return f"{FIX_BRANCH_PREFIX}{int(time.time() * 1000)}-{uuid4().hex[:6]}"


class Healer:
    """Drives one heal attempt from log to pull request or commit comment.

    Every run ends in exactly one ``HealOutcome``. Failures of git or of the
    GitHub API propagate as ``GitError`` / ``PublicationError``; the local
    branch is left as-is for manual inspection. A git failure after the agent
    ran is also posted as a commit comment before it propagates.
    """

    def __init__(
        self,
        config: HealConfig,
        git: GitClient,
        github: GitHubClient,
        agent: CopilotClient,
    ):
        self.config = config
        self.git = git
        self.github = github
        self.agent = agent

    def run(self) -> HealResult:
        failure_log = FailureLog.load(self.config.log_file)
        error_log = failure_log.tail(self.config.tail_lines)
        logger.info(
            f"Read {min(self.config.tail_lines, failure_log.line_count)} of "
            f"{failure_log.line_count} lines from {failure_log.path}"
        )

        prompt = build_fix_prompt(error_log, self.config.verify_command)

        attempt = self._snapshot_context()
        self._prepare_isolation(attempt)

        agent_result = self.agent.apply_fix(prompt)
        if not agent_result.succeeded:
            return self._report_agent_crash(attempt, agent_result)

        try:
            return self._check_and_publish(attempt, error_log)
        except GitError as e:
            self._report_tooling_failure(attempt, e)
            raise

    def _check_and_publish(self, attempt: FixAttempt, error_log: str) -> HealResult:
        if not self.git.has_uncommitted_changes():
            return self._report_no_changes(attempt)

        verify_result = self._verify()
        if verify_result.succeeded:
            return self._publish_fix(attempt, error_log)
        return self._report_verification_failed(attempt, verify_result)

    def _snapshot_context(self) -> FixAttempt:
        head_sha = self.git.head_sha()
        base_branch = self.git.current_branch() or self.config.fallback_base_branch
        if not base_branch:
            raise GitError("HEAD is detached and no base branch is configured")
        logger.info(f"Base branch {base_branch} at {head_sha[:12]}")
        return FixAttempt(
            base_branch=base_branch,
            head_sha=head_sha,
            fix_branch=generate_branch_name(),
        )

    def _prepare_isolation(self, attempt: FixAttempt) -> None:
        self.git.configure_bot_identity()
        self.git.create_and_switch(attempt.fix_branch)
        logger.info(f"Created branch: {attempt.fix_branch}")

    def _verify(self) -> ProcessResult:
        logger.info(f"Verifying fix with: {self.config.verify_command}")
        try:
            return run(self.config.verify_command, cwd=self.config.cwd)
        except ProcessStartError as e:
            return ProcessResult(succeeded=False, stdout="", stderr=str(e), exit_code=127)

    def _comment(self, attempt: FixAttempt, outcome: HealOutcome, body: str) -> HealResult:
        comment_url = self.github.comment_on_commit(sha=attempt.head_sha, body=body)
        return HealResult(
            outcome=outcome,
            branch=attempt.fix_branch,
            comment_url=comment_url,
            comment=body,
        )

    def _report_agent_crash(self, attempt: FixAttempt, agent_result: ProcessResult) -> HealResult:
        stderr = agent_result.stderr or agent_result.stdout
        logger.error(f"Copilot CLI failed (exit code {agent_result.exit_code}): {stderr.strip()}")
        body = build_agent_crash_comment(stderr)
        return self._comment(attempt, HealOutcome.AGENT_CRASHED, body)

    def _report_no_changes(self, attempt: FixAttempt) -> HealResult:
        logger.info("Copilot made no file changes")
        return self._comment(attempt, HealOutcome.NO_CHANGES, build_no_changes_comment())

    def _report_verification_failed(self, attempt: FixAttempt, verify_result: ProcessResult) -> HealResult:
        logger.error(f"Fix did not pass verification (exit code {verify_result.exit_code})")
        body = build_verification_failed_comment(self.config.verify_command, verify_result.output)
        return self._comment(attempt, HealOutcome.VERIFICATION_FAILED, body)

    def _report_tooling_failure(self, attempt: FixAttempt, error: GitError) -> None:
        logger.error(f"Git failed after Copilot ran: {error}")
        body = build_tooling_failure_comment(attempt.fix_branch, str(error))
        self.github.comment_on_commit(sha=attempt.head_sha, body=body)

    def _publish_fix(self, attempt: FixAttempt, error_log: str) -> HealResult:
        logger.success("Fix verified!")
        self.git.commit_all(FIX_COMMIT_MESSAGE)
        self.git.push(attempt.fix_branch)

        body = build_pr_body(attempt.base_branch, error_log[-PR_LOG_SNIPPET_CHARS:])
        pr_url = self.github.create_pull_request(
            title=PR_TITLE_TEMPLATE.format(base_branch=attempt.base_branch),
            body=body,
            base=attempt.base_branch,
            head=attempt.fix_branch,
        )
        logger.success(f"PR created: {pr_url}")
        return HealResult(outcome=HealOutcome.PR_CREATED, branch=attempt.fix_branch, pr_url=pr_url)
