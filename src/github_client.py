#!/usr/bin/env python3
"""
GitHub client utilities
"""

import re
from typing import Optional

import requests
from github import Auth, Github, GithubException

import logger
from constants import AUTO_GENERATED_MARKER, SELF_HEALING_COMMENT_TITLE
from models import HealError


class PublicationError(HealError):
    """Raised when a pull request or commit comment cannot be published"""


def _code_block(text: str) -> str:
    """Fence ``text`` so that backticks inside it cannot close the block"""
    longest = max((len(run) for run in re.findall(r"`+", text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}\n{text}\n{fence}"


def build_pr_body(base_branch: str, log_snippet: str) -> str:
    """Markdown body for an auto-heal pull request"""
    return (
        f"{SELF_HEALING_COMMENT_TITLE}\n\n"
        f"This PR fixes a CI failure detected on `{base_branch}`.\n"
        "The fix was generated by Copilot and passed the verification command.\n\n"
        "### Error log\n\n"
        f"{_code_block(log_snippet)}\n\n"
        "---\n"
        f"_{AUTO_GENERATED_MARKER} via Copilot. Please review before merging._\n"
    )


def build_agent_crash_comment(stderr: str) -> str:
    return (
        f"{SELF_HEALING_COMMENT_TITLE}\n\n"
        "Copilot CLI failed to run.\n\n"
        f"{_code_block(stderr)}"
    )


def build_no_changes_comment() -> str:
    return (
        f"{SELF_HEALING_COMMENT_TITLE}\n\n"
        "Copilot analyzed the failure but did not produce any file changes."
    )


def build_verification_failed_comment(verify_command: str, output: str) -> str:
    return (
        f"{SELF_HEALING_COMMENT_TITLE}\n\n"
        "Copilot suggested a fix but it did not pass verification "
        f"(`{verify_command}`).\n\n"
        "Please review manually.\n\n"
        "### Verification output\n"
        f"{_code_block(output)}"
    )


def build_tooling_failure_comment(fix_branch: str, error: str) -> str:
    return (
        f"{SELF_HEALING_COMMENT_TITLE}\n\n"
        "A git command failed after Copilot ran, so no fix was published.\n\n"
        f"The branch `{fix_branch}` was left in place on the runner for manual inspection.\n\n"
        "### Git error\n"
        f"{_code_block(error)}"
    )


class GitHubClient:
    def __init__(self, github_token: str, repository: str, base_url: Optional[str] = None):
        self.github_token = github_token
        self.repository = repository
        if base_url:
            self.github = Github(auth=Auth.Token(self.github_token), base_url=base_url)
        else:
            self.github = Github(auth=Auth.Token(self.github_token))

    def comment_on_commit(self, sha: str, body: str) -> str:
        """Post a comment on a commit and return its URL"""
        try:
            repo = self.github.get_repo(self.repository)
            comment = repo.get_commit(sha).create_comment(body)
        except (GithubException, requests.RequestException) as e:
            logger.error(f"Error posting comment on {sha}: {e}")
            raise PublicationError(f"Failed to comment on commit {sha}: {e}") from e

        logger.info(f"Created comment on commit {sha[:12]}")
        return comment.html_url

    def create_pull_request(self, title: str, body: str, base: str, head: str) -> str:
        """Open a pull request from ``head`` into ``base`` and return its URL"""
        try:
            repo = self.github.get_repo(self.repository)
            pr = repo.create_pull(title=title, body=body, base=base, head=head)
        except (GithubException, requests.RequestException) as e:
            logger.error(f"Error creating pull request {head} -> {base}: {e}")
            raise PublicationError(f"Failed to create pull request from {head}: {e}") from e

        logger.info(f"Created PR #{pr.number}")
        return pr.html_url
