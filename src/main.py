#!/usr/bin/env python3
"""
Self-healing CLI - collect CI failure logs and let Copilot fix them
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import typer

import logger
from agent_client import CopilotClient
from collector import collect
from constants import DEFAULT_AGENT_BIN, DEFAULT_REMOTE, DEFAULT_TAIL_LINES
from git_client import GitClient
from github_client import GitHubClient
from healer import HealConfig, Healer
from models import HealError, HealOutcome, HealResult

APP_HELP = "Run a command and save its log, or feed a log to Copilot CLI, verify the fix, and open a PR or comment."

app = typer.Typer(
    help=APP_HELP,
    add_completion=False,
    rich_markup_mode=None,
    context_settings={"help_option_names": ["-h", "--help"]},
)

USAGE_ERROR_EXIT_CODE = 2

OUTCOME_MESSAGES = {
    HealOutcome.PR_CREATED: "Fix published as a pull request",
    HealOutcome.NO_CHANGES: "No fix: Copilot made no file changes",
    HealOutcome.VERIFICATION_FAILED: "No fix: the proposed change did not pass verification",
    HealOutcome.AGENT_CRASHED: "No fix: Copilot CLI failed to run",
}


class ConfigError(HealError):
    """Raised when required configuration is missing"""


@dataclass
class Settings:
    """Environment configuration for the heal command"""
    github_token: str
    repository: str
    api_url: Optional[str] = None
    agent_bin: str = DEFAULT_AGENT_BIN
    remote: str = DEFAULT_REMOTE
    base_branch: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        github_token = env.get("GITHUB_TOKEN") or env.get("GH_TOKEN") or env.get("INPUT_GITHUB_TOKEN")
        repository = env.get("GITHUB_REPOSITORY")

        missing = []
        if not github_token:
            missing.append("GITHUB_TOKEN")
        if not repository:
            missing.append("GITHUB_REPOSITORY")
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        return cls(
            github_token=github_token,
            repository=repository,
            api_url=env.get("GITHUB_API_URL") or None,
            agent_bin=env.get("SELF_HEALING_AGENT_BIN") or DEFAULT_AGENT_BIN,
            remote=env.get("SELF_HEALING_REMOTE") or DEFAULT_REMOTE,
            base_branch=env.get("GITHUB_HEAD_REF") or env.get("GITHUB_REF_NAME") or None,
        )


def build_healer(config: HealConfig, settings: Settings) -> Healer:
    return Healer(
        config=config,
        git=GitClient(cwd=config.cwd, remote=settings.remote),
        github=GitHubClient(settings.github_token, settings.repository, base_url=settings.api_url),
        agent=CopilotClient(binary=settings.agent_bin, model=config.model, cwd=config.cwd),
    )


def report(result: HealResult) -> int:
    """Log the outcome and return the process exit code"""
    message = OUTCOME_MESSAGES[result.outcome]
    if result.fixed:
        logger.success(f"{message}: {result.pr_url}")
        return 0
    logger.error(f"{message} (branch {result.branch} left unpushed)")
    if result.comment_url:
        logger.info(f"Comment posted: {result.comment_url}")
    return 1


def _finish(ctx: typer.Context, exit_code: int) -> None:
    """Record a command's own exit code so main() can tell it from usage errors"""
    ctx.ensure_object(dict)["exit_code"] = exit_code
    raise typer.Exit(code=exit_code)


@app.callback(invoke_without_command=True)
def cli(ctx: typer.Context):
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command("collect")
def collect_command(
    ctx: typer.Context,
    command: str = typer.Option(..., "--command", help="Command to run."),
    output: Path = typer.Option(..., "--output", help="Output log file path."),
):
    """Run a command and save its output to a log file."""
    result = collect(command, output)
    _finish(ctx, result.exit_code)


@app.command("heal")
def heal_command(
    ctx: typer.Context,
    log: Path = typer.Option(..., "--log", help="Input log file path."),
    verify: str = typer.Option(..., "--verify", help="Verification command."),
    model: Optional[str] = typer.Option(None, "--model", help="Copilot model to use."),
    tail: int = typer.Option(DEFAULT_TAIL_LINES, "--tail", min=1, help="Number of log lines to send."),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Checkout to heal."),
):
    """Feed a log to Copilot CLI, verify the fix, create a PR or comment."""
    try:
        settings = Settings.from_env()
        config = HealConfig(
            log_file=log,
            verify_command=verify,
            tail_lines=tail,
            model=model,
            cwd=cwd,
            fallback_base_branch=settings.base_branch,
        )
        result = build_healer(config, settings).run()
    except HealError as e:
        logger.error(str(e))
        _finish(ctx, 1)

    _finish(ctx, report(result))


def main(argv=None) -> int:
    """Entry point; returns the process exit code"""
    state = {}
    try:
        app(args=argv, prog_name="self-healing", obj=state)
        exit_code = 0
    except SystemExit as e:
        exit_code = e.code if isinstance(e.code, int) else (0 if e.code is None else 1)

    if "exit_code" in state:
        return state["exit_code"]
    # Usage errors (unknown command, missing or invalid option) exit with 2
    if exit_code == USAGE_ERROR_EXIT_CODE:
        return 1
    return exit_code


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
