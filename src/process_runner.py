#!/usr/bin/env python3
"""
Subprocess execution that reports non-zero exits instead of raising
"""

import os
import subprocess
from typing import Mapping, Optional, Sequence

from models import HealError, ProcessResult


class ProcessStartError(HealError):
    """Raised when a process cannot be started at all"""


def _merged_env(env: Optional[Mapping[str, str]]) -> Optional[dict]:
    if env is None:
        return None
    return {**os.environ, **env}


def _exit_code(returncode: int) -> int:
    # Killed by signal N: report it the way a shell would
    if returncode < 0:
        return 128 - returncode
    return returncode


def _execute(args, shell: bool, cwd, env, combine_output: bool) -> ProcessResult:
    try:
        process = subprocess.run(
            args,
            shell=shell,
            cwd=cwd,
            env=_merged_env(env),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combine_output else subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        # Name only the program: argv may carry the whole prompt
        program = args if shell else args[0]
        raise ProcessStartError(f"Failed to start {program}: {e}") from e

    exit_code = _exit_code(process.returncode)
    return ProcessResult(
        succeeded=exit_code == 0,
        stdout=process.stdout or "",
        stderr=process.stderr or "",
        exit_code=exit_code,
    )


def run(
    command: str,
    cwd=None,
    env: Optional[Mapping[str, str]] = None,
    combine_output: bool = False,
) -> ProcessResult:
    """Run a shell command string.

    Only use this for commands supplied verbatim by the operator. With
    ``combine_output`` stderr is interleaved into ``stdout``.
    """
    return _execute(command, True, cwd, env, combine_output)


def run_args(
    args: Sequence[str],
    cwd=None,
    env: Optional[Mapping[str, str]] = None,
) -> ProcessResult:
    """Run a program with an explicit argument vector, bypassing the shell"""
    return _execute(list(args), False, cwd, env, False)
