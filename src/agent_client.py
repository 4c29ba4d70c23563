#!/usr/bin/env python3
"""
Copilot CLI client for generating fixes
"""

from typing import List, Optional

import logger
from constants import DEFAULT_AGENT_BIN
from models import ProcessResult
from process_runner import ProcessStartError, run_args


def build_fix_prompt(error_log: str, verify_command: str) -> str:
    """Prompt handed to the agent; depends only on its arguments"""
    return "\n".join([
        "Analyze this CI failure and fix it.",
        "After applying fixes, verify by running:",
        f"  {verify_command}",
        "",
        "Error log:",
        error_log,
    ])


class CopilotClient:
    """Runs the Copilot CLI non-interactively with all tools allowed"""

    def __init__(self, binary: str = DEFAULT_AGENT_BIN, model: Optional[str] = None, cwd=None):
        self.binary = binary
        self.model = model
        self.cwd = cwd

    def _create_args(self, prompt: str) -> List[str]:
        args = [self.binary, "--prompt", prompt, "--yolo"]
        if self.model:
            args.extend(["--model", self.model])
        return args

    def apply_fix(self, prompt: str) -> ProcessResult:
        """Let the agent edit the working tree.

        A binary that cannot be started is reported as a failed run with the
        start error as stderr.
        """
        model_info = f" (model: {self.model})" if self.model else ""
        logger.info(f"Asking Copilot to analyze and fix{model_info}...")
        try:
            return run_args(self._create_args(prompt), cwd=self.cwd)
        except ProcessStartError as e:
            return ProcessResult(succeeded=False, stdout="", stderr=str(e), exit_code=127)
