#!/usr/bin/env python3
"""
Run a command and persist its combined output as a failure log
"""

from pathlib import Path

import logger
from models import CollectResult
from process_runner import ProcessStartError, run


def collect(command: str, output_file, cwd=None) -> CollectResult:
    """Run ``command`` and write its combined stdout/stderr to ``output_file``.

    The file is written whatever the exit status; the status itself is only
    returned, never written into the log.
    """
    output_path = Path(output_file)
    logger.info(f"Running: {command}")

    try:
        result = run(command, cwd=cwd, combine_output=True)
        output, exit_code = result.output, result.exit_code
    except ProcessStartError as e:
        logger.error(str(e))
        output, exit_code = f"{e}\n", 127

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(output)

    logger.info(f"Log saved to {output_path} (exit code: {exit_code})")
    return CollectResult(exit_code=exit_code, log_file=output_path)
