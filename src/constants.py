#!/usr/bin/env python3
"""
Constants for the self-healing CLI
"""

# Prefix for every console log line
LOG_PREFIX = "[self-healing]"

# Title shared by every commit comment posted by the heal command
SELF_HEALING_COMMENT_TITLE = "## Self-Healing CLI"

# Attribution line marking pull requests as generated by this tool
AUTO_GENERATED_MARKER = "Auto-generated by self-healing-cli"

# Identity used for all automated commits
BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"

# Isolation branches look like auto-fix/self-healing-1718000000000-a1b2c3
FIX_BRANCH_PREFIX = "auto-fix/self-healing-"
FIX_BRANCH_PATTERN = r"^auto-fix/self-healing-\d+-[0-9a-f]{6}$"

FIX_COMMIT_MESSAGE = "fix: auto-fix CI failure\n\nApplied by self-healing-cli via Copilot."
PR_TITLE_TEMPLATE = "fix: auto-heal CI failure on {base_branch}"

DEFAULT_TAIL_LINES = 100
PR_LOG_SNIPPET_CHARS = 2000

DEFAULT_AGENT_BIN = "copilot"
DEFAULT_REMOTE = "origin"
