#!/usr/bin/env python3
"""
Tests for git helpers against a throwaway repository
"""

import unittest
import os
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from constants import BOT_EMAIL, BOT_NAME
from git_client import GitClient, GitError


def git(cwd, *args):
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout.strip()


def init_repo(root: Path):
    """Create a work tree on ``main`` with one commit and a bare ``origin``"""
    remote = root / "origin.git"
    work = root / "work"
    git(root, "init", "-q", "--bare", str(remote))
    git(root, "init", "-q", str(work))
    git(work, "checkout", "-q", "-b", "main")
    (work / "app.txt").write_text("broken\n", encoding="utf-8")
    git(work, "add", "-A")
    git(work, "-c", "user.name=Test", "-c", "user.email=test@example.com", "commit", "-q", "-m", "initial")
    git(work, "remote", "add", "origin", str(remote))
    return work, remote


@unittest.skipIf(shutil.which("git") is None, "git is not installed")
class TestGitClient(unittest.TestCase):
    """Test GitClient operations"""

    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp(prefix="shc-"))
        self.work, self.remote = init_repo(self.tmp_dir)
        self.client = GitClient(cwd=self.work)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_current_branch(self):
        self.assertEqual(self.client.current_branch(), "main")

    def test_current_branch_detached(self):
        git(self.work, "checkout", "-q", "--detach")
        self.assertEqual(self.client.current_branch(), "")

    def test_head_sha(self):
        self.assertEqual(self.client.head_sha(), git(self.work, "rev-parse", "HEAD"))

    def test_clean_checkout_has_no_changes(self):
        self.assertFalse(self.client.has_uncommitted_changes())

    def test_modification_is_a_change(self):
        (self.work / "app.txt").write_text("fixed\n", encoding="utf-8")
        self.assertTrue(self.client.has_uncommitted_changes())

    def test_untracked_file_is_a_change(self):
        (self.work / "new.txt").write_text("new\n", encoding="utf-8")
        self.assertTrue(self.client.has_uncommitted_changes())

    def test_create_and_switch(self):
        self.client.create_and_switch("auto-fix/self-healing-1-abcdef")
        self.assertEqual(self.client.current_branch(), "auto-fix/self-healing-1-abcdef")

    def test_create_existing_branch_fails(self):
        self.client.create_and_switch("auto-fix/dup")
        with self.assertRaises(GitError):
            self.client.create_and_switch("auto-fix/dup")

    def test_commit_all_uses_bot_identity(self):
        self.client.configure_bot_identity()
        (self.work / "app.txt").write_text("fixed\n", encoding="utf-8")
        (self.work / "added.txt").write_text("added\n", encoding="utf-8")

        self.client.commit_all("fix: auto-fix CI failure\n\nApplied by test.")

        self.assertFalse(self.client.has_uncommitted_changes())
        self.assertEqual(git(self.work, "log", "-1", "--format=%an <%ae>"), f"{BOT_NAME} <{BOT_EMAIL}>")
        self.assertEqual(git(self.work, "log", "-1", "--format=%s"), "fix: auto-fix CI failure")
        self.assertEqual(git(self.work, "rev-list", "--count", "HEAD"), "2")

    def test_commit_with_nothing_staged_fails(self):
        self.client.configure_bot_identity()
        with self.assertRaises(GitError):
            self.client.commit_all("empty")

    def test_push(self):
        self.client.create_and_switch("auto-fix/pushed")
        self.client.push("auto-fix/pushed")

        self.assertIn("refs/heads/auto-fix/pushed", git(self.work, "ls-remote", "--heads", "origin"))

    def test_push_to_missing_remote_fails(self):
        client = GitClient(cwd=self.work, remote="nowhere")
        with self.assertRaises(GitError):
            client.push("main")

    def test_not_a_repository(self):
        outside = self.tmp_dir / "plain"
        outside.mkdir()
        client = GitClient(cwd=outside)

        with self.assertRaises(GitError):
            client.head_sha()
        with self.assertRaises(GitError):
            client.has_uncommitted_changes()


if __name__ == "__main__":
    unittest.main()
