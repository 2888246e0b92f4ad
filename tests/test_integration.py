"""End-to-end tests against a throwaway git repository."""

import os
import shutil
import subprocess
import tempfile
import unittest
from unittest.mock import patch

from trace_working.tracer import TraceRunner


def git(repo, *args):
    result = subprocess.run(
        ["git", "-C", repo, "-c", "user.name=Test", "-c", "user.email=test@example.com"] + list(args),
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo, name, content, message):
    with open(os.path.join(repo, name), "w") as f:
        f.write(content)
    git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


@unittest.skipIf(shutil.which("git") is None, "git not installed")
@patch('trace_working.tracer.print', create=True)
class TestTraceIntegration(unittest.TestCase):
    """Runs the whole trace on a real repository."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.repo = self.tmpdir.name
        git(self.repo, "init", "-q")
        self.c0 = commit_file(self.repo, "README", "hello\n", "Initial commit")
        self.c1 = commit_file(self.repo, "tool.sh", "exit 0\n", "Add tool")
        self.c2 = commit_file(self.repo, "tool.sh", "exit 1\n", "Break tool")
        self.c3 = commit_file(self.repo, "notes.txt", "notes\n", "Add notes")
        self.branch = git(self.repo, "symbolic-ref", "--short", "HEAD")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_finds_last_working_commit_and_restores(self, mock_print):
        runner = TraceRunner(repo_path=self.repo, target="tool.sh", command="sh")

        outcome = runner.trace()

        self.assertTrue(outcome.found)
        self.assertEqual(outcome.revision.id, self.c1)
        self.assertEqual(outcome.revision.summary, "Add tool")
        self.assertEqual(outcome.revision.position, 2)
        self.assertEqual(git(self.repo, "rev-parse", "HEAD"), self.c3)
        self.assertEqual(git(self.repo, "symbolic-ref", "--short", "HEAD"), self.branch)

    def test_no_restore_leaves_working_commit(self, mock_print):
        runner = TraceRunner(repo_path=self.repo, target="tool.sh", command="sh", restore=False)

        self.assertEqual(runner.run(), 0)
        self.assertEqual(git(self.repo, "rev-parse", "HEAD"), self.c1)

    def test_nothing_works(self, mock_print):
        runner = TraceRunner(repo_path=self.repo, target="tool.sh", command="false &&")

        outcome = runner.trace()

        self.assertFalse(outcome.found)
        self.assertEqual(outcome.checked, 3)
        self.assertEqual(outcome.skipped, 1)
        self.assertEqual(git(self.repo, "rev-parse", "HEAD"), self.c3)

    def test_unwritable_report_still_restores(self, mock_print):
        report_file = os.path.join(self.repo, "missing", "report.json")
        runner = TraceRunner(repo_path=self.repo, target="tool.sh", command="sh", report_file=report_file)

        self.assertEqual(runner.run(), 0)
        self.assertFalse(os.path.exists(report_file))
        self.assertEqual(git(self.repo, "rev-parse", "HEAD"), self.c3)
        self.assertEqual(git(self.repo, "symbolic-ref", "--short", "HEAD"), self.branch)

    def test_dirty_tree_refused(self, mock_print):
        with open(os.path.join(self.repo, "tool.sh"), "w") as f:
            f.write("exit 0 # local edit\n")
        runner = TraceRunner(repo_path=self.repo, target="tool.sh", command="sh")

        self.assertEqual(runner.run(), 2)
        with open(os.path.join(self.repo, "tool.sh")) as f:
            self.assertIn("local edit", f.read())


if __name__ == '__main__':
    unittest.main()
