"""Tests for the shell verifier."""

import tempfile
import unittest
from unittest.mock import patch, MagicMock

from trace_working.errors import VerifierLaunchError
from trace_working.verifier import ShellVerifier


class TestShellVerifier(unittest.TestCase):
    """Tests for ShellVerifier.run."""

    def setUp(self):
        self.verifier = ShellVerifier(logger=MagicMock())

    def test_success(self):
        """Exit status 0 is a pass."""
        result = self.verifier.run('exit 0')
        self.assertTrue(result.passed)
        self.assertEqual(result.exit_code, 0)
        self.assertFalse(result.timed_out)

    def test_failure_captures_stderr(self):
        """A non-zero exit is a failed check with stderr kept."""
        result = self.verifier.run('echo broken >&2; exit 3')
        self.assertFalse(result.passed)
        self.assertEqual(result.exit_code, 3)
        self.assertEqual(result.stderr.strip(), 'broken')

    def test_runs_in_cwd(self):
        """The command runs in the given directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            open(f'{tmpdir}/marker', 'w').close()
            result = self.verifier.run('test -f marker', cwd=tmpdir)
        self.assertTrue(result.passed)

    def test_unknown_command_is_a_failed_check(self):
        """The shell started, so a missing program is a failed check, not a launch error."""
        result = self.verifier.run('definitely-not-a-real-program-xyz')
        self.assertFalse(result.passed)
        self.assertEqual(result.exit_code, 127)

    def test_launch_failure(self):
        """A shell that cannot be started raises VerifierLaunchError."""
        with self.assertRaises(VerifierLaunchError):
            self.verifier.run('exit 0', cwd='/nonexistent/dir/for/trace/tests')

    @patch('trace_working.verifier.subprocess.run')
    def test_launch_failure_oserror(self, mock_run):
        """Any OSError from the launcher becomes VerifierLaunchError."""
        mock_run.side_effect = PermissionError('denied')
        with self.assertRaises(VerifierLaunchError) as ctx:
            self.verifier.run('exit 0')
        self.assertIsInstance(ctx.exception.__cause__, PermissionError)

    def test_timeout(self):
        """A command past its timeout is a failed check."""
        verifier = ShellVerifier(timeout=0.2, logger=MagicMock())
        result = verifier.run('sleep 5')
        self.assertFalse(result.passed)
        self.assertTrue(result.timed_out)
        self.assertIsNone(result.exit_code)

    @patch('trace_working.verifier.subprocess.run')
    def test_uses_shell(self, mock_run):
        """The command line is handed to the shell as one string."""
        mock_run.return_value = MagicMock(returncode=0, stderr='')

        self.verifier.run('pytest a.py::test_b', cwd='/repo')

        args, kwargs = mock_run.call_args
        self.assertEqual(args[0], 'pytest a.py::test_b')
        self.assertTrue(kwargs['shell'])
        self.assertEqual(kwargs['cwd'], '/repo')
        self.assertIsNone(kwargs['timeout'])


if __name__ == '__main__':
    unittest.main()
