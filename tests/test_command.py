"""Tests for target parsing and command building."""

import unittest

from trace_working.command import TargetIdentifier, build_command, parse_target


class TestParseTarget(unittest.TestCase):
    """Tests for parse_target."""

    def test_plain_path(self):
        """A path without separator has no selector."""
        target = parse_target('scripts/report.py')
        self.assertEqual(target.path, 'scripts/report.py')
        self.assertIsNone(target.selector)

    def test_path_with_selector(self):
        """Everything after the first '::' is the selector."""
        target = parse_target('tests/test_a.py::TestFoo::test_bar')
        self.assertEqual(target.path, 'tests/test_a.py')
        self.assertEqual(target.selector, 'TestFoo::test_bar')

    def test_empty_selector(self):
        """A trailing separator leaves no selector."""
        target = parse_target('tests/test_a.py::')
        self.assertEqual(target, TargetIdentifier('tests/test_a.py'))

    def test_str_round_trip(self):
        """str() gives back the original identifier."""
        raw = 'tests/test_a.py::test_bar'
        self.assertEqual(str(parse_target(raw)), raw)
        self.assertEqual(str(parse_target('a.py')), 'a.py')


class TestBuildCommand(unittest.TestCase):
    """Tests for build_command."""

    def test_pytest_mode(self):
        """pytest mode ignores the template."""
        self.assertEqual(
            build_command('ignored', 'a/b_test.py', None, pytest_mode=True),
            'pytest a/b_test.py',
        )

    def test_pytest_mode_with_selector(self):
        """pytest mode appends the selector to the path."""
        self.assertEqual(
            build_command(None, 'a/b_test.py', 'TestX::test_y', pytest_mode=True),
            'pytest a/b_test.py::TestX::test_y',
        )

    def test_template_gets_path_appended(self):
        """The path is appended after one space."""
        self.assertEqual(build_command('python', 'run.py'), 'python run.py')

    def test_template_with_path_unchanged(self):
        """A template that already contains the path is left alone."""
        template = 'python run.py --fast'
        self.assertEqual(build_command(template, 'run.py'), template)

    def test_idempotent(self):
        """Feeding the output back in does not add the path again."""
        once = build_command('sh -e', 'tool.sh')
        self.assertEqual(build_command(once, 'tool.sh'), once)

    def test_selector_ignored_outside_pytest_mode(self):
        """The selector only matters in pytest mode."""
        self.assertEqual(build_command('python', 'run.py', 'sel'), 'python run.py')

    def test_missing_template_raises(self):
        """A template is required outside pytest mode."""
        with self.assertRaises(ValueError):
            build_command(None, 'run.py')
        with self.assertRaises(ValueError):
            build_command('', 'run.py')


if __name__ == '__main__':
    unittest.main()
