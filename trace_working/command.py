"""Target parsing and check command construction."""

from dataclasses import dataclass
from typing import Optional

SELECTOR_SEPARATOR = "::"
PYTEST_RUNNER = "pytest"


@dataclass(frozen=True)
class TargetIdentifier:
    """A target file plus an optional test selector inside it."""
    path: str
    selector: Optional[str] = None

    def __str__(self):
        if self.selector:
            return f"{self.path}{SELECTOR_SEPARATOR}{self.selector}"
        return self.path


def parse_target(raw: str) -> TargetIdentifier:
    """Split ``path::selector`` on the first separator.

    The path part is what gets looked up in each commit; the selector is only
    ever passed on to the check command.  Without a separator the whole string
    is the path.

    Example:
        >>> parse_target("tests/test_a.py::TestFoo::test_bar")
        TargetIdentifier(path='tests/test_a.py', selector='TestFoo::test_bar')
    """
    path, sep, selector = raw.partition(SELECTOR_SEPARATOR)
    if not sep or not selector:
        return TargetIdentifier(path=path)
    return TargetIdentifier(path=path, selector=selector)


def build_command(
    template: Optional[str],
    path: str,
    selector: Optional[str] = None,
    pytest_mode: bool = False,
) -> str:
    """Build the command line to run against a checked out commit.

    Args:
        template: User supplied command. Ignored in pytest mode.
        path: Target file path.
        selector: Optional test selector, only used in pytest mode.
        pytest_mode: Build ``pytest <path>[::<selector>]`` instead.

    Returns:
        The command line. A template that already mentions ``path`` is
        returned as is, otherwise ``path`` is appended.

    Raises:
        ValueError: If no template is given outside pytest mode.
    """
    if pytest_mode:
        if selector:
            return f"{PYTEST_RUNNER} {path}{SELECTOR_SEPARATOR}{selector}"
        return f"{PYTEST_RUNNER} {path}"

    if not template:
        raise ValueError("A check command is required unless pytest mode is on")

    if path in template:
        return template
    return f"{template} {path}"
