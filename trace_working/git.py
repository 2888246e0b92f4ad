"""Git work tree adapter: history listing, file lookups and checkouts."""

import logging
import os
import subprocess
from typing import Iterator, Optional, Type

from .errors import CheckoutError, ConfigError, HistoryError, TraceError
from .logging_setup import get_logger
from .state import Revision, WorkingTreeState

# Field and record separators for `git log` output; neither occurs in messages.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"--format=%H{_FIELD_SEP}%ct{_FIELD_SEP}%B{_RECORD_SEP}"


class Git:
    """Git command wrapper bound to one work tree.

    The work tree is a single shared resource: ``materialize`` and
    ``restore`` overwrite it, everything else only reads.
    """

    def __init__(self, repo_path: str, toplevel: Optional[str] = None, logger: Optional[logging.Logger] = None):
        """Initialize Git wrapper.

        Args:
            repo_path: Path inside the git work tree.
            toplevel: Root of the work tree, if already known.
            logger: Optional logger instance. If not provided, uses the tool logger.
        """
        self.repo_path = repo_path
        self.toplevel = toplevel or repo_path
        self.logger = logger or get_logger()

    @classmethod
    def open(cls, repo_path: str, logger: Optional[logging.Logger] = None) -> 'Git':
        """Open the work tree containing ``repo_path``.

        Raises:
            ConfigError: If the path is missing or not inside a git work tree.
        """
        repo_path = os.path.abspath(repo_path)
        if not os.path.isdir(repo_path):
            raise ConfigError(f"Repository not found: {repo_path}")

        git = cls(repo_path, logger=logger)
        result = git.run("rev-parse", "--show-toplevel", error=ConfigError)
        git.toplevel = result.stdout.strip()
        return git

    def run(
        self,
        *args,
        check: bool = True,
        error: Type[TraceError] = HistoryError,
    ) -> subprocess.CompletedProcess:
        """Run a git command.

        Args:
            *args: Git command arguments.
            check: Whether to raise on non-zero exit.
            error: Exception class raised on failure.

        Returns:
            CompletedProcess instance with command results.

        Raises:
            error: If git cannot be started, or exits non-zero and check=True.
        """
        cmd = ["git", "-C", self.repo_path] + list(args)
        self.logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=check,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise error(f"Git command failed: {' '.join(cmd)}\n{stderr}") from e
        except OSError as e:
            raise error(f"Could not run git: {e}") from e

        if result.stdout and args[0] != "log":
            self.logger.debug(f"stdout: {result.stdout.strip()}")
        return result

    def capture_state(self) -> WorkingTreeState:
        """Record the current HEAD commit and the branch it is on."""
        commit = self.run("rev-parse", "--verify", "HEAD").stdout.strip()
        ref = self.run("symbolic-ref", "-q", "--short", "HEAD", check=False)
        branch = ref.stdout.strip() if ref.returncode == 0 else None
        return WorkingTreeState(commit=commit, branch=branch or None)

    def iter_revisions(self, start: str = "HEAD") -> Iterator[Revision]:
        """Yield the commits reachable from ``start``, newest first.

        Each call lists the history afresh; a partly consumed iterator
        cannot be rewound.
        """
        result = self.run("log", _LOG_FORMAT, start)
        position = 0
        for record in result.stdout.split(_RECORD_SEP):
            record = record.lstrip("\n")
            if not record:
                continue
            try:
                commit, timestamp, message = record.split(_FIELD_SEP, 2)
                revision = Revision(
                    id=commit,
                    message=message.strip(),
                    timestamp=int(timestamp),
                    position=position,
                )
            except ValueError as e:
                raise HistoryError(f"Unexpected git log record: {record[:80]!r}") from e
            position += 1
            yield revision

    def to_repo_path(self, path: str) -> str:
        """Turn a user path into a path relative to the work tree root.

        Relative paths are taken relative to ``repo_path``.

        Raises:
            ConfigError: If the path points outside the work tree.
        """
        full = os.path.normpath(os.path.join(os.path.realpath(self.repo_path), path))
        rel = os.path.relpath(full, os.path.realpath(self.toplevel))
        if rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise ConfigError(f"{path} is outside the repository {self.toplevel}")
        return rel.replace(os.sep, "/")

    def path_exists(self, revision: str, path: str) -> bool:
        """Check whether ``path`` (work tree relative) exists in ``revision``."""
        result = self.run("cat-file", "-e", f"{revision}:{path}", check=False)
        return result.returncode == 0

    def is_dirty(self) -> bool:
        """Whether tracked files have uncommitted changes."""
        result = self.run("status", "--porcelain", "--untracked-files=no", error=ConfigError)
        return bool(result.stdout.strip())

    def materialize(self, commit: str):
        """Check out ``commit`` on a detached HEAD, discarding local changes."""
        self.run("checkout", "-q", "--force", "--detach", commit, error=CheckoutError)

    def restore(self, state: WorkingTreeState):
        """Put HEAD and the work tree back to a captured state."""
        if state.branch:
            self.run("checkout", "-q", "--force", state.branch, error=CheckoutError)
        else:
            self.run("checkout", "-q", "--force", "--detach", state.commit, error=CheckoutError)
