"""Main trace orchestration class."""

import enum
import os
from datetime import datetime
from typing import Optional

from .colors import Colors
from .command import TargetIdentifier, build_command, parse_target
from .errors import CheckoutError, RestoreError, TraceError
from .git import Git
from .logging_setup import setup_logging
from .state import CheckStep, Outcome, Revision, TraceReport, WorkingTreeState
from .verifier import ShellVerifier


class Phase(enum.Enum):
    """Where a trace currently is."""
    INIT = "init"
    SCANNING = "scanning"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    ABORTING = "aborting"
    RESTORING = "restoring"
    DONE = "done"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class TraceRunner:
    """Walks back through history to the last commit where the target works.

    This class manages the entire trace, including:
    - Opening the repository and validating the work tree
    - Scanning commits newest first, skipping those without the target file
    - Checking out each candidate and running the check command
    - Restoring the original HEAD however the scan ends
    - Result reporting

    The scan is linear and stops at the first (newest) passing commit.
    Pass/fail is not assumed to be monotonic, so no bisection is done.
    """

    def __init__(
        self,
        repo_path: str,
        target: str,
        command: Optional[str] = None,
        pytest_mode: bool = False,
        selector: Optional[str] = None,
        restore: bool = True,
        timeout: Optional[float] = None,
        report_file: Optional[str] = None,
        dry_run: bool = False,
        force: bool = False,
        verbose: bool = False,
        store: Optional[Git] = None,
        verifier=None,
    ):
        """Initialize the trace runner.

        Args:
            repo_path: Path to the git repository.
            target: Target file, optionally followed by ``::selector``.
            command: Check command template. Not needed in pytest mode.
            pytest_mode: Run ``pytest <path>[::selector]`` instead of ``command``.
            selector: Replaces the selector parsed from ``target``.
            restore: Whether to check the original HEAD back out at the end.
            timeout: Seconds before a check command is killed and counted as failing.
            report_file: Path to write a JSON run report to.
            dry_run: If True, list candidate commits without checking them out.
            force: If True, skip the uncommitted changes check.
            verbose: If True, enable verbose logging.
            store: Already opened repository handle.
            verifier: Object with a ``run(command, cwd)`` method.
        """
        self.logger = setup_logging(verbose)
        self.verbose = verbose

        self.repo_path = os.path.abspath(repo_path)
        self.target = parse_target(target)
        if selector:
            self.target = TargetIdentifier(path=self.target.path, selector=selector)

        if not self.target.path.strip():
            raise ValueError("A target file path is required")
        if not pytest_mode and not command:
            raise ValueError("A check command is required unless pytest mode is on")

        self.command = command
        self.pytest_mode = pytest_mode
        self.restore = restore
        self.timeout = timeout
        self.report_file = report_file
        self.dry_run = dry_run
        self.force = force

        self.store = store
        self.verifier = verifier or ShellVerifier(timeout=timeout, logger=self.logger)

        self.phase = Phase.INIT
        self.original_state: Optional[WorkingTreeState] = None
        self.repo_file: Optional[str] = None

        self.report = TraceReport(
            repo_path=self.repo_path,
            target=str(self.target),
            command=command,
            pytest_mode=pytest_mode,
            started_at=datetime.now().isoformat(),
        )

    def print_banner(self):
        """Print a nice banner."""
        print(f"\n{Colors.BOLD}{Colors.CYAN}╔══════════════════════════════════════════════════════════════╗{Colors.RESET}")
        print(f"{Colors.BOLD}{Colors.CYAN}║              🔎  Trace Working  🔎                           ║{Colors.RESET}")
        print(f"{Colors.BOLD}{Colors.CYAN}╚══════════════════════════════════════════════════════════════╝{Colors.RESET}\n", flush=True)

    def print_config(self):
        """Print the configuration."""
        print(f"{Colors.BOLD}Configuration:{Colors.RESET}")
        print(f"  Repository:   {Colors.WHITE}{self.repo_path}{Colors.RESET}")
        print(f"  Target file:  {Colors.WHITE}{self.target.path}{Colors.RESET}")
        if self.target.selector:
            print(f"  Selector:     {Colors.MAGENTA}{self.target.selector}{Colors.RESET}")
        print(f"  Command:      {Colors.WHITE}{self.effective_command()}{Colors.RESET}")
        print(f"  Restore HEAD: {Colors.YELLOW}{'Yes' if self.restore else 'No'}{Colors.RESET}")
        if self.timeout:
            print(f"  Timeout:      {Colors.WHITE}{self.timeout:g}s{Colors.RESET}")
        if self.report_file:
            print(f"  Report file:  {Colors.WHITE}{self.report_file}{Colors.RESET}")
        print(flush=True)

    def effective_command(self) -> str:
        """Build the command line run against each candidate commit."""
        return build_command(
            self.command,
            self.target.path,
            self.target.selector,
            self.pytest_mode,
        )

    def open_store(self) -> Git:
        """Open the repository and resolve the target inside it.

        Raises:
            ConfigError: If the repository cannot be opened or the target
                lies outside it.
        """
        if self.store is None:
            self.store = Git.open(self.repo_path, self.logger)
        if self.repo_file is None:
            self.repo_file = self.store.to_repo_path(self.target.path)
        return self.store

    def validate(self) -> bool:
        """Validate the work tree before anything is checked out.

        Returns:
            True if validation passes, False otherwise.

        Raises:
            ConfigError: If the repository cannot be opened.
        """
        self.logger.info("Validating configuration...")
        store = self.open_store()

        if not self.dry_run and not self.force and store.is_dirty():
            self.logger.error("Working tree has uncommitted changes that checkouts would discard.")
            self.logger.error("Commit or stash them first, or pass --force.")
            return False

        self.logger.info("Validation passed ✓")
        return True

    def save_report(self):
        """Save the report if a report file is configured.

        A report that cannot be written is logged and dropped; it never
        stops the trace or the restore that follows it.
        """
        if not self.report_file:
            return
        try:
            self.report.save(self.report_file)
        except OSError as e:
            self.logger.warning(f"Could not write report to {self.report_file}: {e}")
            self.report_file = None
            return
        self.logger.debug(f"Report saved to: {self.report_file}")

    def _record(self, revision: Revision, result: str, exit_code: Optional[int], duration: float):
        self.report.add_step(CheckStep(
            commit=revision.id,
            result=result,
            exit_code=exit_code,
            timestamp=datetime.now().isoformat(),
            duration_seconds=duration,
        ))

    def check_revision(self, revision: Revision) -> bool:
        """Check out a commit and run the check command against it.

        Returns:
            True if the check command passed.

        Raises:
            CheckoutError: If the commit cannot be checked out.
            VerifierLaunchError: If the check command cannot be started.
        """
        self.store.materialize(revision.id)

        command = self.effective_command()
        result = self.verifier.run(command, cwd=self.repo_path)

        if result.passed:
            self._record(revision, "pass", result.exit_code, result.duration_seconds)
            self.logger.debug(f"  {Colors.GREEN}PASS{Colors.RESET} {revision.short_id}")
        else:
            self._record(revision, "fail", result.exit_code, result.duration_seconds)
            reason = "timed out" if result.timed_out else f"exit code: {result.exit_code}"
            self.logger.debug(f"  {Colors.RED}FAIL{Colors.RESET} {revision.short_id} ({reason})")
        self.save_report()
        return result.passed

    def scan(self, start: str) -> Outcome:
        """Scan history from ``start`` for the newest passing commit."""
        self.phase = Phase.SCANNING
        checked = 0
        skipped = 0

        for revision in self.store.iter_revisions(start):
            self.logger.debug(f"Checking commit: {revision.short_id} ({revision.summary or 'No summary'})")

            # Presence is resolved before anything is checked out or run.
            if not self.store.path_exists(revision.id, self.repo_file):
                self.logger.debug(f"File {self.repo_file} does not exist in commit {revision.short_id}")
                self._record(revision, "skipped", None, 0.0)
                skipped += 1
                continue

            checked += 1
            if self.check_revision(revision):
                self.phase = Phase.FOUND
                return Outcome(found=True, revision=revision, checked=checked, skipped=skipped)

        self.phase = Phase.EXHAUSTED
        return Outcome(found=False, revision=None, checked=checked, skipped=skipped)

    def finish(self, original: WorkingTreeState, outcome: Optional[Outcome] = None,
               cause: Optional[BaseException] = None):
        """Restore the original HEAD if requested.

        Raises:
            RestoreError: If the checkout fails. Carries ``outcome`` and ``cause``.
        """
        if self.restore:
            self.phase = Phase.RESTORING
            self.logger.info("Restoring original HEAD")
            try:
                self.store.restore(original)
            except CheckoutError as e:
                raise RestoreError(
                    f"Failed to restore original HEAD {original.describe()}: {e}",
                    cause=cause,
                    outcome=outcome,
                ) from e
        self.phase = Phase.DONE

    def trace(self) -> Outcome:
        """Run the scan and restore the work tree.

        Returns:
            The scan outcome. Not finding a working commit is not an error.

        Raises:
            TraceError: On any infrastructure failure, after restoration was
                attempted. A failed restoration raises ``RestoreError``.
        """
        self.phase = Phase.INIT
        self.open_store()

        original = self.store.capture_state()
        self.original_state = original
        self.report.original_head = original.commit
        self.logger.info(f"Current HEAD is at commit: {Colors.YELLOW}{original.describe()}{Colors.RESET}")

        try:
            outcome = self.scan(original.commit)
        except BaseException as e:
            self.phase = Phase.ABORTING
            self.report.status = "aborted"
            try:
                self.finish(original, cause=e)
            finally:
                self.save_report()
            raise

        self.report.status = "found" if outcome.found else "exhausted"
        self.report.found_commit = outcome.revision.id if outcome.found else None
        self.save_report()

        self.finish(original, outcome=outcome)
        return outcome

    def list_candidates(self) -> int:
        """Print the commits a real run would check, without checking any out.

        Returns:
            Number of commits containing the target.
        """
        self.open_store()
        command = self.effective_command()
        count = 0

        print(f"{Colors.BOLD}Candidate commits:{Colors.RESET}")
        for revision in self.store.iter_revisions("HEAD"):
            if not self.store.path_exists(revision.id, self.repo_file):
                self.logger.debug(f"File {self.repo_file} does not exist in commit {revision.short_id}")
                continue
            count += 1
            print(f"  {Colors.YELLOW}{revision.short_id}{Colors.RESET} {revision.summary[:60]}")
        print()
        print(f"  {count} commit(s) would be checked with: {Colors.WHITE}{command}{Colors.RESET}")
        print(flush=True)
        return count

    def print_outcome(self, outcome: Outcome):
        """Report the result of a finished scan."""
        if not outcome.found:
            self.logger.warning("No working commit found in the history")
            self.logger.info(f"Checked {outcome.checked} commit(s), skipped {outcome.skipped}")
            return

        revision = outcome.revision
        print()
        print(f"{Colors.BOLD}{Colors.GREEN}╔══════════════════════════════════════════════════════════════╗{Colors.RESET}")
        print(f"{Colors.BOLD}{Colors.GREEN}║                 ✅  WORKING COMMIT FOUND  ✅                 ║{Colors.RESET}")
        print(f"{Colors.BOLD}{Colors.GREEN}╚══════════════════════════════════════════════════════════════╝{Colors.RESET}")
        print()

        self.logger.info(f"Found working commit: {Colors.GREEN}{revision.id}{Colors.RESET}")
        self.logger.info(f"Commit message: {revision.message or 'No message'}")
        self.logger.info(f"Commit date: {revision.date}")
        self.logger.info(f"Commits back from HEAD: {revision.position}")
        print()

        print(f"{Colors.BOLD}Trace Summary:{Colors.RESET}")
        print(f"  Commits checked: {outcome.checked}")
        print(f"  Commits skipped: {outcome.skipped}")
        total_duration = self.report.get_total_duration()
        if total_duration > 0:
            print(f"  Total time:      {total_duration:.1f}s")
        print()

    def run(self) -> int:
        """Main entry point.

        Returns:
            Exit code: 0 whether or not a working commit was found,
            1 for infrastructure failures, 2 for failed validation.
        """
        self.print_banner()
        self.print_config()

        try:
            if not self.validate():
                return 2

            if self.dry_run:
                print(f"{Colors.YELLOW}Dry run mode - nothing will be checked out{Colors.RESET}")
                self.list_candidates()
                return 0

            outcome = self.trace()

        except RestoreError as e:
            if e.outcome is not None:
                self.print_outcome(e.outcome)
            elif e.cause is not None:
                self.logger.error(f"Trace failed: {_describe(e.cause)}")
            self.logger.error(f"Restoration failed: {e}")
            self.logger.error("The work tree may be left on a different commit.")
            return 1

        except KeyboardInterrupt:
            print()
            self.logger.warning("Trace interrupted by user")
            return 1

        except TraceError as e:
            self.logger.error(f"Trace failed: {e}")
            if self.verbose:
                import traceback
                traceback.print_exc()
            return 1

        self.print_outcome(outcome)
        return 0
