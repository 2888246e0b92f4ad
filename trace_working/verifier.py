"""Run the check command through the shell."""

import logging
import subprocess
import time
from dataclasses import dataclass
from typing import Optional

from .errors import VerifierLaunchError
from .logging_setup import get_logger


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a check command that was started successfully."""
    passed: bool
    exit_code: Optional[int]
    stderr: str = ""
    duration_seconds: float = 0.0
    timed_out: bool = False


class ShellVerifier:
    """Runs a command line with ``/bin/sh`` and reports its exit status.

    A command that runs and exits non-zero is a failed check, returned as a
    ``VerificationResult``.  A command that cannot be started at all raises
    ``VerifierLaunchError``.  Any object with a compatible ``run`` method can
    stand in for this class.
    """

    def __init__(self, timeout: Optional[float] = None, logger: Optional[logging.Logger] = None):
        """Initialize the verifier.

        Args:
            timeout: Seconds to wait before killing the command. None waits forever.
            logger: Optional logger instance.
        """
        self.timeout = timeout
        self.logger = logger or get_logger()

    def run(self, command: str, cwd: Optional[str] = None) -> VerificationResult:
        """Run ``command`` in ``cwd``.

        Raises:
            VerifierLaunchError: If the shell could not be started.
        """
        self.logger.debug(f"Running command: {command}")
        start_time = time.time()
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                cwd=cwd,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            duration = time.time() - start_time
            self.logger.debug(f"Command timed out after {duration:.1f}s")
            return VerificationResult(
                passed=False,
                exit_code=None,
                duration_seconds=duration,
                timed_out=True,
            )
        except OSError as e:
            raise VerifierLaunchError(f"Failed to execute command: {command}: {e}") from e

        duration = time.time() - start_time
        if result.returncode == 0:
            self.logger.debug("Command succeeded")
        else:
            self.logger.debug(f"Command failed with exit code: {result.returncode}")
            if result.stderr:
                self.logger.debug(f"Command stderr: {result.stderr.strip()}")

        return VerificationResult(
            passed=result.returncode == 0,
            exit_code=result.returncode,
            stderr=result.stderr or "",
            duration_seconds=duration,
        )
