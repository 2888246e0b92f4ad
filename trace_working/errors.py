"""Exceptions raised while tracing a working commit."""

from typing import Optional


class TraceError(Exception):
    """Base class for fatal errors that abort a trace."""
    pass


class ConfigError(TraceError):
    """The repository location is unreadable or not a git work tree."""
    pass


class HistoryError(TraceError):
    """A revision could not be resolved or the history could not be listed."""
    pass


class CheckoutError(TraceError):
    """A revision could not be checked out into the work tree."""
    pass


class RestoreError(CheckoutError):
    """Checking the original HEAD back out failed.

    The error never hides what happened before it: ``cause`` holds the fatal
    error that aborted the scan (if any) and ``outcome`` the scan result (if
    the scan finished).
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None, outcome=None):
        super().__init__(message)
        self.cause = cause
        self.outcome = outcome


class VerifierLaunchError(TraceError):
    """The check command could not be started at all."""
    pass
