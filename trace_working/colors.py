"""ANSI color codes for terminal output."""

import os
import sys


class Colors:
    """ANSI color codes for log and result output.

    Codes are on by default.  ``Colors.init()`` is called once from the CLI
    and turns them off when stdout is not a terminal or ``NO_COLOR`` is set.
    """

    _CODES = {
        "RESET": "\033[0m",
        "BOLD": "\033[1m",
        "DIM": "\033[2m",
        "RED": "\033[31m",
        "GREEN": "\033[32m",
        "YELLOW": "\033[33m",
        "MAGENTA": "\033[35m",
        "CYAN": "\033[36m",
        "WHITE": "\033[37m",
        "BG_RED": "\033[41m",
    }

    RESET = _CODES["RESET"]
    BOLD = _CODES["BOLD"]
    DIM = _CODES["DIM"]

    RED = _CODES["RED"]
    GREEN = _CODES["GREEN"]
    YELLOW = _CODES["YELLOW"]
    MAGENTA = _CODES["MAGENTA"]
    CYAN = _CODES["CYAN"]
    WHITE = _CODES["WHITE"]

    BG_RED = _CODES["BG_RED"]

    @classmethod
    def disable(cls):
        """Blank out every color code."""
        for attr in cls._CODES:
            setattr(cls, attr, "")

    @classmethod
    def enable(cls):
        """Put every color code back."""
        for attr, code in cls._CODES.items():
            setattr(cls, attr, code)

    @classmethod
    def init(cls):
        """Pick colors on or off for the current terminal."""
        if os.environ.get("NO_COLOR") or not sys.stdout.isatty():
            cls.disable()
        else:
            cls.enable()
