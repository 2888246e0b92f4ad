"""Data model for a trace run: revisions, outcome and the JSON run report."""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Optional, List


@dataclass(frozen=True)
class Revision:
    """A commit as seen by the scan.

    ``position`` is 0 for the starting commit and grows toward older history.
    """
    id: str
    message: str
    timestamp: int
    position: int

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def summary(self) -> str:
        lines = self.message.strip().splitlines()
        return lines[0] if lines else ""

    @property
    def date(self) -> str:
        return datetime.fromtimestamp(self.timestamp).isoformat(sep=" ")


@dataclass(frozen=True)
class WorkingTreeState:
    """Which commit occupies the work tree, and the branch HEAD was on (if any)."""
    commit: str
    branch: Optional[str] = None

    def describe(self) -> str:
        if self.branch:
            return f"{self.commit} ({self.branch})"
        return f"{self.commit} (detached)"


@dataclass(frozen=True)
class Outcome:
    """Terminal result of a scan."""
    found: bool
    revision: Optional[Revision] = None
    checked: int = 0
    skipped: int = 0


@dataclass
class CheckStep:
    """Record of a single inspected revision."""
    commit: str
    result: str  # "skipped", "pass", "fail"
    exit_code: Optional[int]
    timestamp: str
    duration_seconds: float


@dataclass
class TraceReport:
    """Run record, written as JSON when a report file is requested."""
    repo_path: str
    target: str
    command: Optional[str]
    pytest_mode: bool = False
    started_at: str = ""
    original_head: Optional[str] = None
    steps: List[CheckStep] = field(default_factory=list)
    found_commit: Optional[str] = None
    status: str = "in_progress"  # "in_progress", "found", "exhausted", "aborted"

    def save(self, path: str):
        """Save the report to a JSON file.

        Args:
            path: Path to write.
        """
        with open(path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    def add_step(self, step: CheckStep):
        self.steps.append(step)

    def get_total_duration(self) -> float:
        """Get the total time spent running checks, in seconds."""
        return sum(step.duration_seconds for step in self.steps)
