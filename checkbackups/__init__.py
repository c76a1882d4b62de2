"""Core module for check-backups."""

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import PurePath
from typing import Optional


class ConfigError(ValueError):
    """Invalid checker configuration, raised before any student is checked."""


@dataclass(frozen=True)
class StudentRecord:
    """A roster entry, ready to be checked."""

    full_name: str
    email: str
    first_name: str
    last_name: str
    username: str
    home_dir: Optional[PurePath]
    problem: Optional[str] = None   # set when the row cannot be processed

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.full_name


@dataclass(frozen=True)
class AssignmentWindow:
    """Time span in which a backup has to be created.

    Both bounds are exclusive: a backup created exactly at ``assigned_at``
    is early, one created exactly at ``due_at`` is late.
    """

    assigned_at: datetime
    due_at: datetime

    def __post_init__(self):
        if self.assigned_at >= self.due_at:
            raise ConfigError(
                f"Assignment window is empty: {self.assigned_at} >= {self.due_at}"
            )

    @classmethod
    def from_dates(cls, assigned: date, due: date) -> 'AssignmentWindow':
        """Build a window from calendar dates (midnight at both ends)."""
        return cls(
            assigned_at=datetime.combine(assigned, time.min),
            due_at=datetime.combine(due, time.min),
        )


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a directory or file lookup."""

    path: Optional[PurePath]
    points: int
    reason: str
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.points > 0 and self.path is None:
            raise ValueError(f"{self.points} points awarded without a path")

    @classmethod
    def not_found(cls, reason: str) -> 'MatchResult':
        return cls(path=None, points=0, reason=reason)

    @property
    def found(self) -> bool:
        return self.path is not None


@dataclass(frozen=True)
class ScoreReport:
    """Final result for one student."""

    student: StudentRecord
    directory_match: MatchResult
    file_match: MatchResult
    total_points: int
