"""Creation-time checks and point totals for backup matches."""

import enum
import logging
from dataclasses import replace
from datetime import datetime

from checkbackups import AssignmentWindow, MatchResult, ScoreReport, StudentRecord

log = logging.getLogger(__name__)

# Credit for having submitted a backup at all, on top of naming points
BONUS_POINTS = 8


class WindowStatus(enum.Enum):
    EARLY = 'created before assigned'
    IN_RANGE = 'in range'
    LATE = 'created after deadline'


def classify(created_at: datetime, window: AssignmentWindow) -> WindowStatus:
    """Place a creation time relative to the assignment window.

    Both boundaries count against the student: a timestamp equal to
    ``assigned_at`` is EARLY, one equal to ``due_at`` is LATE.

    Args:
        created_at: Creation time of the backup file.
        window: Assigned and due timestamps.

    Returns:
        The window status.
    """
    if created_at <= window.assigned_at:
        return WindowStatus.EARLY
    if created_at >= window.due_at:
        return WindowStatus.LATE
    return WindowStatus.IN_RANGE


def apply_window(result: MatchResult, window: AssignmentWindow) -> MatchResult:
    """Zero the points of a file match created outside the window.

    The path, creation time and tier name stay on the result so the report
    can show what was found.
    """
    if not result.found or result.created_at is None:
        return result

    status = classify(result.created_at, window)
    if status is WindowStatus.IN_RANGE:
        return result

    log.debug("%s: %s (%s)", result.path, status.value, result.created_at)
    return replace(result, points=0, reason=f"{result.reason} ({status.value})")


def aggregate(
    student: StudentRecord,
    directory_match: MatchResult,
    file_match: MatchResult,
) -> ScoreReport:
    """Combine directory and file matches into the student's score.

    Without a backup directory the total is 0. Otherwise directory and file
    points are added, plus BONUS_POINTS when an in-window file was found.
    """
    if not directory_match.found:
        total = 0
    else:
        total = directory_match.points + file_match.points
        if file_match.points > 0:
            total += BONUS_POINTS

    return ScoreReport(
        student=student,
        directory_match=directory_match,
        file_match=file_match,
        total_points=total,
    )
