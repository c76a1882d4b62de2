"""Per-student backup check and the batch runner around it."""

import logging
import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from checkbackups import AssignmentWindow, MatchResult, ScoreReport, StudentRecord
from checkbackups.filesystem import FileSystem, LocalFileSystem
from checkbackups.matching import DirectoryResolver, FileResolver
from checkbackups.patterns import PatternSet
from checkbackups.scoring import aggregate

log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class BackupChecker:
    """Scores one student at a time against a fixed configuration.

    Holds no per-student state, so a single instance can be shared by
    worker threads.
    """

    def __init__(
        self,
        patterns: PatternSet,
        window: AssignmentWindow,
        fs: Optional[FileSystem] = None,
    ):
        self.patterns = patterns
        self.window = window
        self.fs = fs if fs is not None else LocalFileSystem()
        self.files = FileResolver(self.fs, patterns)
        self.directories = DirectoryResolver(self.fs, patterns, self.files)

    def check_student(self, student: StudentRecord) -> ScoreReport:
        """Find and score the backup for one student.

        The file search only runs when a backup directory was found.
        """
        if student.problem or student.home_dir is None:
            reason = student.problem or "no home directory"
            log.warning("%s: %s", student.full_name, reason)
            return failed_report(student, reason)

        try:
            directory = self.directories.resolve(student.home_dir)
            if directory.found:
                backup = self.files.resolve(directory.path, self.window)
            else:
                backup = MatchResult.not_found("no backup directory to search")
        except OSError as exc:
            log.warning("%s: filesystem error: %s", student.username, exc)
            return failed_report(student, f"filesystem error: {exc}")

        report = aggregate(student, directory, backup)
        log.debug("%s: %d points", student.username, report.total_points)
        return report


def failed_report(student: StudentRecord, reason: str) -> ScoreReport:
    """Zero-point report used when a student could not be checked."""
    missing = MatchResult.not_found(reason)
    return aggregate(student, missing, MatchResult.not_found("no backup directory to search"))


class _Lookup(threading.Thread):
    """One student's check on a daemon thread, so a hung read never blocks exit."""

    def __init__(self, checker: BackupChecker, student: StudentRecord):
        super().__init__(name=f'check-{student.username}', daemon=True)
        self.checker = checker
        self.student = student
        self.started_at = time.monotonic()
        self.report: Optional[ScoreReport] = None
        self.error: Optional[Exception] = None
        self.done = threading.Event()

    def run(self):
        try:
            self.report = self.checker.check_student(self.student)
        except Exception as exc:
            self.error = exc
        finally:
            self.done.set()


def _check_with_deadlines(
    students: list[StudentRecord],
    checker: BackupChecker,
    jobs: int,
    timeout: float,
) -> list[ScoreReport]:
    reports: list[Optional[ScoreReport]] = [None] * len(students)
    pending = deque(enumerate(students))
    running: list[tuple[int, _Lookup]] = []

    while pending or running:
        while pending and len(running) < jobs:
            index, student = pending.popleft()
            lookup = _Lookup(checker, student)
            lookup.start()
            running.append((index, lookup))

        now = time.monotonic()
        still_running = []
        for index, lookup in running:
            if lookup.done.is_set():
                if lookup.error is not None:
                    raise lookup.error
                reports[index] = lookup.report
            elif now - lookup.started_at >= timeout:
                # Abandoned; its slot goes to the next student.
                log.warning("%s: lookup timed out after %ss", lookup.student.username, timeout)
                reports[index] = failed_report(
                    lookup.student, f"lookup timed out after {timeout:g}s",
                )
            else:
                still_running.append((index, lookup))
        running = still_running

        if running:
            _, lookup = min(running, key=lambda item: item[1].started_at)
            remaining = lookup.started_at + timeout - time.monotonic()
            lookup.done.wait(min(max(remaining, 0), _POLL_INTERVAL))

    return reports


def check_students(
    students: list[StudentRecord],
    checker: BackupChecker,
    jobs: int = 1,
    timeout: Optional[float] = None,
) -> list[ScoreReport]:
    """Check every student and return the reports in roster order.

    Args:
        students: Roster entries.
        checker: Configured checker.
        jobs: Number of students checked at once; 1 checks them one after
            another.
        timeout: Seconds a single student may take, counted from when their
            check starts. A student who runs over gets a zero report and
            stops counting against ``jobs``.

    Returns:
        One ScoreReport per student.
    """
    if timeout is not None:
        reports = _check_with_deadlines(students, checker, max(jobs, 1), timeout)
    elif jobs <= 1:
        reports = [checker.check_student(s) for s in students]
    else:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            reports = list(pool.map(checker.check_student, students))

    log.info("Backup check finished: %d students processed", len(reports))
    return reports
