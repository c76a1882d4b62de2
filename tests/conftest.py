"""Shared test fixtures."""

from datetime import date, datetime
from pathlib import PurePosixPath

import pytest

from checkbackups import AssignmentWindow, StudentRecord
from checkbackups.checker import BackupChecker
from checkbackups.patterns import PatternSet


ROOT = PurePosixPath('/homes')
ASSIGNED = date(2023, 2, 6)
DUE = date(2023, 2, 9)
IN_WINDOW = datetime(2023, 2, 8, 10, 30)


class MemoryFileSystem:
    """In-memory stand-in for the shared drive.

    Listings come back in reverse name order so tests notice when a caller
    relies on the filesystem's order instead of sorting.
    """

    def __init__(self):
        self.dirs: dict[PurePosixPath, datetime] = {}
        self.files: dict[PurePosixPath, datetime] = {}
        self.errors: dict[PurePosixPath, OSError] = {}
        self.listed: list[PurePosixPath] = []

    def add_dir(self, path, created: datetime = datetime(2022, 8, 15)) -> PurePosixPath:
        path = PurePosixPath(path)
        for parent in reversed(path.parents):
            self.dirs.setdefault(parent, created)
        self.dirs[path] = created
        return path

    def add_file(self, path, created: datetime = IN_WINDOW) -> PurePosixPath:
        path = PurePosixPath(path)
        self.add_dir(path.parent)
        self.files[path] = created
        return path

    def _listing(self, path, entries) -> list[str]:
        path = PurePosixPath(path)
        self.listed.append(path)
        if path in self.errors:
            raise self.errors[path]
        names = [p.name for p in entries if p.parent == path and p != path]
        return sorted(names, reverse=True)

    def is_dir(self, path) -> bool:
        return PurePosixPath(path) in self.dirs

    def list_dirs(self, path) -> list[str]:
        return self._listing(path, self.dirs)

    def list_files(self, path) -> list[str]:
        return self._listing(path, self.files)

    def created_at(self, path) -> datetime:
        path = PurePosixPath(path)
        if path in self.files:
            return self.files[path]
        if path in self.dirs:
            return self.dirs[path]
        raise FileNotFoundError(2, 'No such file or directory', str(path))


def make_student(username: str = 'jdoe', **kwargs) -> StudentRecord:
    """Create a StudentRecord with defaults."""
    defaults = dict(
        full_name='Doe, Jane Q.',
        email=f'{username}@example.org',
        first_name='Jane',
        last_name='Doe',
        username=username,
        home_dir=ROOT / username,
    )
    defaults.update(kwargs)
    return StudentRecord(**defaults)


@pytest.fixture
def fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def window() -> AssignmentWindow:
    return AssignmentWindow.from_dates(ASSIGNED, DUE)


@pytest.fixture
def patterns() -> PatternSet:
    return PatternSet.build(due=DUE)


@pytest.fixture
def checker(fs, patterns, window) -> BackupChecker:
    return BackupChecker(patterns, window, fs=fs)


@pytest.fixture
def home(fs) -> PurePosixPath:
    """Existing, empty home directory of student 'jdoe'."""
    return fs.add_dir(ROOT / 'jdoe')
