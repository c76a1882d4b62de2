"""Naming rules used to recognise backup directories and backup files."""

import enum
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from checkbackups import ConfigError

# Defaults for the Unity "Prototype 1" assignment
DEFAULT_BACKUP_DIR = 'Unity Project Backups'
DEFAULT_BACKUP_DIR_TIGHT_REGEX = 'Unity Project[s]* Backup[s]*'
DEFAULT_BACKUP_DIR_LOOSE_REGEX = 'backup'
DEFAULT_PROJECT_NAME = 'Prototype-1'
DEFAULT_EXTENSION = '.unitypackage'

# Points per tier
EXACT_POINTS = 4
TIGHT_DIR_POINTS = 3
LOOSE_DIR_POINTS = 2
MINIMAL_POINTS = 1
WELL_FORMED_FILE_POINTS = 2

_SEPARATORS_RE = re.compile(r'[-_ .]+')


class MatchKind(enum.Enum):
    EXACT = 'exact'
    TIGHT_REGEX = 'tight'
    LOOSE_REGEX = 'loose'
    ANY_WITH_EXTENSION = 'extension'


@dataclass(frozen=True)
class PatternTier:
    """One naming rule and the points it is worth."""

    name: str
    kind: MatchKind
    pattern: str
    weight: int
    _regex: Optional[re.Pattern] = field(
        default=None, init=False, repr=False, compare=False,
    )

    def __post_init__(self):
        if self.kind in (MatchKind.TIGHT_REGEX, MatchKind.LOOSE_REGEX):
            try:
                regex = re.compile(self.pattern, re.IGNORECASE)
            except re.error as exc:
                raise ConfigError(
                    f"Invalid regex for tier '{self.name}': {self.pattern!r} ({exc})"
                ) from exc
            object.__setattr__(self, '_regex', regex)
        elif not self.pattern:
            raise ConfigError(f"Empty pattern for tier '{self.name}'")

    def matches(self, name: str) -> bool:
        """Check whether a directory or file name satisfies this tier."""
        if self.kind is MatchKind.EXACT:
            return name.casefold() == self.pattern.casefold()
        if self.kind is MatchKind.ANY_WITH_EXTENSION:
            return name.casefold().endswith(self.pattern.casefold())
        return self._regex.search(name) is not None


def project_regex(project_name: str) -> str:
    """Turn a project name into a regex tolerant of separator variations.

    ``Prototype-1`` becomes ``Prototype[-_ .]*1``, so ``Prototype 1`` and
    ``prototype_1`` are accepted as well.
    """
    parts = [re.escape(p) for p in _SEPARATORS_RE.split(project_name.strip()) if p]
    if not parts:
        raise ConfigError(f"Project name {project_name!r} has no usable characters")
    return '[-_ .]*'.join(parts)


def _normalize_extension(extension: str) -> str:
    extension = extension.strip()
    if not extension.lstrip('.'):
        raise ConfigError("Backup file extension must not be empty")
    return extension if extension.startswith('.') else '.' + extension


@dataclass(frozen=True)
class PatternSet:
    """All tiers for one assignment.

    Tiers are listed in the order they are tried. ``minimal_weight`` is used
    for directories that only qualify because they contain a backup file.
    """

    backup_dir: PatternTier
    directory_tiers: tuple[PatternTier, ...]
    file_tiers: tuple[PatternTier, ...]
    extension: PatternTier
    minimal_weight: int = MINIMAL_POINTS

    def __post_init__(self):
        if self.backup_dir.kind is not MatchKind.EXACT:
            raise ConfigError("Backup directory tier must be an exact match")
        if not self.directory_tiers:
            raise ConfigError("At least one directory tier is required")
        if not self.file_tiers:
            raise ConfigError("At least one file tier is required")
        if self.extension.kind is not MatchKind.ANY_WITH_EXTENSION:
            raise ConfigError("Extension tier must match on the file extension")

    @classmethod
    def build(
        cls,
        due: date,
        project_name: str = DEFAULT_PROJECT_NAME,
        backup_dir: str = DEFAULT_BACKUP_DIR,
        tight_regex: str = DEFAULT_BACKUP_DIR_TIGHT_REGEX,
        loose_regex: str = DEFAULT_BACKUP_DIR_LOOSE_REGEX,
        extension: str = DEFAULT_EXTENSION,
    ) -> 'PatternSet':
        """Build the standard tier set for a project due on ``due``.

        Raises:
            ConfigError: If a regex is malformed or a name is empty.
        """
        if not backup_dir.strip():
            raise ConfigError("Backup directory name must not be empty")
        ext = _normalize_extension(extension)
        ext_regex = re.escape(ext)
        any_ext = PatternTier('possible backup', MatchKind.ANY_WITH_EXTENSION, ext, MINIMAL_POINTS)

        return cls(
            backup_dir=PatternTier('exact', MatchKind.EXACT, backup_dir.strip(), EXACT_POINTS),
            directory_tiers=(
                PatternTier('tight match', MatchKind.TIGHT_REGEX, tight_regex, TIGHT_DIR_POINTS),
                PatternTier('loose match', MatchKind.LOOSE_REGEX, loose_regex, LOOSE_DIR_POINTS),
            ),
            file_tiers=(
                PatternTier(
                    'exact', MatchKind.EXACT,
                    f"{project_name.strip()}_{due.isoformat()}{ext}", EXACT_POINTS,
                ),
                PatternTier(
                    'correct pattern', MatchKind.TIGHT_REGEX,
                    rf"^{project_regex(project_name)}_\d{{4}}-\d{{2}}-\d{{2}}(?:_.*)?{ext_regex}$",
                    WELL_FORMED_FILE_POINTS,
                ),
                any_ext,
            ),
            extension=any_ext,
        )
