"""Two-stage tiered matching: backup directory first, then backup file."""

import logging
from collections.abc import Callable, Iterable
from pathlib import PurePath
from typing import Optional

from rapidfuzz.distance import JaroWinkler

from checkbackups import AssignmentWindow, MatchResult
from checkbackups.filesystem import FileSystem
from checkbackups.patterns import PatternSet, PatternTier
from checkbackups.scoring import apply_window

log = logging.getLogger(__name__)


def first_match(
    names: Iterable[str],
    tiers: Iterable[PatternTier],
    fallback: Optional[Callable[[str], Optional[PatternTier]]] = None,
) -> tuple[str, PatternTier] | None:
    """Find the first name that satisfies any tier.

    Names are visited in the order given; for each name the tiers are tried
    in order, then ``fallback`` if supplied. The first hit ends the search, so a
    later name never wins over an earlier one, whatever its tier.

    Args:
        names: Candidate directory or file names.
        tiers: Tiers in priority order.
        fallback: Fallback check returning the tier to award, or None.

    Returns:
        (name, tier) of the first hit, or None.
    """
    tiers = tuple(tiers)
    for name in names:
        for tier in tiers:
            if tier.matches(name):
                return name, tier
        if fallback is not None:
            tier = fallback(name)
            if tier is not None:
                return name, tier
    return None


def _closest_name(target: str, names: list[str]) -> tuple[str, float] | None:
    """Return the name most similar to target (Jaro-Winkler), for diagnostics."""
    best: tuple[str, float] | None = None
    for name in names:
        sim = JaroWinkler.similarity(target.casefold(), name.casefold())
        if best is None or sim > best[1]:
            best = (name, sim)
    return best


class FileResolver:
    """Finds the backup file inside a directory."""

    def __init__(self, fs: FileSystem, patterns: PatternSet):
        self.fs = fs
        self.patterns = patterns

    def has_backup(self, directory: PurePath) -> bool:
        """Check whether directory holds any file with the backup extension.

        No creation-time check is made here; the window is applied only when
        the chosen directory is resolved.
        """
        names = sorted(self.fs.list_files(directory))
        return first_match(names, [self.patterns.extension]) is not None

    def resolve(
        self,
        directory: Optional[PurePath],
        window: AssignmentWindow,
    ) -> MatchResult:
        """Pick the backup file in directory and score it.

        Files are visited in name order. The first file matching any tier
        is taken, even if a later file would score higher.
        """
        if directory is None:
            return MatchResult.not_found("no backup directory to search")

        try:
            hit = first_match(sorted(self.fs.list_files(directory)), self.patterns.file_tiers)
            if hit is None:
                log.debug("%s: no backup file", directory)
                return MatchResult.not_found("no backup file found")

            name, tier = hit
            path = directory / name
            created = self.fs.created_at(path)
        except OSError as exc:
            log.warning("Cannot read backup directory %s: %s", directory, exc)
            return MatchResult.not_found(f"cannot read backup directory: {exc.strerror or exc}")

        log.debug("%s: %s (%s)", path, tier.name, created)
        result = MatchResult(path=path, points=tier.weight, reason=tier.name, created_at=created)
        return apply_window(result, window)


class DirectoryResolver:
    """Finds the backup directory inside a student's home directory."""

    def __init__(self, fs: FileSystem, patterns: PatternSet, files: FileResolver):
        self.fs = fs
        self.patterns = patterns
        self.files = files

    def _minimal_check(self, home_dir: PurePath) -> Callable[[str], Optional[PatternTier]]:
        minimal = PatternTier(
            'minimal match',
            self.patterns.extension.kind,
            self.patterns.extension.pattern,
            self.patterns.minimal_weight,
        )

        def check(name: str) -> Optional[PatternTier]:
            try:
                found = self.files.has_backup(home_dir / name)
            except OSError as exc:
                log.warning("Skipping unreadable directory %s: %s", home_dir / name, exc)
                return None
            return minimal if found else None

        return check

    def _found(self, path: PurePath, points: int, reason: str) -> MatchResult:
        try:
            created = self.fs.created_at(path)
        except OSError as exc:
            log.warning("Cannot read creation time of %s: %s", path, exc)
            created = None
        return MatchResult(path=path, points=points, reason=reason, created_at=created)

    def resolve(self, home_dir: PurePath) -> MatchResult:
        """Pick the student's backup directory.

        Priority:
        1. Subdirectory named exactly like the backup folder
        2. First subdirectory (by name) matching the tight or loose regex,
           or holding a backup file (minimal match)
        3. The home directory itself, if it holds a backup file
        """
        try:
            if not self.fs.is_dir(home_dir):
                log.info("Home directory %s not found", home_dir)
                return MatchResult.not_found("home directory not found")

            names = sorted(self.fs.list_dirs(home_dir))

            exact = first_match(names, [self.patterns.backup_dir])
            if exact is not None:
                log.debug("%s: exact match", home_dir / exact[0])
                return self._found(home_dir / exact[0], exact[1].weight, exact[1].name)

            hit = first_match(names, self.patterns.directory_tiers, self._minimal_check(home_dir))
            if hit is not None:
                name, tier = hit
                log.debug("%s: %s", home_dir / name, tier.name)
                return self._found(home_dir / name, tier.weight, tier.name)

            if self.files.has_backup(home_dir):
                log.debug("%s: minimal match in home directory", home_dir)
                return self._found(home_dir, self.patterns.minimal_weight, "minimal match (home)")
        except OSError as exc:
            log.warning("Cannot read home directory %s: %s", home_dir, exc)
            return MatchResult.not_found(f"cannot read home directory: {exc.strerror or exc}")

        closest = _closest_name(self.patterns.backup_dir.pattern, names)
        if closest is not None:
            log.info(
                "No backup directory in %s (closest: '%s', similarity %.2f)",
                home_dir, closest[0], closest[1],
            )
        return MatchResult.not_found("backup directory not found")
