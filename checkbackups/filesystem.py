"""Read-only filesystem access used by the resolvers."""

import os
from datetime import datetime
from pathlib import Path, PurePath
from typing import Protocol


class FileSystem(Protocol):
    """What the resolvers need to know about a directory tree.

    All methods may raise OSError (unreachable share, permission denied).
    """

    def is_dir(self, path: PurePath) -> bool: ...

    def list_dirs(self, path: PurePath) -> list[str]: ...

    def list_files(self, path: PurePath) -> list[str]: ...

    def created_at(self, path: PurePath) -> datetime: ...


class LocalFileSystem:
    """FileSystem backed by the operating system (local disk or mounted share)."""

    def is_dir(self, path: PurePath) -> bool:
        return Path(path).is_dir()

    def list_dirs(self, path: PurePath) -> list[str]:
        with os.scandir(path) as entries:
            return [e.name for e in entries if e.is_dir()]

    def list_files(self, path: PurePath) -> list[str]:
        with os.scandir(path) as entries:
            return [e.name for e in entries if e.is_file()]

    def created_at(self, path: PurePath) -> datetime:
        """Return the creation time of a file.

        Uses ``st_birthtime`` where the platform records it (Windows, macOS,
        BSD). Linux does not expose it through os.stat, so the modification
        time stands in.
        """
        st = os.stat(path)
        timestamp = getattr(st, 'st_birthtime', None)
        if timestamp is None:
            timestamp = st.st_mtime
        return datetime.fromtimestamp(timestamp)
