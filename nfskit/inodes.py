"""File metadata and the inode-number to path registry."""

from __future__ import annotations

import os
import stat as _stat
import threading
from datetime import datetime, timezone
from typing import Iterator


class FileInfo:
    """Metadata of one file, taken from an ``os.stat_result``."""

    def __init__(self, name: str, st: os.stat_result) -> None:
        self.name = name
        self._st = st

    def __repr__(self) -> str:
        return f"FileInfo(name={self.name!r}, inode={self.inode()}, size={self.size()})"

    def atime(self) -> datetime:
        """Time of last access."""
        return datetime.fromtimestamp(self._st.st_atime, tz=timezone.utc)

    def ctime(self) -> datetime:
        """Time of last status change."""
        return datetime.fromtimestamp(self._st.st_ctime, tz=timezone.utc)

    def mtime(self) -> datetime:
        """Time of last modification."""
        return datetime.fromtimestamp(self._st.st_mtime, tz=timezone.utc)

    def num_links(self) -> int:
        return int(self._st.st_nlink)

    def inode(self) -> int:
        return int(self._st.st_ino)

    def size(self) -> int:
        return int(self._st.st_size)

    def mode(self) -> int:
        """The raw ``st_mode`` bits: file type and permissions."""
        return int(self._st.st_mode)

    def is_dir(self) -> bool:
        return _stat.S_ISDIR(self._st.st_mode)


def stat(name: str) -> FileInfo:
    """Return metadata for ``name`` without following a final symbolic link."""
    return FileInfo(os.path.basename(name), os.lstat(name))


def _walk(directory: str) -> Iterator[str]:
    """Yield every path below ``directory`` in lexical order, without following links.

    Errors while listing a directory propagate to the caller.
    """
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        yield entry.path
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path)


class Inodes:
    """A thread-safe two-way map between inode numbers and host paths."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._inodes: dict[int, str] = {}
        self._paths: dict[str, int] = {}

    def scan(self, workdir: str) -> None:
        """Record the inode of every entry under ``workdir``, itself included."""
        with self._lock:
            root_inode = os.lstat(workdir).st_ino
            self._inodes[root_inode] = workdir
            self._paths[workdir] = root_inode
            for path in _walk(workdir):
                inode = os.lstat(path).st_ino
                self._inodes[inode] = path
                self._paths[path] = inode

    def update_all(self, name: str) -> None:
        """Record ``name`` and each parent up to the first one already known."""
        not_first = False
        while True:
            if not_first and self.exist_path(name):
                break
            fi = stat(name)
            self.add(fi.inode(), name)
            name = os.path.dirname(name)
            not_first = True

    def get_path(self, inode: int) -> str:
        """Return the path of ``inode``, or an empty string if unknown."""
        with self._lock:
            return self._inodes.get(inode, "")

    def get_id(self, path: str) -> int:
        """Return the inode of ``path``, or 0 if unknown."""
        with self._lock:
            return self._paths.get(path, 0)

    def exist_path(self, path: str) -> bool:
        with self._lock:
            return path in self._paths

    def add(self, inode: int, path: str) -> None:
        with self._lock:
            self._inodes[inode] = path
            self._paths[path] = inode

    def remove_id(self, inode: int) -> None:
        with self._lock:
            path = self._inodes.pop(inode, "")
            self._paths.pop(path, None)

    def remove_path(self, path: str) -> None:
        with self._lock:
            inode = self._paths.pop(path, 0)
            self._inodes.pop(inode, None)