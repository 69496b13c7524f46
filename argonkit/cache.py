"""Caches of file system IDs used to stitch rename events together."""

from __future__ import annotations

import abc
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator


class RecursiveMode(Enum):
    """Whether a watched root includes its whole subtree."""

    RECURSIVE = "recursive"
    NON_RECURSIVE = "non-recursive"


@dataclass(frozen=True)
class FileId:
    """A unique identity of a file on its file system."""

    device_id: int
    inode_number: int


def get_file_id(path: Path | str) -> FileId:
    """Read the file ID of ``path``, following symbolic links; raises OSError."""
    status = os.stat(path)
    return FileId(status.st_dev, status.st_ino)


def _is_under(path: Path, base: Path) -> bool:
    return path == base or path.is_relative_to(base)


def _walk(root: Path, max_depth: int | None) -> Iterator[tuple[Path, FileId]]:
    """Yield every readable path under ``root`` with its ID, following links."""
    stack: list[tuple[Path, int, frozenset[FileId]]] = [(root, 0, frozenset())]
    while stack:
        path, depth, ancestors = stack.pop()
        try:
            file_id = get_file_id(path)
        except OSError:
            continue
        if file_id in ancestors:
            continue
        yield path, file_id
        if max_depth is not None and depth >= max_depth:
            continue
        try:
            if not path.is_dir():
                continue
            children = list(path.iterdir())
        except OSError:
            continue
        below = ancestors | {file_id}
        stack.extend((child, depth + 1, below) for child in children)


class FileIdCache(abc.ABC):
    """The interface of a file ID cache."""

    @abc.abstractmethod
    def cached_file_id(self, path: Path | str) -> FileId | None:
        """Return the cached ID of ``path`` without touching the disk."""

    @abc.abstractmethod
    def add_path(self, path: Path | str) -> None:
        """Add ``path`` to the cache or refresh it."""

    @abc.abstractmethod
    def remove_path(self, path: Path | str) -> None:
        """Forget ``path`` and everything below it."""

    @abc.abstractmethod
    def rescan(self) -> None:
        """Re-read every watched path."""


@dataclass
class FileIdMap(FileIdCache):
    """A cache holding the file system IDs of all watched files."""

    paths: dict[Path, FileId] = field(default_factory=dict)
    roots: list[tuple[Path, RecursiveMode]] = field(default_factory=list)

    def add_root(self, path: Path | str, recursive_mode: RecursiveMode) -> None:
        """Watch ``path``; with RECURSIVE mode, all its children are cached too."""
        path = Path(path)
        self.roots.append((path, recursive_mode))
        self.add_path(path)

    def remove_root(self, path: Path | str) -> None:
        """Stop watching ``path`` and every root below it."""
        path = Path(path)
        self.roots = [(root, mode) for root, mode in self.roots if not _is_under(root, path)]
        self.remove_path(path)

    def cached_file_id(self, path: Path | str) -> FileId | None:
        return self.paths.get(Path(path))

    def add_path(self, path: Path | str) -> None:
        path = Path(path)
        is_recursive = next(
            (mode is RecursiveMode.RECURSIVE for root, mode in self.roots if _is_under(path, root)),
            False,
        )
        self.paths.update(_walk(path, None if is_recursive else 1))

    def remove_path(self, path: Path | str) -> None:
        path = Path(path)
        self.paths = {p: i for p, i in self.paths.items() if not _is_under(p, path)}

    def rescan(self) -> None:
        for root, _ in list(self.roots):
            self.add_path(root)


class NoCache(FileIdCache):
    """A cache that holds nothing, disabling file ID tracking."""

    def cached_file_id(self, path: Path | str) -> FileId | None:
        return None

    def add_path(self, path: Path | str) -> None:
        pass

    def remove_path(self, path: Path | str) -> None:
        pass

    def rescan(self) -> None:
        pass