"""File system events, their kinds and watcher errors."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from time import monotonic
from typing import Iterable


class EventKind(Enum):
    """The kind of a file system event, named as ``category-detail``."""

    ANY = "any"
    OTHER = "other"
    ACCESS_ANY = "access-any"
    ACCESS_READ = "access-read"
    ACCESS_OPEN_ANY = "access-open-any"
    ACCESS_OPEN_EXECUTE = "access-open-execute"
    ACCESS_OPEN_READ = "access-open-read"
    ACCESS_OPEN_WRITE = "access-open-write"
    ACCESS_OPEN_OTHER = "access-open-other"
    ACCESS_CLOSE_ANY = "access-close-any"
    ACCESS_CLOSE_EXECUTE = "access-close-execute"
    ACCESS_CLOSE_READ = "access-close-read"
    ACCESS_CLOSE_WRITE = "access-close-write"
    ACCESS_CLOSE_OTHER = "access-close-other"
    ACCESS_OTHER = "access-other"
    CREATE_ANY = "create-any"
    CREATE_FILE = "create-file"
    CREATE_FOLDER = "create-folder"
    CREATE_OTHER = "create-other"
    MODIFY_ANY = "modify-any"
    MODIFY_OTHER = "modify-other"
    MODIFY_DATA_ANY = "modify-data-any"
    MODIFY_DATA_SIZE = "modify-data-size"
    MODIFY_DATA_CONTENT = "modify-data-content"
    MODIFY_DATA_OTHER = "modify-data-other"
    MODIFY_METADATA_ANY = "modify-metadata-any"
    MODIFY_METADATA_ACCESS_TIME = "modify-metadata-access-time"
    MODIFY_METADATA_WRITE_TIME = "modify-metadata-write-time"
    MODIFY_METADATA_PERMISSIONS = "modify-metadata-permissions"
    MODIFY_METADATA_OWNERSHIP = "modify-metadata-ownership"
    MODIFY_METADATA_EXTENDED = "modify-metadata-extended"
    MODIFY_METADATA_OTHER = "modify-metadata-other"
    RENAME_ANY = "rename-any"
    RENAME_FROM = "rename-from"
    RENAME_TO = "rename-to"
    RENAME_BOTH = "rename-both"
    RENAME_OTHER = "rename-other"
    REMOVE_ANY = "remove-any"
    REMOVE_FILE = "remove-file"
    REMOVE_FOLDER = "remove-folder"
    REMOVE_OTHER = "remove-other"

    @classmethod
    def parse(cls, name: str) -> EventKind:
        """Return the kind called ``name``; raise ValueError for an unknown name."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown event type `{name}`") from None

    @property
    def is_access(self) -> bool:
        return self.value.startswith("access-")

    @property
    def is_create(self) -> bool:
        return self.value.startswith("create-")

    @property
    def is_remove(self) -> bool:
        return self.value.startswith("remove-")

    @property
    def is_rename(self) -> bool:
        return self.value.startswith("rename-")

    @property
    def is_modify(self) -> bool:
        """True for every modification, renames included."""
        return self.is_rename or self.value.startswith("modify-")

    @property
    def is_data_or_metadata(self) -> bool:
        return self.value.startswith(("modify-data-", "modify-metadata-"))

    @property
    def rename_mode(self) -> str | None:
        """The rename mode (any, from, to, both, other), or None if not a rename."""
        if not self.is_rename:
            return None
        return self.value[len("rename-"):]


class Flag(Enum):
    """Special markers attached to an event."""

    RESCAN = "rescan"


class ErrorKind(Enum):
    """The kind of a watcher error."""

    GENERIC = "generic"
    IO = "io"
    PATH_NOT_FOUND = "path-not-found"
    WATCH_NOT_FOUND = "watch-not-found"
    INVALID_CONFIG = "invalid-config"
    MAX_FILES_WATCH = "max-files-watch"

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS = {
    ErrorKind.GENERIC: "Generic error",
    ErrorKind.IO: "I/O error",
    ErrorKind.PATH_NOT_FOUND: "No path was found.",
    ErrorKind.WATCH_NOT_FOUND: "No watch was found.",
    ErrorKind.INVALID_CONFIG: "Invalid configuration",
    ErrorKind.MAX_FILES_WATCH: "OS file watch limit reached.",
}


class WatchError(Exception):
    """An error reported by a file watcher, optionally about some paths."""

    def __init__(
        self,
        kind: ErrorKind = ErrorKind.GENERIC,
        message: str | None = None,
        paths: Iterable[Path | str] = (),
    ) -> None:
        self.kind = kind
        self.message = message if message is not None else kind.description
        self.paths = [Path(p) for p in paths]
        super().__init__(self.message)

    def add_path(self, path: Path | str) -> WatchError:
        """Record another path the error is about; returns the error itself."""
        self.paths.append(Path(path))
        return self

    def __str__(self) -> str:
        if not self.paths:
            return self.message
        return f"{self.message} about {[str(p) for p in self.paths]}"

    def __repr__(self) -> str:
        return f"WatchError(kind={self.kind!r}, message={self.message!r}, paths={self.paths!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WatchError):
            return NotImplemented
        return (self.kind, self.message, self.paths) == (other.kind, other.message, other.paths)

    def __hash__(self) -> int:
        return hash((self.kind, self.message, tuple(self.paths)))


@dataclass
class Event:
    """A raw file system event."""

    kind: EventKind = EventKind.ANY
    paths: list[Path] = field(default_factory=list)
    tracker: int | None = None
    info: str | None = None
    flag: Flag | None = None

    def __post_init__(self) -> None:
        self.paths = [Path(p) for p in self.paths]

    def need_rescan(self) -> bool:
        """True if the back-end dropped events and the tree must be rescanned."""
        return self.flag is Flag.RESCAN

    def with_info(self, info: str) -> Event:
        """Return a copy of this event carrying ``info``."""
        return dataclasses.replace(self, paths=list(self.paths), info=info)


@dataclass
class DebouncedEvent:
    """An event together with the monotonic time at which it occurred."""

    event: Event = field(default_factory=Event)
    time: float = field(default_factory=monotonic)

    @classmethod
    def from_event(cls, event: Event, time: float | None = None) -> DebouncedEvent:
        """Wrap ``event``, stamped with ``time`` or the current monotonic time."""
        return cls(event, monotonic() if time is None else time)

    @property
    def kind(self) -> EventKind:
        return self.event.kind

    @property
    def paths(self) -> list[Path]:
        return self.event.paths

    @paths.setter
    def paths(self, value: Iterable[Path | str]) -> None:
        self.event.paths = [Path(p) for p in value]

    @property
    def tracker(self) -> int | None:
        return self.event.tracker

    @property
    def info(self) -> str | None:
        return self.event.info

    def need_rescan(self) -> bool:
        return self.event.need_rescan()