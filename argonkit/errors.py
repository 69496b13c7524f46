"""Error types raised by the update helpers."""

from __future__ import annotations


class SelfUpdateError(Exception):
    """Base class of every update error; renders as ``<label>: <message>``."""

    label = "SelfUpdateError"

    def __init__(self, message: object) -> None:
        super().__init__(message)
        self.message = str(message)

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class UpdateError(SelfUpdateError):
    """The update itself failed or was aborted."""

    label = "UpdateError"


class NetworkError(SelfUpdateError):
    """A network request failed."""

    label = "NetworkError"


class ReleaseError(SelfUpdateError):
    """Release metadata was missing or invalid."""

    label = "ReleaseError"


class ConfigError(SelfUpdateError):
    """The updater was configured incorrectly."""

    label = "ConfigError"


class IoError(SelfUpdateError):
    """A file system operation failed."""

    label = "IoError"


class JsonError(SelfUpdateError):
    """A JSON document could not be read or written."""

    label = "JsonError"


class SemVerError(SelfUpdateError):
    """A version string is not valid semantic versioning."""

    label = "SemVerError"


class ArchiveNotEnabledError(SelfUpdateError):
    """The archive format of a file is not supported."""

    label = "ArchiveNotEnabled"

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(
            f"Archive extension '{extension}' not supported, "
            f"please enable 'archive-{extension}' feature!"
        )