"""Archive detection and extraction, file moves and update status."""

from __future__ import annotations

import gzip
import os
import platform
import shutil
import sys
import tarfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import IO, Union

from argonkit.errors import IoError, UpdateError

PathLike = Union[str, "os.PathLike[str]"]

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "i386": "i686",
    "x86": "i686",
}


def get_target() -> str:
    """Return the target triple of this machine, e.g. ``x86_64-unknown-linux-gnu``."""
    machine = platform.machine().lower()
    arch = _ARCH_ALIASES.get(machine, machine)
    system = platform.system()
    if system == "Linux":
        libc = platform.libc_ver()[0]
        env = "gnu" if libc == "glibc" else "musl"
        return f"{arch}-unknown-linux-{env}"
    if system == "Darwin":
        return f"{arch}-apple-darwin"
    if system == "Windows":
        return f"{arch}-pc-windows-msvc"
    return f"{arch}-unknown-{system.lower()}"


def confirm(msg: str) -> None:
    """Print ``msg`` and raise UpdateError unless the reply is blank, ``y`` or ``Y``."""
    try:
        print(msg, end="", flush=True)
        reply = sys.stdin.readline()
    except OSError as exc:
        raise IoError(exc) from exc
    reply = reply.strip().lower()
    if reply and reply != "y":
        raise UpdateError("Update aborted")


@dataclass(frozen=True)
class Status:
    """The outcome of an update, carrying a version tag."""

    tag: str
    is_updated: bool = False

    def version(self) -> str:
        """Return the version tag."""
        return self.tag

    def uptodate(self) -> bool:
        """True if nothing had to be updated."""
        return not self.is_updated

    def updated(self) -> bool:
        """True if an update was installed."""
        return self.is_updated

    def __str__(self) -> str:
        label = "Updated" if self.is_updated else "UpToDate"
        return f"{label}({self.tag})"


class Compression(Enum):
    """Supported compression formats."""

    GZ = "gz"


class ArchiveFormat(Enum):
    """Supported archive containers."""

    PLAIN = "plain"
    TAR = "tar"
    ZIP = "zip"


@dataclass(frozen=True)
class ArchiveKind:
    """An archive container together with its optional compression."""

    format: ArchiveFormat
    compression: Compression | None = None

    @classmethod
    def plain(cls, compression: Compression | None = None) -> ArchiveKind:
        return cls(ArchiveFormat.PLAIN, compression)

    @classmethod
    def tar(cls, compression: Compression | None = None) -> ArchiveKind:
        return cls(ArchiveFormat.TAR, compression)

    @classmethod
    def zip(cls) -> ArchiveKind:
        return cls(ArchiveFormat.ZIP)


def detect_archive(path: PathLike) -> ArchiveKind:
    """Detect the archive kind of ``path`` from its file extension."""
    path = Path(path)
    ext = path.suffix
    if ext == ".zip":
        return ArchiveKind.zip()
    if ext == ".tar":
        return ArchiveKind.tar()
    if ext == ".tgz":
        return ArchiveKind.tar(Compression.GZ)
    if ext == ".gz":
        if Path(path.stem).suffix == ".tar":
            return ArchiveKind.tar(Compression.GZ)
        return ArchiveKind.plain(Compression.GZ)
    return ArchiveKind.plain()


@contextmanager
def _errors() -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        raise IoError(exc) from exc
    except (tarfile.TarError, zipfile.BadZipFile) as exc:
        raise UpdateError(exc) from exc


def _reader(source: IO[bytes], compression: Compression | None) -> IO[bytes]:
    if compression is Compression.GZ:
        return gzip.GzipFile(fileobj=source, mode="rb")
    return source


def _tar_extract(archive: tarfile.TarFile, into_dir: Path, member: tarfile.TarInfo | None = None) -> None:
    options = {"filter": "data"} if hasattr(tarfile, "data_filter") else {}
    if member is None:
        archive.extractall(into_dir, **options)
    else:
        archive.extract(member, into_dir, **options)


def _zip_member_to(archive: zipfile.ZipFile, info: zipfile.ZipInfo, into_dir: Path) -> None:
    output_path = into_dir / info.filename
    if info.is_dir():
        output_path.mkdir(parents=True, exist_ok=True)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with archive.open(info) as src, open(output_path, "wb") as dst:
        shutil.copyfileobj(src, dst)


@dataclass
class Extract:
    """Extracts an archive, or a single file out of it, into a directory.

    If ``archive`` is not given, the kind is detected from the file extension.
    """

    source: Path
    archive: ArchiveKind | None = None

    def __post_init__(self) -> None:
        self.source = Path(self.source)

    def _kind(self) -> ArchiveKind:
        return self.archive if self.archive is not None else detect_archive(self.source)

    def extract_into(self, into_dir: PathLike) -> None:
        """Extract the whole archive into ``into_dir``.

        A single compressed file is written to ``into_dir`` under its own
        name with the last extension removed.
        """
        into_dir = Path(into_dir)
        kind = self._kind()
        with _errors(), open(self.source, "rb") as source:
            if kind.format is ArchiveFormat.ZIP:
                with zipfile.ZipFile(source) as archive:
                    for info in archive.infolist():
                        _zip_member_to(archive, info, into_dir)
            elif kind.format is ArchiveFormat.TAR:
                mode = "r:gz" if kind.compression is Compression.GZ else "r:"
                with tarfile.open(fileobj=source, mode=mode) as archive:
                    _tar_extract(archive, into_dir)
            else:
                into_dir.mkdir(parents=True, exist_ok=True)
                if not self.source.name:
                    raise UpdateError("Extractor source has no file-name")
                out_path = (into_dir / self.source.name).with_suffix("")
                with _reader(source, kind.compression) as reader, open(out_path, "wb") as out:
                    shutil.copyfileobj(reader, out)

    def extract_file(self, into_dir: PathLike, file_to_extract: PathLike) -> None:
        """Extract one file into ``into_dir``, keeping its path inside the archive.

        A single compressed file is saved as ``file_to_extract``'s name.
        Uncompressed plain files and uncompressed tar archives are left alone.
        """
        into_dir = Path(into_dir)
        wanted = PurePosixPath(Path(file_to_extract).as_posix())
        kind = self._kind()
        with _errors(), open(self.source, "rb") as source:
            if kind.format is ArchiveFormat.ZIP:
                with zipfile.ZipFile(source) as archive:
                    try:
                        info = archive.getinfo(str(wanted))
                    except KeyError:
                        raise UpdateError(
                            f"Could not find the required path in the archive: {str(wanted)!r}"
                        ) from None
                    _zip_member_to(archive, info, into_dir)
                return
            if kind.compression is None:
                return
            if kind.format is ArchiveFormat.TAR:
                with tarfile.open(fileobj=source, mode="r:gz") as archive:
                    member = next(
                        (m for m in archive.getmembers() if PurePosixPath(m.name) == wanted),
                        None,
                    )
                    if member is None:
                        raise UpdateError(
                            f"Could not find the required path in the archive: {str(wanted)!r}"
                        )
                    _tar_extract(archive, into_dir, member)
            else:
                into_dir.mkdir(parents=True, exist_ok=True)
                if not wanted.name:
                    raise UpdateError("Extractor source has no file-name")
                out_path = into_dir / wanted.name
                with _reader(source, kind.compression) as reader, open(out_path, "wb") as out:
                    shutil.copyfileobj(reader, out)


@dataclass
class Move:
    """Moves a file to a destination on the same file system.

    With ``temp`` set, an existing destination is first moved to ``temp``
    and restored from there if the move fails.
    """

    source: Path
    temp: Path | None = None

    def __post_init__(self) -> None:
        self.source = Path(self.source)
        if self.temp is not None:
            self.temp = Path(self.temp)

    def to_dest(self, dest: PathLike) -> None:
        """Move the source file to ``dest``."""
        dest = Path(dest)
        with _errors():
            if self.temp is None or not dest.exists():
                os.replace(self.source, dest)
                return
            os.replace(dest, self.temp)
            try:
                os.replace(self.source, dest)
            except OSError:
                os.replace(self.temp, dest)
                raise