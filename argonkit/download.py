"""Downloading a URL into a writable stream, with an optional progress bar."""

from __future__ import annotations

import os
import re
import sys
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import BinaryIO

from argonkit.errors import IoError, NetworkError, UpdateError

DEFAULT_PROGRESS_TEMPLATE = "[{elapsed_precise}] [{bar:40}] {bytes}/{total_bytes} ({eta}) {msg}"
DEFAULT_PROGRESS_CHARS = "=>-"
DEFAULT_USER_AGENT = "argonkit/self-update"

_CHUNK_SIZE = 64 * 1024
_PLACEHOLDER = re.compile(r"\{(\w+)(?::(\d+))?\}")
_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")


def _set_ssl_vars() -> None:
    """Point TLS libraries at the usual certificate locations on Linux."""
    if sys.platform.startswith("linux"):
        os.environ.setdefault("SSL_CERT_FILE", "/etc/ssl/certs/ca-certificates.crt")
        os.environ.setdefault("SSL_CERT_DIR", "/etc/ssl/certs")


def _binary_size(count: float) -> str:
    for unit in _UNITS:
        if count < 1024 or unit == _UNITS[-1]:
            return f"{count:.0f} {unit}" if unit == "B" else f"{count:.2f} {unit}"
        count /= 1024
    return f"{count:.2f} {_UNITS[-1]}"


def _clock(seconds: float) -> str:
    whole = int(seconds)
    return f"{whole // 3600:02}:{whole % 3600 // 60:02}:{whole % 60:02}"


class _ProgressBar:
    """A single-line progress bar drawn on standard error."""

    def __init__(self, total: int, template: str, chars: str) -> None:
        self.total = total
        self.template = template
        self.chars = (chars + DEFAULT_PROGRESS_CHARS)[:3] if len(chars) < 3 else chars
        self.position = 0
        self.started = time.monotonic()

    def _bar(self, width: int) -> str:
        filled_char, head_char, empty_char = self.chars[0], self.chars[1], self.chars[-1]
        filled = width * self.position // self.total if self.total else width
        if filled >= width:
            return filled_char * width
        return filled_char * filled + head_char + empty_char * (width - filled - 1)

    def _render(self, msg: str) -> str:
        elapsed = time.monotonic() - self.started
        if self.position and self.position < self.total:
            eta = elapsed * (self.total - self.position) / self.position
        else:
            eta = 0.0

        def field(match: re.Match[str]) -> str:
            name, width = match.group(1), match.group(2)
            if name == "bar":
                return self._bar(int(width) if width else 40)
            values = {
                "elapsed_precise": _clock(elapsed),
                "bytes": _binary_size(self.position),
                "total_bytes": _binary_size(self.total),
                "eta": f"{int(eta)}s",
                "msg": msg,
                "pos": str(self.position),
                "len": str(self.total),
            }
            return values.get(name, match.group(0))

        return _PLACEHOLDER.sub(field, self.template)

    def set_position(self, position: int) -> None:
        self.position = position
        sys.stderr.write("\r" + self._render(""))
        sys.stderr.flush()

    def finish_with_message(self, msg: str) -> None:
        self.position = self.total
        sys.stderr.write("\r" + self._render(msg) + "\n")
        sys.stderr.flush()


def _content_length(value: str | None) -> int:
    if value is None:
        return 0
    try:
        return max(int(value.strip()), 0)
    except ValueError:
        return 0


@dataclass
class Download:
    """Downloads the resource behind ``url`` into a binary stream.

    A progress bar is drawn on standard error when ``show_progress`` is set
    and the response carries a content length.
    """

    url: str
    show_progress: bool = False
    headers: dict[str, str] = field(default_factory=dict)
    progress_template: str = DEFAULT_PROGRESS_TEMPLATE
    progress_chars: str = DEFAULT_PROGRESS_CHARS

    def set_header(self, name: str, value: str) -> Download:
        """Set a request header, replacing one of the same name; returns self."""
        for existing in [key for key in self.headers if key.lower() == name.lower()]:
            del self.headers[existing]
        self.headers[name] = value
        return self

    def _request_headers(self) -> dict[str, str]:
        headers = dict(self.headers)
        if not any(key.lower() == "user-agent" for key in headers):
            headers["User-Agent"] = DEFAULT_USER_AGENT
        return headers

    def download_to(self, dest: BinaryIO) -> None:
        """Write the downloaded bytes to ``dest``.

        Raises UpdateError for an unsuccessful status, NetworkError when the
        request cannot be made and IoError when reading or writing fails.
        """
        _set_ssl_vars()
        request = urllib.request.Request(self.url, headers=self._request_headers())
        try:
            response = urllib.request.urlopen(request)
        except urllib.error.HTTPError as exc:
            exc.close()
            raise UpdateError(f"Download request failed with status: {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise NetworkError(exc.reason) from exc
        except (OSError, ValueError) as exc:
            raise NetworkError(exc) from exc

        with response:
            status = getattr(response, "status", 200)
            if not 200 <= status < 300:
                raise UpdateError(f"Download request failed with status: {status}")
            size = _content_length(response.headers.get("Content-Length"))
            bar = (
                _ProgressBar(size, self.progress_template, self.progress_chars)
                if self.show_progress and size
                else None
            )
            downloaded = 0
            try:
                while chunk := response.read(_CHUNK_SIZE):
                    dest.write(chunk)
                    downloaded = min(downloaded + len(chunk), size)
                    if bar is not None:
                        bar.set_position(downloaded)
            except OSError as exc:
                raise IoError(exc) from exc
            if bar is not None:
                bar.finish_with_message("Done")