"""A human readable JSON writer with optional single-line arrays."""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TextIO


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return "null"
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        return f"{mantissa}e{int(exponent)}"
    return text


def _format_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, int):
        return str(key)
    raise TypeError(f"key must be a string, not {type(key).__name__}")


class _Emitter:
    def __init__(self, indent: str, array_breaks: bool) -> None:
        self._indent = indent
        self._array_breaks = array_breaks
        self._depth = 0
        self._has_value = False

    def emit(self, value: Any) -> Iterator[str]:
        if value is None:
            yield "null"
        elif value is True:
            yield "true"
        elif value is False:
            yield "false"
        elif isinstance(value, int):
            yield str(int(value))
        elif isinstance(value, float):
            yield _format_float(value)
        elif isinstance(value, str):
            yield json.dumps(value, ensure_ascii=False)
        elif isinstance(value, Mapping):
            yield from self._object(value)
        elif isinstance(value, (list, tuple)):
            yield from self._array(value)
        else:
            raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")

    def _array(self, items: list | tuple) -> Iterator[str]:
        self._depth += 1
        self._has_value = False
        yield "["
        for position, item in enumerate(items):
            first = position == 0
            if self._array_breaks:
                yield "\n" if first else ",\n"
                yield self._indent * self._depth
            elif not first:
                yield ", "
            yield from self.emit(item)
            self._has_value = True
        self._depth -= 1
        if self._has_value and self._array_breaks:
            yield "\n"
            yield self._indent * self._depth
        yield "]"

    def _object(self, mapping: Mapping) -> Iterator[str]:
        self._depth += 1
        self._has_value = False
        yield "{"
        for position, (key, item) in enumerate(mapping.items()):
            yield "\n" if position == 0 else ",\n"
            yield self._indent * self._depth
            yield json.dumps(_format_key(key), ensure_ascii=False)
            yield ": "
            yield from self.emit(item)
            self._has_value = True
        self._depth -= 1
        if self._has_value:
            yield "\n"
            yield self._indent * self._depth
        yield "}"


@dataclass(frozen=True)
class JsonFormatter:
    """Pretty printer; arrays may be kept on one line with ``array_breaks=False``."""

    indent: str = "  "
    array_breaks: bool = True

    def _chunks(self, value: Any) -> Iterator[str]:
        return _Emitter(self.indent, self.array_breaks).emit(value)

    def format(self, value: Any) -> str:
        """Return ``value`` as formatted JSON text."""
        return "".join(self._chunks(value))

    def write(self, value: Any, stream: TextIO) -> None:
        """Write ``value`` as formatted JSON text to ``stream``."""
        for chunk in self._chunks(value):
            stream.write(chunk)


def dumps(value: Any, indent: str = "  ", array_breaks: bool = True) -> str:
    """Format ``value`` as human readable JSON."""
    return JsonFormatter(indent=indent, array_breaks=array_breaks).format(value)