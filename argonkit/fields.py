"""Access to the fields of a configuration dataclass by name."""

from __future__ import annotations

import dataclasses
import math
import re
from collections.abc import Iterator
from typing import Any

_INTEGER = re.compile(r"[+-]?[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOATS = {"inf": math.inf, "infinity": math.inf, "nan": math.nan}
_TYPE_NAMES = {"str": str, "bool": bool, "int": int, "float": float}


def parse_value(text: str, kind: type) -> Any:
    """Parse ``text`` strictly into a value of ``kind`` (str, bool, int or float)."""
    if kind is str:
        return text
    if kind is bool:
        if text == "true":
            return True
        if text == "false":
            return False
        raise ValueError(f"provided string was not `true` or `false`: {text!r}")
    if kind is int:
        if not _INTEGER.fullmatch(text):
            raise ValueError(f"invalid digit found in string: {text!r}")
        return int(text)
    if kind is float:
        if _FLOAT.fullmatch(text):
            return float(text)
        sign = -1.0 if text.startswith("-") else 1.0
        special = _SPECIAL_FLOATS.get(text.lstrip("+-").lower())
        if special is not None and len(text) - len(text.lstrip("+-")) <= 1:
            return sign * special
        raise ValueError(f"invalid float literal: {text!r}")
    raise TypeError(f"unsupported field type: {kind!r}")


def _resolve_type(annotation: Any) -> Any:
    if isinstance(annotation, str):
        return _TYPE_NAMES.get(annotation.strip(), annotation)
    return annotation


class FieldAccess:
    """Mixin for dataclasses: look up, assign and iterate fields by name.

    Fields whose metadata holds a true ``skip`` entry are left out.
    """

    @classmethod
    def _field_types(cls) -> dict[str, Any]:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a dataclass")
        return {
            field.name: _resolve_type(field.type)
            for field in dataclasses.fields(cls)
            if not field.metadata.get("skip")
        }

    def get(self, index: str) -> Any | None:
        """Return the value of field ``index``, or None if there is no such field."""
        if index not in self._field_types():
            return None
        return getattr(self, index)

    def set(self, index: str, value: str) -> None:
        """Parse ``value`` according to the field's type and assign it."""
        types = self._field_types()
        if index not in types:
            raise KeyError(f"Field: {index} does not exist")
        setattr(self, index, parse_value(value, types[index]))

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        for name in self._field_types():
            yield name, getattr(self, name)