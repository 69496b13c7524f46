"""Comparisons between two semantic version strings."""

from __future__ import annotations

import semver

from argonkit.errors import SemVerError


def _parse(text: str) -> semver.Version:
    try:
        return semver.Version.parse(text)
    except (ValueError, TypeError) as exc:
        raise SemVerError(exc) from exc


def bump_is_greater(current: str, other: str) -> bool:
    """Return True if ``other`` is a greater version than ``current``."""
    return _parse(other) > _parse(current)


def should_update(current: str, latest: str) -> bool:
    """Return True if ``latest`` is newer than ``current``."""
    return _parse(latest) > _parse(current)


def bump_is_compatible(current: str, other: str) -> bool:
    """Return True if ``other`` is a compatible upgrade of ``current``."""
    cur = _parse(current)
    new = _parse(other)
    if new.major == 0 and cur.major == 0:
        return cur.minor == new.minor and new.patch > cur.patch
    if new.major > 0:
        return cur.major == new.major and (
            new.minor > cur.minor or (cur.minor == new.minor and new.patch > cur.patch)
        )
    return False


def bump_is_major(current: str, other: str) -> bool:
    """Return True if ``other`` bumps the major version."""
    return _parse(other).major > _parse(current).major


def bump_is_minor(current: str, other: str) -> bool:
    """Return True if ``other`` bumps the minor version only."""
    cur = _parse(current)
    new = _parse(other)
    return cur.major == new.major and new.minor > cur.minor


def bump_is_patch(current: str, other: str) -> bool:
    """Return True if ``other`` bumps the patch version only."""
    cur = _parse(current)
    new = _parse(other)
    return cur.major == new.major and cur.minor == new.minor and new.patch > cur.patch