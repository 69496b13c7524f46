"""Parsing of HTTP ``Link`` header values."""

from __future__ import annotations


def _strip_rel(part: str) -> str:
    while part.startswith("rel="):
        part = part[len("rel="):]
    return part.rstrip('"').lstrip('"')


def find_rel_next_link(link_str: str) -> str | None:
    """Return the first URI marked ``rel="next"`` in a Link header, if any."""
    for link in link_str.split(","):
        uri = None
        is_rel_next = False
        for part in link.split(";"):
            part = part.strip()
            if part.startswith("<") and part.endswith(">"):
                uri = part.lstrip("<").rstrip(">")
            elif part.startswith("rel=") and _strip_rel(part) == "next":
                is_rel_next = True

            if is_rel_next and uri is not None:
                return uri
    return None