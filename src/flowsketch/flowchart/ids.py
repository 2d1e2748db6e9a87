"""Identifier sanitizing for nodes and edges."""

from __future__ import annotations

import re

MAX_ID_LENGTH = 50

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def sanitize_id(value: str, fallback: str) -> str:
    """Reduce ``value`` to a lowercase kebab-case slug of at most 50 characters.

    >>> sanitize_id("Start Node!!", "node-1")
    'start-node'
    >>> sanitize_id("???", "node-3")
    'node-3'
    """
    safe = _NON_ALNUM.sub("-", str(value).lower()).strip("-")[:MAX_ID_LENGTH]
    return safe or fallback


def claim_node_id(value: str, position: int, used: set[str]) -> str:
    """Sanitize a node id and reserve it in ``used``.

    ``position`` is the node's 1-based index in the document. A collision gets
    ``-{position}`` appended, so two nodes both named "step" at positions 1
    and 2 become "step" and "step-2". If that suffixed form is itself taken, a
    running counter follows it.
    """
    candidate = sanitize_id(value, f"node-{position}")
    if candidate in used:
        base = f"{candidate}-{position}"
        candidate = base
        counter = 2
        while candidate in used:
            candidate = f"{base}-{counter}"
            counter += 1
    used.add(candidate)
    return candidate
