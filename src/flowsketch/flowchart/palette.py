"""Palette defaults, keyword palette selection, and palette normalization."""

from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import ValidationError

from ..utils.logging import get_logger
from .model import NodeColors, Palette

logger = get_logger(__name__)

DEFAULT_PALETTE = Palette(nodeColors=NodeColors())

# First match wins, so order matters.
DOMAIN_PALETTES: Tuple[Tuple[Tuple[str, ...], Palette], ...] = (
    (
        ("health", "medical", "hospital", "patient", "triage"),
        Palette(
            name="Clinical Signal",
            canvas="#edf8fb",
            panel="#ffffff",
            text="#1b2b40",
            mutedText="#5b6f87",
            edge="#2c728f",
            accent="#168aad",
            nodeColors=NodeColors(
                start="#2a9d8f",
                process="#3a86ff",
                decision="#ff9f1c",
                data="#f28482",
                subprocess="#6f5cc2",
                end="#d7263d",
                actor="#00a896",
                document="#e9c46a",
            ),
        ),
    ),
    (
        ("finance", "bank", "business", "sales", "customer", "onboarding"),
        Palette(
            name="Executive Deck",
            canvas="#f4f6fb",
            panel="#ffffff",
            text="#1f2a3d",
            mutedText="#60708d",
            edge="#4f5d95",
            accent="#1f7a8c",
            nodeColors=NodeColors(
                start="#2e8b57",
                process="#2d6cdf",
                decision="#f4a259",
                data="#b56576",
                subprocess="#7a5ad9",
                end="#d1495b",
                actor="#1f9e89",
                document="#d4a72c",
            ),
        ),
    ),
    (
        ("education", "student", "classroom", "learning", "school"),
        Palette(
            name="Classroom Focus",
            canvas="#f9f6ef",
            panel="#fffefb",
            text="#2c2a3a",
            mutedText="#69657e",
            edge="#5f6f9c",
            accent="#2a9d8f",
            nodeColors=NodeColors(
                start="#2b9348",
                process="#4361ee",
                decision="#ff8800",
                data="#ef476f",
                subprocess="#8e7dbe",
                end="#d90429",
                actor="#1ea896",
                document="#e9c46a",
            ),
        ),
    ),
)


def pick_palette_from_prompt(prompt: str) -> Palette:
    lower_prompt = (prompt or "").lower()
    for keywords, palette in DOMAIN_PALETTES:
        if any(word in lower_prompt for word in keywords):
            return palette
    return DEFAULT_PALETTE


def _validate(candidate: Any) -> Optional[Palette]:
    if isinstance(candidate, Palette):
        return candidate
    try:
        return Palette.model_validate(candidate)
    except ValidationError as exc:
        logger.debug(
            "Palette rejected",
            extra={"errors": [".".join(map(str, err["loc"])) for err in exc.errors()]},
        )
        return None


def normalize_palette(raw: Any, fallback: Any = None) -> Palette:
    """Validate a palette as a whole.

    A single bad color discards the entire candidate; there is no per-field
    patching. ``raw`` is tried first, then ``fallback``, then the default
    palette. Slots that are simply absent take their default color.
    """
    for candidate in (raw, fallback):
        if candidate is None:
            continue
        palette = _validate(candidate)
        if palette is not None:
            return palette
    return DEFAULT_PALETTE
