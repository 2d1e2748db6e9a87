"""Text-completion collaborator and response parsing."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

import anthropic

from ..config.settings import Settings, get_settings
from ..core.exceptions import CompletionError, MissingCredentialError, SchemaError
from ..utils.logging import get_logger

logger = get_logger(__name__)

_FENCED_BLOCK = re.compile(r"```[\w-]*\s*([\s\S]*?)\s*```")


def extract_json(text: str) -> Any:
    """Parse a completion that may be wrapped in a code fence with any language tag.

    >>> extract_json('```json\\n{"a": 1}\\n```')
    {'a': 1}
    """
    trimmed = (text or "").strip()
    match = _FENCED_BLOCK.search(trimmed)
    candidate = match.group(1) if match else trimmed
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise SchemaError(
            "Completion did not contain valid JSON",
            context={"error": str(exc), "response_preview": trimmed[:200]},
        ) from exc


class CompletionClient:
    """Thin wrapper over the Anthropic messages API."""

    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.settings.api_key:
            raise MissingCredentialError(
                "Missing API key. Set FLOWSKETCH_API_KEY or ANTHROPIC_API_KEY."
            )
        self._client = anthropic.Anthropic(api_key=self.settings.api_key)
        return self._client

    def complete(self, *, system: str, messages: List[Dict[str, str]]) -> str:
        client = self._get_client()
        try:
            response = client.messages.create(
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
                system=system,
                messages=messages,
            )
        except anthropic.APIError as exc:
            raise CompletionError(
                "Completion provider request failed",
                context={"error": str(exc), "model": self.settings.model},
            ) from exc

        text = "".join(
            getattr(block, "text", "")
            for block in (response.content or [])
            if getattr(block, "type", "text") == "text"
        )
        if not text.strip():
            raise CompletionError("Model returned an empty response", context={"model": self.settings.model})

        if self.settings.debug_completions:
            logger.info("Completion raw response", extra={"response_preview": text[:2000]})
        return text
