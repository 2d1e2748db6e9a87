"""Generate and refine flowcharts through the completion collaborator.

Missing credentials always surface to the caller. Any other failure (provider
error, unparseable JSON, a candidate that fails the schema) is absorbed: the
caller gets a deterministic fallback document and a notice saying so.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.exceptions import MissingCredentialError
from ..flowchart.fallback import fallback_flowchart, refined_fallback
from ..flowchart.model import Flowchart
from ..flowchart.palette import pick_palette_from_prompt
from ..flowchart.repair import repair_existing_flowchart, repair_flowchart
from ..utils.logging import get_logger
from .completion import CompletionClient, extract_json
from .prompts import SYSTEM_PROMPT, build_generate_messages, build_refine_messages

logger = get_logger(__name__)

GENERATE_FALLBACK_NOTICE = (
    "The model response could not be used, so a fallback diagram was generated."
)
REFINE_FALLBACK_NOTICE = (
    "The refinement could not be applied, so the current diagram was kept."
)


@dataclass
class GenerationResult:
    flowchart: Flowchart
    fallback_used: bool = False
    notice: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flowchart": self.flowchart.to_dict(),
            "fallbackUsed": self.fallback_used,
            "notice": self.notice,
        }


def is_credential_failure(exc: BaseException) -> bool:
    """True for errors that mean the provider has no usable API key."""
    if isinstance(exc, MissingCredentialError):
        return True
    message = str(exc).lower()
    return "missing" in message and ("api key" in message or "api_key" in message)


class FlowchartService:
    def __init__(self, completion: Optional[CompletionClient] = None):
        self.completion = completion or CompletionClient()

    def generate(self, prompt: str, detail_level: str = "balanced", audience: str = "") -> GenerationResult:
        messages = build_generate_messages(prompt=prompt, detail_level=detail_level, audience=audience)
        suggested_palette = pick_palette_from_prompt(prompt)

        try:
            text = self.completion.complete(system=SYSTEM_PROMPT, messages=messages)
            document = repair_flowchart(extract_json(text), prompt, suggested_palette)
            logger.info(
                "Flowchart generated",
                extra={"node_count": len(document.nodes), "edge_count": len(document.edges)},
            )
            return GenerationResult(flowchart=document)
        except Exception as exc:
            if is_credential_failure(exc):
                raise
            logger.warning(
                "Flowchart generation failed; using fallback.",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

        return GenerationResult(
            flowchart=fallback_flowchart(prompt, detail_level, audience),
            fallback_used=True,
            notice=GENERATE_FALLBACK_NOTICE,
        )

    def refine(
        self,
        current: Any,
        follow_up: str,
        detail_level: str = "balanced",
        audience: str = "",
    ) -> GenerationResult:
        """Apply ``follow_up`` to ``current``.

        ``current`` is repaired first; a ``SchemaError`` there is the caller's
        problem and propagates.
        """
        safe_current = repair_existing_flowchart(current)
        messages = build_refine_messages(
            current_flowchart=safe_current.to_dict(),
            follow_up_prompt=follow_up,
            detail_level=detail_level,
            audience=audience,
        )

        try:
            text = self.completion.complete(system=SYSTEM_PROMPT, messages=messages)
            document = repair_flowchart(
                extract_json(text),
                safe_current.source_prompt or follow_up,
                safe_current.palette,
            )
            logger.info(
                "Flowchart refined",
                extra={"node_count": len(document.nodes), "edge_count": len(document.edges)},
            )
            return GenerationResult(flowchart=document)
        except Exception as exc:
            if is_credential_failure(exc):
                raise
            logger.warning(
                "Flowchart refinement failed; keeping current document.",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

        return GenerationResult(
            flowchart=refined_fallback(safe_current, follow_up),
            fallback_used=True,
            notice=REFINE_FALLBACK_NOTICE,
        )
