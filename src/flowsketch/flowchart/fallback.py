"""Deterministic stand-in documents for failed generation or refinement."""

from __future__ import annotations

from .model import (
    MAX_SOURCE_PROMPT_LENGTH,
    MAX_SUMMARY_LENGTH,
    FlowEdge,
    Flowchart,
    FlowNode,
    NodeType,
)
from .palette import pick_palette_from_prompt

PROMPT_EXCERPT_LIMIT = 120
NOTES_LIMIT = 220

FALLBACK_SUMMARY = (
    "This fallback diagram was generated because the model response was incomplete. "
    "It provides a safe baseline flow that you can edit directly on the canvas."
)
FALLBACK_RATIONALE = (
    "Fallback logic keeps the system usable even when model output is malformed, "
    "while preserving explainability-first structure."
)
FALLBACK_SUGGESTIONS = (
    "Use precise domain language in your prompt.",
    "Specify target audience and depth.",
    "Mention decision branches explicitly.",
)
REFINE_RETRY_SUGGESTION = "Try a shorter follow-up prompt with one change request at a time."


def _excerpt(prompt: str) -> str:
    if len(prompt) > PROMPT_EXCERPT_LIMIT:
        return f"{prompt[:PROMPT_EXCERPT_LIMIT - 3]}..."
    return prompt


def fallback_flowchart(prompt: str, detail_level: str, audience: str = "") -> Flowchart:
    """Build the fixed five-step template used when generation fails.

    define -> extract -> model -> review, then review loops back to model
    ("No") or finishes ("Yes").
    """
    nodes = [
        FlowNode(
            id="problem-definition",
            label="Define Problem",
            type=NodeType.START,
            details=_excerpt(prompt),
            notes=f"Audience: {audience}"[:NOTES_LIMIT] if audience else "",
        ),
        FlowNode(
            id="requirements",
            label="Extract Requirements",
            type=NodeType.PROCESS,
            details="Identify goals, constraints, and success metrics.",
            notes=f"Detail level: {detail_level}"[:NOTES_LIMIT],
        ),
        FlowNode(
            id="modeling",
            label="Model Diagram Logic",
            type=NodeType.SUBPROCESS,
            details="Draft node semantics, decision points, and transitions.",
            notes="Explainability and presentation clarity are prioritized.",
        ),
        FlowNode(
            id="review",
            label="Review & Iterate",
            type=NodeType.DECISION,
            details="Check correctness, readability, and audience fit.",
            notes="If no, refine structure. If yes, finalize.",
        ),
        FlowNode(
            id="final-diagram",
            label="Final Diagram",
            type=NodeType.END,
            details="Interactive flowchart ready for slides and technical documentation.",
        ),
    ]

    edges = [
        FlowEdge(
            id="edge-problem-requirements-1",
            source="problem-definition",
            target="requirements",
            label="clarify goal",
        ),
        FlowEdge(
            id="edge-requirements-modeling-2",
            source="requirements",
            target="modeling",
            label="structure steps",
        ),
        FlowEdge(
            id="edge-modeling-review-3",
            source="modeling",
            target="review",
            label="validate",
        ),
        FlowEdge(
            id="edge-review-modeling-4",
            source="review",
            target="modeling",
            label="No",
            condition="needs improvement",
        ),
        FlowEdge(
            id="edge-review-final-5",
            source="review",
            target="final-diagram",
            label="Yes",
            condition="ready",
        ),
    ]

    return Flowchart(
        title="Fallback Flowchart",
        summary=FALLBACK_SUMMARY,
        rationale=FALLBACK_RATIONALE,
        suggestions=list(FALLBACK_SUGGESTIONS),
        palette=pick_palette_from_prompt(prompt),
        nodes=nodes,
        edges=edges,
        source_prompt=prompt[:MAX_SOURCE_PROMPT_LENGTH],
    )


def refined_fallback(current: Flowchart, follow_up: str) -> Flowchart:
    """Keep ``current`` intact and record that the refinement could not be applied."""
    refined = current.model_copy(deep=True)
    refined.summary = f"{current.summary} Refinement applied: {follow_up}"[:MAX_SUMMARY_LENGTH]
    refined.rationale = (
        "Model refinement failed, so the system preserved the existing diagram "
        "with a traceable refinement note."
    )
    refined.suggestions = [*current.suggestions[:5], REFINE_RETRY_SUGGESTION]
    return refined
