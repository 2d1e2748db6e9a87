"""Prompt construction for flowchart generation and refinement."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from ..flowchart.palette import pick_palette_from_prompt

SYSTEM_PROMPT = """You convert natural-language descriptions into flowchart data.
Return a strict JSON object and nothing else.
Use this schema exactly:
{
  "title": "string",
  "summary": "string",
  "rationale": "string",
  "suggestions": ["string"],
  "palette": {
    "name": "string",
    "canvas": "#RRGGBB",
    "panel": "#RRGGBB",
    "text": "#RRGGBB",
    "mutedText": "#RRGGBB",
    "edge": "#RRGGBB",
    "accent": "#RRGGBB",
    "nodeColors": {
      "start": "#RRGGBB",
      "process": "#RRGGBB",
      "decision": "#RRGGBB",
      "data": "#RRGGBB",
      "subprocess": "#RRGGBB",
      "end": "#RRGGBB",
      "actor": "#RRGGBB",
      "document": "#RRGGBB"
    }
  },
  "nodes": [
    {
      "id": "kebab-case-id",
      "label": "string",
      "type": "start|process|decision|data|subprocess|end|actor|document",
      "details": "string",
      "notes": "string"
    }
  ],
  "edges": [
    {
      "id": "optional-kebab-case",
      "source": "node-id",
      "target": "node-id",
      "label": "optional-short-string",
      "condition": "optional-short-string"
    }
  ]
}
Rules:
1) Every edge source/target must reference an existing node id.
2) Keep labels concise and presentation-friendly.
3) Include decision branches when uncertainty or alternatives exist.
4) Build explainable logic suitable for technical papers and education/business use cases.
5) Ensure at least one start and one end node.
6) Select a cohesive color palette appropriate for the domain and readability.
"""

DETAIL_GUIDE = {
    "concise": "Keep it compact with fewer nodes and short edge labels.",
    "balanced": "Use medium depth with enough detail for presentations.",
    "detailed": "Use higher depth with explicit logic and explainability hints.",
}

DEFAULT_AUDIENCE = "mixed technical and non-technical stakeholders"


def detail_instruction(detail_level: str) -> str:
    return DETAIL_GUIDE.get(detail_level, DETAIL_GUIDE["balanced"])


def audience_instruction(audience: str) -> str:
    return f"Primary audience: {audience or DEFAULT_AUDIENCE}."


def build_generate_messages(*, prompt: str, detail_level: str, audience: str) -> List[Dict[str, str]]:
    suggested_palette = pick_palette_from_prompt(prompt)
    user = "\n\n".join(
        [
            detail_instruction(detail_level),
            audience_instruction(audience),
            "Use this starting palette direction (you may improve it, but keep accessibility): "
            + json.dumps(suggested_palette.to_dict()),
            "Generate a high-quality flowchart from this request:",
            prompt,
        ]
    )
    return [{"role": "user", "content": user}]


def build_refine_messages(
    *,
    current_flowchart: Dict[str, Any],
    follow_up_prompt: str,
    detail_level: str,
    audience: str,
) -> List[Dict[str, str]]:
    user = "\n\n".join(
        [
            "Refine this existing flowchart while preserving existing IDs where practical.",
            detail_instruction(detail_level),
            audience_instruction(audience),
            "Existing flowchart JSON:",
            json.dumps(current_flowchart),
            "Follow-up instruction:",
            follow_up_prompt,
            "Return full updated flowchart JSON in the required schema.",
        ]
    )
    return [{"role": "user", "content": user}]
