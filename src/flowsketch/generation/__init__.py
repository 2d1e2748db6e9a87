"""Completion-backed generation and refinement."""

from .completion import CompletionClient, extract_json
from .service import FlowchartService, GenerationResult

__all__ = ["CompletionClient", "extract_json", "FlowchartService", "GenerationResult"]
