"""Custom exception hierarchy for FlowSketch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class FlowsketchError(Exception):
    """Base exception type for all FlowSketch errors."""

    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if not self.context:
            return self.message
        return f"{self.message} | context={self.context}"


class ConfigurationError(FlowsketchError):
    """Raised when configuration is missing or invalid."""


# -----------------------------------------------------------------------------
# Document errors
# -----------------------------------------------------------------------------


class SchemaError(FlowsketchError):
    """Raised when a flowchart violates structural bounds beyond repair."""


class UnsupportedShapeError(FlowsketchError):
    """Raised when an imported payload matches none of the accepted shapes."""


class NodeNotFoundError(FlowsketchError):
    """Raised when an edit refers to a node id that is not in the document."""


# -----------------------------------------------------------------------------
# Generation errors
# -----------------------------------------------------------------------------


class GenerationError(FlowsketchError):
    """Raised when the text-completion collaborator fails."""


class MissingCredentialError(GenerationError):
    """Raised when no API key is configured for the completion provider."""


class CompletionError(GenerationError):
    """Raised when the provider errors out or returns no usable content."""
