"""FlowSketch - natural language to presentation-ready flowcharts."""

from typing import TYPE_CHECKING

__all__ = ["Settings", "FlowchartService"]

if TYPE_CHECKING:
    from .config.settings import Settings
    from .generation.service import FlowchartService


def __getattr__(name: str):
    if name == "Settings":
        from .config.settings import Settings

        return Settings
    if name == "FlowchartService":
        from .generation.service import FlowchartService

        return FlowchartService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
