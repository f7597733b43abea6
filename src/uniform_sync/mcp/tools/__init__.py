"""MCP tool handlers for component sync.

Tool modules expose lists of ToolSpec; the server combines them into one
ToolRegistry.
"""

from .components import COMPONENT_SPECS
from .errors import build_error_response, translate_error
from .projects import PROJECT_SPECS
from .registry import ToolRegistry, ToolSpec

ALL_SPECS: list[ToolSpec] = PROJECT_SPECS + COMPONENT_SPECS

__all__ = [
    "ALL_SPECS",
    "COMPONENT_SPECS",
    "PROJECT_SPECS",
    "ToolRegistry",
    "ToolSpec",
    "build_error_response",
    "translate_error",
]
