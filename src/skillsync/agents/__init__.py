"""
Agents module -- supported tools, frameworks and detection.
"""

from .registry import (
    SUPPORTED_AGENTS,
    SUPPORTED_FRAMEWORKS,
    AgentDefinition,
    FrameworkDefinition,
    all_known_categories,
    categories_for_framework,
    detect_agents,
    detect_frameworks,
    get_agent,
    get_framework,
    list_agent_ids,
)

__all__ = [
    "SUPPORTED_AGENTS",
    "SUPPORTED_FRAMEWORKS",
    "AgentDefinition",
    "FrameworkDefinition",
    "all_known_categories",
    "categories_for_framework",
    "detect_agents",
    "detect_frameworks",
    "get_agent",
    "get_framework",
    "list_agent_ids",
]
