"""
Agent and framework registry -- static definitions and resolution.

An agent is an AI coding assistant with its own directory for installed
skills. A framework maps a project stack to the skill categories that
should be enabled for it.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AgentDefinition:
    """A tool that consumes synced skills."""

    id: str
    name: str
    path: str
    detection_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class FrameworkDefinition:
    """A project stack and the languages it implies."""

    id: str
    name: str
    languages: tuple[str, ...] = ()
    detection_files: tuple[str, ...] = ()
    detection_dependencies: tuple[str, ...] = ()


SUPPORTED_AGENTS: tuple[AgentDefinition, ...] = (
    AgentDefinition("cursor", "Cursor", ".cursor/skills", (".cursor", ".cursorrules")),
    AgentDefinition("trae", "Trae", ".trae/skills", (".trae",)),
    AgentDefinition("claude", "Claude Code", ".claude/skills", (".claude", "CLAUDE.md")),
    AgentDefinition("copilot", "GitHub Copilot", ".github/skills", (".github",)),
    AgentDefinition("antigravity", "Antigravity", ".agent/skills", (".agent",)),
    AgentDefinition("openai", "OpenAI", ".codex/skills", (".codex",)),
    AgentDefinition("opencode", "OpenCode", ".opencode/skills", (".opencode",)),
    AgentDefinition("gemini", "Gemini", ".gemini/skills", (".gemini",)),
    AgentDefinition("roo", "Roo Code", ".roo/skills", (".roo",)),
)

SUPPORTED_FRAMEWORKS: tuple[FrameworkDefinition, ...] = (
    FrameworkDefinition("flutter", "Flutter", ("dart",), ("pubspec.yaml",)),
    FrameworkDefinition(
        "nestjs", "NestJS", ("typescript", "javascript"),
        ("nest-cli.json",), ("@nestjs/core",),
    ),
    FrameworkDefinition("golang", "Go (Golang)", ("go",), ("go.mod",)),
    FrameworkDefinition(
        "nextjs", "Next.js", ("typescript", "javascript"),
        ("next.config.js", "next.config.mjs"), ("next",),
    ),
    FrameworkDefinition(
        "react", "React", ("typescript", "javascript"),
        (), ("react", "react-dom"),
    ),
    FrameworkDefinition(
        "react-native", "React Native", ("typescript", "javascript"),
        ("metro.config.js",), ("react-native",),
    ),
    FrameworkDefinition("angular", "Angular", ("typescript",), ("angular.json",)),
)

# Frameworks whose skills build on React's
_IMPLIES_REACT = frozenset({"nextjs", "react-native"})

_AGENTS_BY_ID = {a.id: a for a in SUPPORTED_AGENTS}
_FRAMEWORKS_BY_ID = {f.id: f for f in SUPPORTED_FRAMEWORKS}


def get_agent(agent_id: str) -> AgentDefinition | None:
    """Look up an agent by id. Unknown ids return None."""
    return _AGENTS_BY_ID.get(agent_id)


def get_framework(framework_id: str) -> FrameworkDefinition | None:
    return _FRAMEWORKS_BY_ID.get(framework_id)


def list_agent_ids() -> list[str]:
    return [a.id for a in SUPPORTED_AGENTS]


def all_known_categories() -> list[str]:
    """Framework ids followed by every language, de-duplicated in order."""
    seen: dict[str, None] = {}
    for framework in SUPPORTED_FRAMEWORKS:
        seen.setdefault(framework.id, None)
    for framework in SUPPORTED_FRAMEWORKS:
        for language in framework.languages:
            seen.setdefault(language, None)
    return list(seen)


def categories_for_framework(framework_id: str) -> list[str]:
    """Categories to enable for a framework: itself, its languages, and react if implied."""
    needed = [framework_id]
    framework = get_framework(framework_id)
    if framework:
        needed.extend(lang for lang in framework.languages if lang not in needed)
    if framework_id in _IMPLIES_REACT and "react" not in needed:
        needed.append("react")
    return needed


def detect_agents(root: Path) -> dict[str, bool]:
    """Which agents leave a footprint in the project root."""
    return {
        agent.id: any((root / f).exists() for f in agent.detection_files)
        for agent in SUPPORTED_AGENTS
    }


def detect_frameworks(root: Path, dependencies: dict[str, str] | None = None) -> dict[str, bool]:
    """Detect frameworks by characteristic files, then by package dependencies.

    Args:
        root: Project root
        dependencies: Merged dependencies/devDependencies from package.json
    """
    dependencies = dependencies or {}
    results: dict[str, bool] = {}
    for framework in SUPPORTED_FRAMEWORKS:
        detected = any((root / f).exists() for f in framework.detection_files)
        if not detected and framework.detection_dependencies:
            detected = any(dep in dependencies for dep in framework.detection_dependencies)
        results[framework.id] = detected
    return results
