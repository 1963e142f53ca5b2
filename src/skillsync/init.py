"""
Initializer -- creates .skillsrc for a project.

Steps:
1. Detect frameworks (characteristic files, then package.json dependencies)
   and agents (their dot-directories) in the project root.
2. Ask the registry which categories exist and which versions are
   published. An unreachable registry falls back to a default list.
3. Ask the prompter for framework, agents and registry URL.
4. Enable the framework's category and its languages, pinned to the
   latest published tag when known, and write .skillsrc.
"""

import json
from pathlib import Path
from typing import Any

import structlog

from .agents import (
    SUPPORTED_AGENTS,
    SUPPORTED_FRAMEWORKS,
    all_known_categories,
    categories_for_framework,
    detect_agents,
    detect_frameworks,
)
from .config.loader import ConfigStore
from .config.schema import CategoryConfig, SkillConfig
from .logging import HumanLog
from .prompts import Prompter
from .registry.client import RegistryClient, parse_registry
from .registry.models import RemoteMetadata

logger = structlog.get_logger()

DEFAULT_REGISTRY = "https://github.com/NamNHCem/agent-skills-standard"
DEFAULT_REGISTRY_REF = "main"
FALLBACK_CATEGORIES = ["flutter", "dart"]
DEFAULT_FRAMEWORK = "flutter"


class Initializer:
    """Builds and writes .skillsrc from detection and prompt answers."""

    def __init__(self, root: str | Path, prompter: Prompter, client: RegistryClient):
        self.root = Path(root)
        self.prompter = prompter
        self.client = client
        self.store = ConfigStore(self.root)
        self.log = logger.bind(component="initializer")
        self.hlog = HumanLog(self.log)

    def run(self) -> SkillConfig | None:
        """Run the init flow.

        Returns:
            The written configuration, or None if the user declined to
            overwrite an existing .skillsrc.
        """
        dependencies = self.read_package_dependencies()
        frameworks = detect_frameworks(self.root, dependencies)
        agents = detect_agents(self.root)
        categories, metadata = self.query_registry()

        if self.store.exists():
            overwrite = self.prompter.confirm(
                "overwrite",
                f"{self.store.path.name} already exists. Do you want to overwrite it?",
                default=False,
            )
            if not overwrite:
                self.hlog.init_event("aborted")
                return None

        answers = self.ask(frameworks, agents, categories)
        framework = answers["framework"]

        if framework not in categories:
            self.hlog.init_event("unsupported_framework", framework=framework)

        config = self.build_config(
            framework=framework,
            agents=answers["agents"],
            registry=answers["registry"],
            metadata=metadata,
        )
        self.store.save(config)

        needed = categories_for_framework(framework)
        self.hlog.init_event(
            "written",
            filename=self.store.path.name,
            framework=framework,
            languages=[c for c in needed if c != framework],
        )
        self.log.info("init.complete", framework=framework, categories=list(config.skills))
        return config

    def read_package_dependencies(self) -> dict[str, str]:
        """Merged dependencies and devDependencies of package.json, if any."""
        package_json = self.root / "package.json"
        if not package_json.exists():
            return {}
        try:
            pkg = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self.hlog.init_event("package_json_error", error=str(e))
            return {}
        if not isinstance(pkg, dict):
            return {}
        deps: dict[str, str] = {}
        for key in ("dependencies", "devDependencies"):
            section = pkg.get(key)
            if isinstance(section, dict):
                deps.update(section)
        return deps

    def query_registry(self) -> tuple[list[str], RemoteMetadata]:
        """Available categories and published versions of the default registry."""
        owner, repo = parse_registry(DEFAULT_REGISTRY)
        metadata = self.client.fetch_metadata(owner, repo, DEFAULT_REGISTRY_REF) or RemoteMetadata()
        categories = self.client.list_categories(owner, repo, DEFAULT_REGISTRY_REF)
        if not categories:
            self.hlog.init_event("registry_error", error="registry tree unavailable")
            categories = list(FALLBACK_CATEGORIES)
        return categories, metadata

    def ask(
        self,
        frameworks: dict[str, bool],
        agents: dict[str, bool],
        categories: list[str],
    ) -> dict[str, Any]:
        """Framework, agents and registry answers."""
        framework_choices = [
            (f.name if f.id in categories else f"{f.name} (Coming Soon)", f.id)
            for f in SUPPORTED_FRAMEWORKS
        ]
        default_framework = next(
            (f.id for f in SUPPORTED_FRAMEWORKS if frameworks.get(f.id)),
            DEFAULT_FRAMEWORK,
        )

        # Nothing detected -> offer every agent pre-checked
        any_agent = any(agents.values())
        agent_choices = [
            (f"{a.name} ({a.path}/)", a.id, agents[a.id] if any_agent else True)
            for a in SUPPORTED_AGENTS
        ]

        return {
            "framework": self.prompter.select(
                "framework", "Select Framework:", framework_choices, default=default_framework
            ),
            "agents": self.prompter.checkbox("agents", "Select AI Agents you use:", agent_choices),
            "registry": self.prompter.text(
                "registry", "Skills Registry URL:", default=DEFAULT_REGISTRY
            ),
        }

    def build_config(
        self,
        framework: str,
        agents: list[str],
        registry: str,
        metadata: RemoteMetadata,
    ) -> SkillConfig:
        """Enable the categories the framework needs, in catalog order."""
        needed = set(categories_for_framework(framework))
        skills: dict[str, CategoryConfig] = {}
        for category in all_known_categories():
            if category in needed:
                skills[category] = CategoryConfig(enabled=True, ref=metadata.latest_tag(category))

        return SkillConfig(
            registry=registry,
            agents=list(agents),
            skills=skills,
            custom_overrides=[],
        )
