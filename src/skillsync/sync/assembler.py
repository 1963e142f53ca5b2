"""
Skill Assembler -- discovers and fetches the files of every enabled skill.

Registry layout:
    skills/{category}/{skill}/SKILL.md
    skills/{category}/{skill}/references/...
    skills/{category}/{skill}/scripts/...
    skills/{category}/{skill}/assets/...

Anything else inside a skill folder is never synced.
"""

import structlog

from ..config.schema import SkillConfig
from ..errors import FetchPartialFailure, UnsupportedRegistry
from ..logging import HumanLog
from ..registry.client import RegistryClient, parse_registry
from ..registry.models import TreeIndex
from .models import CollectedSkill, SkillFile

logger = structlog.get_logger()

SKILLS_ROOT = "skills"
MANIFEST_FILENAME = "SKILL.md"
SUPPORTED_SUBFOLDERS = ("references/", "scripts/", "assets/")


def is_syncable(relative_path: str) -> bool:
    """Whether a path relative to the skill folder belongs to the skill."""
    return relative_path == MANIFEST_FILENAME or relative_path.startswith(SUPPORTED_SUBFOLDERS)


class SkillAssembler:
    """Builds the collected skill set for a configuration.

    Categories, skills and files are processed sequentially. A failure in
    one category never stops the others; failures are recorded in
    self.failures.
    """

    def __init__(self, client: RegistryClient):
        self.client = client
        self.failures: list[FetchPartialFailure] = []
        self.log = logger.bind(component="assembler")
        self.hlog = HumanLog(self.log)

    def assemble(self, config: SkillConfig) -> list[CollectedSkill]:
        """Fetch every enabled category.

        Returns:
            Collected skills in discovery order. Empty, with no network
            calls, if the registry is not a GitHub repository.
        """
        self.failures = []

        try:
            owner, repo = parse_registry(config.registry)
        except UnsupportedRegistry as e:
            self.log.error("assemble.unsupported_registry", registry=e.locator)
            self.hlog.unsupported_registry(e.locator)
            return []

        collected: list[CollectedSkill] = []
        trees: dict[str, TreeIndex | None] = {}

        for category in config.enabled_categories():
            ref = config.skills[category].effective_ref
            self.hlog.category_discover(category, ref)
            try:
                if ref not in trees:
                    entries = self.client.list_tree(owner, repo, ref)
                    trees[ref] = TreeIndex(entries) if entries else None

                index = trees[ref]
                if index is None:
                    self.hlog.category_unavailable(category, ref)
                    self.failures.append(
                        FetchPartialFailure(category=category, ref=ref, reason="tree unavailable")
                    )
                    continue

                self._assemble_category(owner, repo, ref, category, config, index, collected)
            except Exception as e:
                self.log.error("assemble.category.error", category=category, ref=ref, error=str(e))
                self.hlog.category_error(category, str(e))
                self.failures.append(FetchPartialFailure(category=category, ref=ref, reason=str(e)))

        self.log.info(
            "assemble.complete",
            skills=len(collected),
            files=sum(len(s.files) for s in collected),
            failures=len(self.failures),
        )
        return collected

    def discover_skills(self, index: TreeIndex, category: str) -> list[str]:
        """Skill folder names of a category: the third path segment under skills/{category}/."""
        return index.children(f"{SKILLS_ROOT}/{category}")

    def _assemble_category(
        self,
        owner: str,
        repo: str,
        ref: str,
        category: str,
        config: SkillConfig,
        index: TreeIndex,
        collected: list[CollectedSkill],
    ) -> None:
        """Append each fetched skill to collected as soon as it is complete."""
        category_config = config.skills[category]

        for skill_name in self.discover_skills(index, category):
            if not category_config.allows(skill_name):
                self.log.debug("assemble.skill.filtered", category=category, skill=skill_name)
                continue

            skill = self._fetch_skill(owner, repo, ref, category, skill_name, index)
            if skill.files:
                collected.append(skill)
                self.hlog.skill_fetched(category, skill_name, len(skill.files))
            else:
                self.log.debug("assemble.skill.empty", category=category, skill=skill_name)

    def _fetch_skill(
        self,
        owner: str,
        repo: str,
        ref: str,
        category: str,
        skill_name: str,
        index: TreeIndex,
    ) -> CollectedSkill:
        skill_dir = f"{SKILLS_ROOT}/{category}/{skill_name}"
        skill = CollectedSkill(category=category, skill=skill_name)

        for entry in index.files_under(skill_dir):
            relative = entry.path[len(skill_dir) + 1:]
            if not is_syncable(relative):
                continue

            content = self.client.fetch_raw_file(owner, repo, ref, entry.path)
            if content is None:
                self.hlog.file_dropped(entry.path)
                self.failures.append(
                    FetchPartialFailure(
                        category=category,
                        ref=ref,
                        skill=skill_name,
                        path=relative,
                        reason="fetch failed",
                    )
                )
                continue
            skill.files.append(SkillFile(name=relative, content=content))

        return skill
