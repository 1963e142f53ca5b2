"""
Target Writer -- materializes collected skills in each tool's directory.

Layout per tool:
    {tool base dir}/{category}/{skill}/{file}

Existing content is never cleared. Every file is overwritten in full unless
its project-relative path matches a custom override rule, in which case the
local copy is left untouched.
"""

import os
from pathlib import Path, PurePosixPath

import structlog

from ..agents import get_agent, list_agent_ids
from ..config.schema import SkillConfig
from ..logging import HumanLog
from .models import CollectedSkill, WriteReport

logger = structlog.get_logger()


def normalize_rule(rule: str) -> str:
    """Forward slashes, no leading "./"."""
    rule = rule.replace("\\", "/")
    while rule.startswith("./"):
        rule = rule[2:]
    return rule


def is_overridden(relative_path: str, rules: list[str]) -> bool:
    """Whether a project-relative path is protected by an override rule.

    A rule matches the exact file, or every path below it when it names a
    directory (a trailing slash on the rule is optional).

    Example:
        >>> is_overridden(".claude/skills/flutter/bloc/SKILL.md", [".claude/skills/flutter/bloc/"])
        True
        >>> is_overridden(".claude/skills/flutter/bloc-extra/SKILL.md", [".claude/skills/flutter/bloc"])
        False
    """
    for rule in rules:
        rule = normalize_rule(rule)
        if not rule:
            continue
        if relative_path == rule or relative_path.startswith(f"{rule.rstrip('/')}/"):
            return True
    return False


def _is_safe_name(name: str) -> bool:
    """A skill file name must stay inside its skill folder."""
    pure = PurePosixPath(name.replace("\\", "/"))
    return bool(name) and not pure.is_absolute() and ".." not in pure.parts


class TargetWriter:
    """Writes collected skills under each configured tool's base directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.log = logger.bind(component="writer")
        self.hlog = HumanLog(self.log)

    def write(self, skills: list[CollectedSkill], config: SkillConfig) -> WriteReport:
        """Write every skill to every enabled tool.

        Tools come from config.agents, or every known tool when the list is
        empty. Unknown tool ids are skipped without error.
        """
        report = WriteReport()
        agent_ids = config.agents or list_agent_ids()

        for agent_id in agent_ids:
            agent = get_agent(agent_id)
            if agent is None:
                self.log.debug("write.unknown_tool", tool=agent_id)
                report.unknown_tools.append(agent_id)
                continue

            base = self.root / agent.path
            base.mkdir(parents=True, exist_ok=True)

            for skill in skills:
                for skill_file in skill.files:
                    self._write_file(base, skill, skill_file.name, skill_file.content, config, report)

            report.tools.append(agent.id)
            self.hlog.tool_updated(agent.path, agent.name)

        self.log.info(
            "write.complete",
            tools=len(report.tools),
            written=len(report.written),
            overridden=len(report.overridden),
        )
        return report

    def _write_file(
        self,
        base: Path,
        skill: CollectedSkill,
        name: str,
        content: str,
        config: SkillConfig,
        report: WriteReport,
    ) -> None:
        if not _is_safe_name(name):
            self.log.warning("write.unsafe_path", skill=skill.key, name=name)
            return

        target = base / skill.category / skill.skill / name
        relative = os.path.relpath(target, self.root).replace("\\", "/")

        if is_overridden(relative, config.custom_overrides):
            self.hlog.overridden(relative)
            report.overridden.append(relative)
            return

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        report.written.append(relative)
