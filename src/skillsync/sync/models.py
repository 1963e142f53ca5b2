"""
Runtime models of one sync run.

All of these live for a single run and are never persisted.
"""

from dataclasses import dataclass, field

from ..config.schema import SkillConfig
from ..errors import FetchPartialFailure


@dataclass
class SkillFile:
    """One file of a skill. name is relative to the skill folder."""

    name: str
    content: str


@dataclass
class CollectedSkill:
    """A skill whose files were fetched and are ready to be written."""

    category: str
    skill: str
    files: list[SkillFile] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.category}/{self.skill}"


@dataclass
class VersionUpdate:
    """A category whose pinned ref lags behind the latest published tag."""

    category: str
    from_ref: str
    to_ref: str

    def to_dict(self) -> dict[str, str]:
        return {"category": self.category, "from": self.from_ref, "to": self.to_ref}


@dataclass
class ReconcileResult:
    """Outcome of the version check.

    checked is False when the check was skipped or failed; config is then
    the untouched input.
    """

    config: SkillConfig
    updates: list[VersionUpdate] = field(default_factory=list)
    applied: bool = False
    checked: bool = False
    error: str | None = None


@dataclass
class WriteReport:
    """What the writer did, with paths relative to the project root."""

    written: list[str] = field(default_factory=list)
    overridden: list[str] = field(default_factory=list)
    tools: list[str] = field(default_factory=list)
    unknown_tools: list[str] = field(default_factory=list)


@dataclass
class SyncReport:
    """Summary of a complete sync run."""

    reconcile: ReconcileResult | None = None
    skills: list[CollectedSkill] = field(default_factory=list)
    write: WriteReport = field(default_factory=WriteReport)
    failures: list[FetchPartialFailure] = field(default_factory=list)
