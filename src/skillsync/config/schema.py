"""
Pydantic models for skillsync configuration.

Two independent trees live here:
- SkillConfig: the user-owned .skillsrc document (registry, agents,
  categories, overrides).
- ToolSettings: runtime settings of the CLI itself (logging, registry
  transport), resolved from defaults, environment and CLI flags.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_REF = "main"


class CategoryConfig(BaseModel):
    """Tracking configuration for one skill category."""

    enabled: bool = True
    ref: str | None = Field(
        default=None,
        description="Tag or branch to sync from. None means the registry's primary branch.",
    )
    include: list[str] | None = Field(
        default=None,
        description="If declared, only these skill folders are synced.",
    )
    exclude: list[str] | None = Field(
        default=None,
        description="Skill folders never synced. Applied after include.",
    )

    model_config = {"extra": "allow"}

    @property
    def effective_ref(self) -> str:
        return self.ref or DEFAULT_REF

    def allows(self, skill_name: str) -> bool:
        """Apply include first, then exclude.

        A name missing from a declared include list is rejected before
        exclude is consulted.
        """
        if self.include is not None and skill_name not in self.include:
            return False
        if self.exclude is not None and skill_name in self.exclude:
            return False
        return True


class SkillConfig(BaseModel):
    """The .skillsrc document.

    Unknown keys are kept so that saving after a ref update does not drop
    anything the user added by hand.
    """

    registry: str
    agents: list[str] = Field(default_factory=list)
    skills: dict[str, CategoryConfig] = Field(default_factory=dict)
    custom_overrides: list[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}

    @field_validator("agents", "custom_overrides", mode="before")
    @classmethod
    def _none_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("skills", mode="before")
    @classmethod
    def _none_as_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v

    def enabled_categories(self) -> list[str]:
        """Names of enabled categories, in declaration order."""
        return [name for name, cat in self.skills.items() if cat.enabled]

    def to_document(self) -> dict[str, Any]:
        """Serializable dict for YAML output. None values are omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class RegistrySettings(BaseModel):
    """HTTP transport settings for registry and update-check requests."""

    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    retries: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Connection-level retries. 0 keeps runs reproducible.",
    )
    token: str | None = Field(
        default=None,
        description="GitHub token sent as Bearer auth to lift API rate limits",
    )
    update_check: bool = True

    model_config = {"extra": "forbid"}


class ToolSettings(BaseModel):
    """Runtime settings of the CLI itself."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    registry: RegistrySettings = Field(default_factory=RegistrySettings)

    model_config = {"extra": "forbid"}
