"""
Configuration loading.

.skillsrc (SkillConfig) is read and written through ConfigStore.

ToolSettings precedence (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. Environment variables
3. CLI arguments

The merge is recursive to preserve every key at every level.
"""

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from ..errors import ConfigurationInvalid, ConfigurationMissing
from .schema import SkillConfig, ToolSettings

logger = structlog.get_logger()

CONFIG_FILENAME = ".skillsrc"

_TRUTHY = {"1", "true", "yes", "on"}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dictionary merge.

    Args:
        base: Base dictionary
        override: Dictionary whose values win on leaf conflicts

    Returns:
        New merged dictionary.

    Example:
        >>> deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"b": 99}, "e": 4})
        {'a': {'b': 99, 'c': 2}, 'e': 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class ConfigStore:
    """Reads and writes the .skillsrc document of a project root."""

    def __init__(self, root: str | Path, filename: str = CONFIG_FILENAME):
        self.root = Path(root)
        self.path = self.root / filename
        self.log = logger.bind(component="config_store", path=str(self.path))

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> SkillConfig:
        """Load and validate the configuration.

        Raises:
            ConfigurationMissing: If the file does not exist.
            ConfigurationInvalid: If the YAML is malformed or fails validation.
        """
        if not self.path.exists():
            raise ConfigurationMissing(self.path.name)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationInvalid(f"{self.path.name} is not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationInvalid(f"{self.path.name} must contain a mapping at the top level")

        try:
            config = SkillConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationInvalid(f"{self.path.name} is invalid: {e}") from e

        self.log.debug("config.loaded", categories=len(config.skills), agents=len(config.agents))
        return config

    def save(self, config: SkillConfig) -> None:
        """Persist the configuration, overwriting the file."""
        content = yaml.safe_dump(
            config.to_document(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
        self.path.write_text(content, encoding="utf-8")
        self.log.debug("config.saved")


def load_env_overrides() -> dict[str, Any]:
    """Load ToolSettings overrides from environment variables.

    Supported variables:
        SKILLSYNC_LOG_LEVEL: logging.level
        SKILLSYNC_LOG_FILE: logging.file
        SKILLSYNC_TIMEOUT: registry.timeout
        SKILLSYNC_RETRIES: registry.retries
        SKILLSYNC_GITHUB_TOKEN / GITHUB_TOKEN: registry.token
        SKILLSYNC_NO_UPDATE_CHECK: disables registry.update_check

    Returns:
        Dictionary of overrides
    """
    overrides: dict[str, Any] = {}

    if log_level := os.environ.get("SKILLSYNC_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    if log_file := os.environ.get("SKILLSYNC_LOG_FILE"):
        overrides.setdefault("logging", {})["file"] = log_file

    if timeout := os.environ.get("SKILLSYNC_TIMEOUT"):
        overrides.setdefault("registry", {})["timeout"] = timeout

    if retries := os.environ.get("SKILLSYNC_RETRIES"):
        overrides.setdefault("registry", {})["retries"] = retries

    token = os.environ.get("SKILLSYNC_GITHUB_TOKEN") or os.environ.get("GITHUB_TOKEN")
    if token:
        overrides.setdefault("registry", {})["token"] = token

    if os.environ.get("SKILLSYNC_NO_UPDATE_CHECK", "").strip().lower() in _TRUTHY:
        overrides.setdefault("registry", {})["update_check"] = False

    return overrides


def apply_cli_overrides(settings: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides coming from CLI arguments.

    Args:
        settings: Base settings (already merged with env)
        cli_args: Dictionary of CLI arguments

    Returns:
        Settings with CLI overrides applied
    """
    overrides: dict[str, Any] = {}

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose") is not None:
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(settings, overrides)


def load_settings(cli_args: dict[str, Any] | None = None) -> ToolSettings:
    """Resolve and validate the CLI's runtime settings.

    Raises:
        ValidationError: If an environment value has the wrong shape.
    """
    merged = apply_cli_overrides(load_env_overrides(), cli_args or {})
    return ToolSettings(**merged)
