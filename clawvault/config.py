"""Migration settings loaded from YAML.

Example YAML structure:
    prefix: OPENCLAW
    include_oauth: true
    backup: true
    fail_fast: false
    openclaw_dir: ~/.openclaw
    profile_env_var_map:
      anthropic:default: ANTHROPIC_API_KEY
      openai:work: OPENAI_API_KEY
"""

import logging
import pathlib
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .migrator.naming import DEFAULT_PREFIX, ENV_VAR_NAME_PATTERN

logger = logging.getLogger(__name__)


def get_default_config_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "clawvault" / "migrate.yaml"


class MigrationConfig(BaseModel):
    """Defaults for ``clawvault migrate``; CLI flags take precedence."""

    prefix: str = Field(DEFAULT_PREFIX, description="Env var name prefix")
    include_oauth: bool = Field(True, description="Migrate oauth credentials")
    backup: bool = Field(True, description="Write .bak files before rewriting")
    fail_fast: bool = Field(False, description="Abort on the first failing file")
    openclaw_dir: str | None = Field(None, description="OpenClaw root directory")
    profile_env_var_map: dict[str, str] = Field(
        default_factory=dict,
        description="profileId -> ENV_VAR overrides for api_key profiles",
    )

    @field_validator("profile_env_var_map")
    @classmethod
    def _check_env_var_names(cls, value: dict[str, str]) -> dict[str, str]:
        for profile_id, env_var in value.items():
            if not ENV_VAR_NAME_PATTERN.fullmatch(env_var):
                raise ValueError(f"invalid env var for {profile_id}: {env_var}")
        return value

    @field_validator("openclaw_dir")
    @classmethod
    def _expand_user(cls, value: str | None) -> str | None:
        return str(pathlib.Path(value).expanduser()) if value else value


def load_config(file_path: str | pathlib.Path | None = None) -> MigrationConfig:
    """Load migration settings from a YAML file.

    Args:
        file_path: Path of the YAML file. Defaults to
            ``~/.config/clawvault/migrate.yaml``.

    Returns:
        The parsed config. A missing or empty file gives the defaults; a
        missing file that was asked for explicitly is logged as a warning.

    Raises:
        ConfigError: If the YAML is malformed or fails validation.
    """
    explicit = file_path is not None
    file_path = pathlib.Path(file_path) if explicit else get_default_config_path()
    if not file_path.exists():
        if explicit:
            logger.warning(f"Config file not found, using defaults: {file_path}")
        else:
            logger.debug(f"No config file at {file_path}")
        return MigrationConfig()

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            raw: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {file_path}") from e

    if raw is None:
        logger.warning(f"Config file is empty: {file_path}")
        return MigrationConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {file_path}")

    try:
        return MigrationConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {file_path}: {e}") from e
