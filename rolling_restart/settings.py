import os
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)
from typing_extensions import Annotated

import rolling_restart.io
from rolling_restart.state import DEFAULT_HEALTHY_UPTIME

DEFAULT_MAX_CYCLES = 120
CONFIG_SECTION = "cfctl"


class Settings(BaseSettings):
    """
    Configuration for cfctl.
    Values can be set in a YAML config file (``--config-file``) or with ``CFCTL_``-prefixed environment variables,
    environment variables take precedence.
    """
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_prefix="cfctl_",
        # Ignore extra fields so a config file can be shared between cfctl versions
        extra="ignore",
    )

    max_cycles: int = Field(DEFAULT_MAX_CYCLES, ge=0, description="""
Maximum number of status checks to perform while waiting for a restarted instance to become healthy.
Overridden by the ``--max-cycles`` option.
""")
    poll_interval: float = Field(1.0, ge=0, description="""
Seconds to wait between status checks of a restarted instance.
""")
    healthy_uptime: int = Field(DEFAULT_HEALTHY_UPTIME, ge=1, description="""
A ``RUNNING`` instance only counts as restarted if its reported uptime (in seconds) is below this value, so that the
status of the process that was running before the restart is not mistaken for the new one.
Should be revisited if ``poll_interval`` is changed.
""")
    cf_path: str = Field("cf", description="Path to the cf CLI executable.")
    cf_home: Annotated[Union[str, None], Field(description="""
Directory containing the cf CLI's ``.cf/config.json``.
If not specified, ``$CF_HOME`` or the user's home directory is used, as the cf CLI does.
""")] = None


def read_config_file(config_file) -> Dict[str, Any]:
    with open(config_file) as fh:
        config = yaml.safe_load(fh) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_file} does not contain a mapping")
    if CONFIG_SECTION in config:
        config = config[CONFIG_SECTION] or {}
    return config


def load_settings(config_file: Optional[str] = None) -> Settings:
    """Load settings from ``config_file`` (if any), with environment variables overriding file values."""
    file_values = {}
    if config_file:
        try:
            file_values = read_config_file(config_file)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            rolling_restart.io.exception(f"Unable to read config file {config_file}: {exc}")
    # init kwargs beat env vars in pydantic-settings, so drop file values that the environment overrides
    env_keys = {k.lower() for k in os.environ}
    file_values = {k: v for k, v in file_values.items() if f"cfctl_{k}".lower() not in env_keys}
    try:
        settings = Settings(**file_values)
    except ValidationError as exc:
        rolling_restart.io.exception(f"Invalid configuration: {exc}")
    rolling_restart.io.debug("Loaded settings: %s", settings.model_dump())
    return settings
