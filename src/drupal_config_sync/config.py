"""Runtime configuration for the command-line tool.

Reads settings from CLI args, environment variables, .env files, and
YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    DRUPAL_CONFIG_DIR: Configuration export directory
    DRUPAL_PROJECTS_DIR: Directory holding project records
        (optional, default: ~/.local/share/drupal_config_sync/projects)
    DRUPAL_MAX_PARALLEL_READS: Max concurrent file reads (optional, default: 8)
    DRUPAL_INCLUDE_BASE_FIELD_OVERRIDES: Index base field overrides
        (optional, default: true)
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_PROJECTS_DIR = "~/.local/share/drupal_config_sync/projects"
DEFAULT_MAX_PARALLEL_READS = 8
MAX_PARALLEL_READS_LIMIT = 64


@dataclass
class Config:
    config_directory: str | None = None
    projects_dir: str = DEFAULT_PROJECTS_DIR
    max_parallel_reads: int = DEFAULT_MAX_PARALLEL_READS
    include_base_field_overrides: bool = True
    log_level: str = "INFO"
    log_file: str | None = None


def _get_bool_env(key: str) -> bool | None:
    """Return True/False from env var, or None if unset."""
    val = os.getenv(key)
    if val is None:
        return None
    return val.lower() in ("true", "1", "yes", "on")


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Normalizes paths in place (whitespace stripped, ``~`` kept for the
    caller to expand).

    Raises:
        ValueError: If a path is blank or the read limit is out of range.
    """
    if config.config_directory is not None:
        config.config_directory = config.config_directory.strip()
        if not config.config_directory:
            raise ValueError("Configuration directory cannot be empty")

    config.projects_dir = config.projects_dir.strip()
    if not config.projects_dir:
        raise ValueError("Projects directory cannot be empty")

    if not (1 <= config.max_parallel_reads <= MAX_PARALLEL_READS_LIMIT):
        raise ValueError(
            f"Invalid max_parallel_reads {config.max_parallel_reads}: "
            f"must be between 1 and {MAX_PARALLEL_READS_LIMIT}"
        )


def load_config(
    config_directory: str | None = None,
    projects_dir: str | None = None,
    yaml_fallbacks: dict | None = None,
    logging_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        config_directory: Override export directory (CLI positional).
        projects_dir: Override projects directory (CLI flag).
        yaml_fallbacks: Values from the YAML config ``sync`` section.
        logging_fallbacks: Values from the YAML config ``logging`` section.

    Returns:
        Validated Config instance.  ``config_directory`` may be ``None``;
        commands that need one report the error themselves.

    Raises:
        ValueError: If a value is malformed after checking all sources.
    """
    fb = yaml_fallbacks or {}
    log_fb = logging_fallbacks or {}

    # --- Path fields: CLI > env > YAML > default ---

    final_config_dir = (
        config_directory
        or os.getenv("DRUPAL_CONFIG_DIR")
        or fb.get("config_directory")
    )
    final_projects_dir = (
        projects_dir
        or os.getenv("DRUPAL_PROJECTS_DIR")
        or fb.get("projects_dir")
        or DEFAULT_PROJECTS_DIR
    )

    # --- Numeric fields: env > YAML > default ---

    max_parallel_raw = os.getenv("DRUPAL_MAX_PARALLEL_READS")
    if max_parallel_raw is not None:
        try:
            final_max_parallel = int(max_parallel_raw)
        except ValueError:
            raise ValueError(
                f"Invalid DRUPAL_MAX_PARALLEL_READS '{max_parallel_raw}': "
                f"must be a number between 1 and {MAX_PARALLEL_READS_LIMIT}"
            ) from None
    elif "max_parallel_reads" in fb:
        final_max_parallel = int(fb["max_parallel_reads"])
    else:
        final_max_parallel = DEFAULT_MAX_PARALLEL_READS

    # --- Boolean fields: env > YAML > default ---

    env_overrides = _get_bool_env("DRUPAL_INCLUDE_BASE_FIELD_OVERRIDES")
    if env_overrides is not None:
        final_overrides = env_overrides
    else:
        final_overrides = bool(fb.get("include_base_field_overrides", True))

    config = Config(
        config_directory=final_config_dir,
        projects_dir=final_projects_dir,
        max_parallel_reads=final_max_parallel,
        include_base_field_overrides=final_overrides,
        log_level=str(log_fb.get("level") or "INFO"),
        log_file=log_fb.get("file"),
    )

    validate_config(config)

    return config
