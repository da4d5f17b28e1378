"""
Central configuration for file paths and environment settings.

Configure via environment variables (a .env file is honoured by the CLI):
  - GRANTMATCH_SCORING_CONFIG (default: bundled data/scoring_config.yaml)
  - GRANTMATCH_LOG_LEVEL (default: INFO)
"""

import os
from pathlib import Path


def get_package_data_dir() -> Path:
    """Get the directory holding bundled data files."""
    return Path(__file__).parent / "data"


def get_scoring_config_path() -> Path:
    """
    Get the scoring configuration YAML path.

    Uses GRANTMATCH_SCORING_CONFIG environment variable if set, otherwise
    defaults to the bundled scoring_config.yaml.

    Returns:
        Path to the scoring configuration file
    """
    env_path = os.environ.get("GRANTMATCH_SCORING_CONFIG")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return get_package_data_dir() / "scoring_config.yaml"


def get_log_level() -> str:
    """Get the configured log level name."""
    return os.environ.get("GRANTMATCH_LOG_LEVEL", "INFO").upper()
