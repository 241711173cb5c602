import logging
import os
from pathlib import Path

from src.rules.models import Rules

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Startup configuration is unusable."""


def validate_ops_rules(rules: Rules, data_dir: Path) -> None:
    """
    Validate operational requirements before startup.
    Raises ConfigError listing every problem found.
    """
    problems: list[str] = []

    # 1. Data dir must exist (or be creatable) and be writable
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        problems.append(f"Data directory {data_dir} cannot be created: {e}")
    else:
        if not os.access(data_dir, os.W_OK):
            problems.append(f"Data directory {data_dir} is not writable")

    # 2. Required env
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        problems.append(f"Missing required environment variables: {', '.join(missing)}")

    if problems:
        raise ConfigError("; ".join(problems))

    logger.info("Configuration validated (rules version %s).", rules.project.rules_version)
