"""Player configuration loader.

Loads playback defaults from the packaged defaults.toml and layers the
user's config file on top. Command-line flags are applied by the CLI
after loading.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from zippy.schemas.player import PlayerConfig

logger = logging.getLogger(__name__)

# Default config directory relative to the zippy package
_CONFIG_DIR = Path(__file__).parent / "config"

# Directory for user-level zippy configuration
ZIPPY_HOME = Path.home() / ".zippy"
USER_CONFIG_FILE = ZIPPY_HOME / "config.toml"


def _read_player_section(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    section = raw.get("player", {})
    if not isinstance(section, dict):
        raise ValueError(f"[player] in {path} must be a table")
    return section


def load_player_config(
    config_path: Path | None = None,
    defaults_path: Path | None = None,
) -> PlayerConfig:
    """Load player settings from TOML.

    Args:
        config_path: User config file. Defaults to ~/.zippy/config.toml,
                     which is skipped when it does not exist. An explicit
                     path must exist.
        defaults_path: Packaged defaults. Defaults to zippy/config/defaults.toml.

    Returns:
        PlayerConfig with user values overriding the defaults.

    Raises:
        FileNotFoundError: If the defaults file or an explicit config
            file does not exist.
        ValueError: If a file is not valid TOML or holds invalid values.
    """
    path = defaults_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Player defaults not found: {path}")
    values = _read_player_section(path)

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        values.update(_read_player_section(config_path))
        logger.info("Loaded user config from %s", config_path)
    elif USER_CONFIG_FILE.exists():
        values.update(_read_player_section(USER_CONFIG_FILE))
        logger.info("Loaded user config from %s", USER_CONFIG_FILE)

    try:
        return PlayerConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid player config: {e}") from e
