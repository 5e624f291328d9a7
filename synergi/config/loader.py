"""Config file discovery, loading and writing.

The file is JSON with camelCase keys. It can hold API keys, so it is kept
owner-only (0600). Without a file, settings come from SYNERGI_*
environment variables and defaults.
"""

import json
import os
import stat
from pathlib import Path

from loguru import logger

from synergi.config.schema import Config

CONFIG_PATH_ENV = "SYNERGI_CONFIG"


def get_config_path() -> Path:
    """`$SYNERGI_CONFIG` when set, otherwise ~/.synergi/config.json."""
    override = os.environ.get(CONFIG_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".synergi" / "config.json"


def _restrict_permissions(path: Path) -> None:
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
        if mode & 0o077:
            logger.warning(f"Config file {path} is readable by others ({oct(mode)}); restricting to 0o600")
            path.chmod(0o600)
    except OSError as e:
        logger.warning(f"Could not check permissions of {path}: {e}")


def load_config(config_path: Path | None = None) -> Config:
    """Read the config file, falling back to defaults when it is missing or invalid."""
    path = config_path or get_config_path()
    if not path.exists():
        logger.debug(f"No config file at {path}; using environment and defaults")
        return Config()

    _restrict_permissions(path)
    try:
        return Config.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning(f"Ignoring invalid config file {path}: {e}")
        return Config()


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Write `config` with camelCase keys and owner-only permissions."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(by_alias=True), indent=2), encoding="utf-8")
    path.chmod(0o600)
    logger.debug(f"Config written to {path}")
    return path
