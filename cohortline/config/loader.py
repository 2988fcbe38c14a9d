"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "COHORTLINE_CONFIG_DIR"
ENVIRONMENT_ENV = "COHORTLINE_ENV"


def get_config_dir() -> Path:
    """Locate the configuration directory.

    COHORTLINE_CONFIG_DIR wins when set. Otherwise the current directory and
    its parents are searched for a ``config/`` folder.

    Raises:
        FileNotFoundError: If COHORTLINE_CONFIG_DIR points nowhere
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents[:4]):
        if (candidate / "config").is_dir():
            return candidate / "config"

    return Path("config")


def get_environment() -> str:
    """Return the active environment name (defaults to 'development')."""
    return os.environ.get(ENVIRONMENT_ENV, "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read a TOML file into a dictionary.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``.

    Nested tables merge recursively; any other value in ``override``
    replaces the one in ``base``. Arrays are replaced, not concatenated, so
    an environment file can swap out the whole rule list.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load default.toml and overlay {env}.toml when present.

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    config_dir = get_config_dir()

    default_path = config_dir / "default.toml"
    if not default_path.exists():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )
    config = load_toml(default_path)

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
