"""Configuration loading for Cohortline.

Configuration comes from TOML files with environment variable overrides:

    from cohortline.config import get_settings

    settings = get_settings()
    interval = settings.ingestion.queue.poll_interval_seconds
"""

from functools import lru_cache

from cohortline.config.loader import load_config
from cohortline.config.settings import Settings, set_toml_config
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings instance.

    A missing config/default.toml is not fatal: the model defaults apply
    and environment variables still override them. Call
    ``get_settings.cache_clear()`` or ``reload_settings()`` to reload.
    """
    try:
        config_dict = load_config()
    except FileNotFoundError as e:
        logger.warning("config_file_not_found", error=str(e))
        config_dict = {}
    set_toml_config(config_dict)

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
