"""Dependency injection for API routes.

Components are built once from settings and reused. Tests override the
dependencies through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends

from cohortline.bootstrap import Components, bootstrap
from cohortline.classification.service import CohortService
from cohortline.config import get_settings as load_settings
from cohortline.config.settings import Settings
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)

_components: Components | None = None


def get_settings() -> Settings:
    """Get application settings (cached by the config package)."""
    return load_settings()


def get_components(settings: Annotated[Settings, Depends(get_settings)]) -> Components:
    """Get the shared components, building them on first access."""
    global _components
    if _components is None:
        _components = bootstrap(settings)
        logger.info("api_components_created")
    return _components


def get_cohort_service(
    components: Annotated[Components, Depends(get_components)],
) -> CohortService:
    return components.service


SettingsDep = Annotated[Settings, Depends(get_settings)]
ComponentsDep = Annotated[Components, Depends(get_components)]
CohortServiceDep = Annotated[CohortService, Depends(get_cohort_service)]


def reset_dependencies() -> None:
    """Drop cached components and settings. Used by tests."""
    global _components
    _components = None
    load_settings.cache_clear()
