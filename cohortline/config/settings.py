"""Root settings model for Cohortline configuration."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cohortline.config.models.api import APIConfig
from cohortline.config.models.ingestion import IngestionConfig
from cohortline.config.models.observability import ObservabilityConfig
from cohortline.config.models.rules import RulesConfig
from cohortline.config.models.storage import AWSConfig, StorageConfig

# TOML values handed to the settings source below
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration used by Settings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the merged config/*.toml contents."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Priority, highest first: constructor arguments, COHORTLINE_*
    environment variables, config/{COHORTLINE_ENV}.toml,
    config/default.toml, model defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="COHORTLINE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="cohortline", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    rules: RulesConfig = Field(default_factory=RulesConfig, description="Classification rules")
    ingestion: IngestionConfig = Field(
        default_factory=IngestionConfig,
        description="Queue, stream and scan consumers",
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Membership and customer store backends",
    )
    aws: AWSConfig = Field(default_factory=AWSConfig, description="AWS client settings")
    api: APIConfig = Field(default_factory=APIConfig, description="Query API server")
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging and metrics",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
