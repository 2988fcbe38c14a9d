"""Configuration model exports.

    from cohortline.config.models import IngestionConfig, RulesConfig
"""

from cohortline.config.models.api import APIConfig
from cohortline.config.models.ingestion import (
    IngestionConfig,
    QueueConsumerConfig,
    ScanConsumerConfig,
    StreamConsumerConfig,
)
from cohortline.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from cohortline.config.models.rules import RuleConfig, RulesConfig
from cohortline.config.models.storage import AWSConfig, RedisConfig, StorageConfig

__all__ = [
    "APIConfig",
    "AWSConfig",
    "IngestionConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "QueueConsumerConfig",
    "RedisConfig",
    "RuleConfig",
    "RulesConfig",
    "ScanConsumerConfig",
    "StorageConfig",
    "StreamConsumerConfig",
]
