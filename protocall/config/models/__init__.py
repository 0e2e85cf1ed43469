"""Configuration model exports.

    from protocall.config.models import HandlersConfig, ObservabilityConfig
"""

from protocall.config.models.handlers import HandlersConfig
from protocall.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)

__all__ = [
    "HandlersConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
]
