"""Notification engine configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Feature settings
from infrastructure.configuration.features import (
    NotificationsFeatureSettings,
    PlatformSettings,
)

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    IdempotencySettings,
    PersistenceSettings,
    SchedulerSettings,
    ServerSettings,
)


class Settings(BaseSettings):
    """Notification engine configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Features**: notification dispatch and platform directory configuration
    - **Infrastructure**: persistence, idempotency, scheduler and server

    Environment Variables:
        PREFIX: Environment prefix for multi-tenant deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.persistence.backend == "dynamodb":
            # Configure DynamoDB store...

        timeout = settings.notifications.channel_timeout_seconds

        if settings.is_production:
            # Production-specific logic...
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Feature settings
    notifications: NotificationsFeatureSettings
    platform: PlatformSettings

    # Infrastructure settings
    server: ServerSettings
    persistence: PersistenceSettings
    idempotency: IdempotencySettings
    scheduler: SchedulerSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Features
            "notifications": NotificationsFeatureSettings,
            "platform": PlatformSettings,
            # Infrastructure
            "server": ServerSettings,
            "persistence": PersistenceSettings,
            "idempotency": IdempotencySettings,
            "scheduler": SchedulerSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )
