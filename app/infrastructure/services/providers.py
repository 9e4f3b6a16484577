"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.identity import InMemoryUserDirectory, UserDirectory
from infrastructure.idempotency import DocumentStoreIdempotencyCache, IdempotencyCache
from infrastructure.logging import get_module_logger
from infrastructure.notifications import DeliveryExecutor, DryRunChannel, InAppChannel
from infrastructure.persistence import (
    DocumentStore,
    DynamoDBDocumentStore,
    InMemoryDocumentStore,
)

logger = get_module_logger()

DRY_RUN_CHANNELS = ("email", "sms", "push", "whatsapp")


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/version")
        def get_version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_document_store() -> DocumentStore:
    """
    Get the application-scoped document store for the configured backend.

    Returns:
        DocumentStore: In-memory store or DynamoDB single-table store.
    """
    settings = get_settings().persistence
    if settings.backend == "dynamodb":
        return DynamoDBDocumentStore(
            table_name=settings.dynamodb_table_name,
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url,
        )
    return InMemoryDocumentStore()


@lru_cache
def get_user_directory() -> UserDirectory:
    """
    Get the application-scoped user directory.

    Seeded from PLATFORM_DIRECTORY_SEED_FILE when configured, empty otherwise.
    """
    seed_file = get_settings().platform.directory_seed_file
    if seed_file:
        return InMemoryUserDirectory.from_file(seed_file)
    logger.warning("user_directory_not_seeded")
    return InMemoryUserDirectory()


@lru_cache
def get_idempotency_cache() -> IdempotencyCache:
    """Get the idempotency cache sharing the application document store."""
    return DocumentStoreIdempotencyCache(get_document_store())


@lru_cache
def get_delivery_executor() -> DeliveryExecutor:
    """
    Get the application-scoped channel delivery executor.

    In-app messages land in the document store inbox; the other channels
    are dry-run log channels until a gateway integration is configured.
    """
    settings = get_settings().notifications
    channels = {name: DryRunChannel(name) for name in DRY_RUN_CHANNELS}
    channels["inApp"] = InAppChannel(get_document_store())
    return DeliveryExecutor(
        channels=channels,
        timeout_seconds=settings.channel_timeout_seconds,
        max_workers=settings.delivery_max_workers,
    )
