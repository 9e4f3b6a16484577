"""
Dependency injection services.

Provides type aliases and provider functions for FastAPI dependency injection.
"""

from infrastructure.services.dependencies import (
    DocumentStoreDep,
    SettingsDep,
    UserDirectoryDep,
)
from infrastructure.services.providers import (
    get_delivery_executor,
    get_document_store,
    get_idempotency_cache,
    get_settings,
    get_user_directory,
)

__all__ = [
    "DocumentStoreDep",
    "SettingsDep",
    "UserDirectoryDep",
    "get_delivery_executor",
    "get_document_store",
    "get_idempotency_cache",
    "get_settings",
    "get_user_directory",
]
