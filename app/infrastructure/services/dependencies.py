"""
Type aliases for FastAPI dependency injection.

Provides annotated type hints for common infrastructure dependencies.
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.configuration import Settings
from infrastructure.identity import UserDirectory
from infrastructure.persistence import DocumentStore
from infrastructure.services.providers import (
    get_document_store,
    get_settings,
    get_user_directory,
)

# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Shared document store dependency
DocumentStoreDep = Annotated[DocumentStore, Depends(get_document_store)]

# User/role directory dependency
UserDirectoryDep = Annotated[UserDirectory, Depends(get_user_directory)]

__all__ = [
    "SettingsDep",
    "DocumentStoreDep",
    "UserDirectoryDep",
]
