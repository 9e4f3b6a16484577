"""Versioned storage of chat permission, availability and restriction settings."""

from typing import Callable, Type, TypeVar

from pydantic import BaseModel

from infrastructure.logging import get_module_logger
from infrastructure.persistence import (
    ConditionFailedError,
    DocumentStore,
    DuplicateKeyError,
)
from modules.chat.defaults import (
    default_availability,
    default_permission_matrix,
    default_restrictions,
)
from modules.chat.domain import (
    ChatAvailabilitySettings,
    ChatPermissionMatrix,
    ChatRestrictionSet,
    SettingsVersionConflict,
)

logger = get_module_logger()

SETTINGS_COLLECTION = "chat_settings"

PERMISSIONS_KEY = "permission_matrix"
AVAILABILITY_KEY = "availability"
RESTRICTIONS_KEY = "restrictions"

SettingsModel = TypeVar("SettingsModel", bound=BaseModel)


class ChatSettingsStore:
    """Reads and replaces the three chat settings records.

    Each record carries a ``version``. A replacement must be based on the
    current version and bumps it by one; a stale replacement raises
    SettingsVersionConflict instead of overwriting a concurrent change.
    Missing records are created from the defaults on first read.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_permissions(self) -> ChatPermissionMatrix:
        return self._load(
            PERMISSIONS_KEY, ChatPermissionMatrix, default_permission_matrix
        )

    def replace_permissions(
        self, matrix: ChatPermissionMatrix
    ) -> ChatPermissionMatrix:
        return self._replace(
            PERMISSIONS_KEY, matrix, ChatPermissionMatrix, default_permission_matrix
        )

    def get_availability(self) -> ChatAvailabilitySettings:
        return self._load(
            AVAILABILITY_KEY, ChatAvailabilitySettings, default_availability
        )

    def replace_availability(
        self, availability: ChatAvailabilitySettings
    ) -> ChatAvailabilitySettings:
        return self._replace(
            AVAILABILITY_KEY,
            availability,
            ChatAvailabilitySettings,
            default_availability,
        )

    def get_restrictions(self) -> ChatRestrictionSet:
        return self._load(RESTRICTIONS_KEY, ChatRestrictionSet, default_restrictions)

    def replace_restrictions(
        self, restrictions: ChatRestrictionSet
    ) -> ChatRestrictionSet:
        return self._replace(
            RESTRICTIONS_KEY, restrictions, ChatRestrictionSet, default_restrictions
        )

    def _load(
        self,
        key: str,
        model: Type[SettingsModel],
        default: Callable[[], SettingsModel],
    ) -> SettingsModel:
        document = self._store.get(SETTINGS_COLLECTION, key)
        if document is None:
            try:
                self._store.insert(
                    SETTINGS_COLLECTION, key, default().model_dump(mode="json")
                )
                logger.info("chat_settings_initialized", settings=key)
            except DuplicateKeyError:
                pass
            document = self._store.get(SETTINGS_COLLECTION, key)
        return model.model_validate(document)

    def _replace(
        self,
        key: str,
        replacement: SettingsModel,
        model: Type[SettingsModel],
        default: Callable[[], SettingsModel],
    ) -> SettingsModel:
        self._load(key, model, default)
        base_version = replacement.version
        document = replacement.model_dump(mode="json")
        document["version"] = base_version + 1
        try:
            updated = self._store.update(
                SETTINGS_COLLECTION, key, document, expected={"version": base_version}
            )
        except ConditionFailedError:
            latest = self._load(key, model, default)
            raise SettingsVersionConflict(key, base_version, latest.version)
        logger.info(
            "chat_settings_replaced",
            settings=key,
            version=document["version"],
        )
        return model.model_validate(updated)
