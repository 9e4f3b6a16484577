"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.idempotency import IdempotencySettings
from infrastructure.configuration.infrastructure.persistence import PersistenceSettings
from infrastructure.configuration.infrastructure.scheduler import SchedulerSettings
from infrastructure.configuration.infrastructure.server import ServerSettings

__all__ = [
    "IdempotencySettings",
    "PersistenceSettings",
    "SchedulerSettings",
    "ServerSettings",
]
