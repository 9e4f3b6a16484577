"""Infrastructure modules for the notification engine.

Centralized infrastructure components:
- configuration: Settings management (Settings)
- events: In-process event bus
- identity: Platform users, roles and enrollments (UserDirectory)
- idempotency: Claim cache used by the scheduled dispatcher
- logging: Structured logging (get_module_logger, bind_request_context)
- notifications: Delivery channels and the bounded delivery executor
- operations: Operation results and error classification
- persistence: Document stores (in-memory, DynamoDB)
- services: Dependency injection services (SettingsDep, get_settings)
"""

# Observability
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Observability
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
]
