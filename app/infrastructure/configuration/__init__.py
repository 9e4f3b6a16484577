"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the
notification engine using Pydantic BaseSettings with domain-based
organization.

Exports:
    Settings: Main settings class (for testing/overrides)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    backend = settings.persistence.backend
    roles = settings.platform.roles
    ```
"""

from infrastructure.configuration.settings import Settings

__all__ = ["Settings"]
