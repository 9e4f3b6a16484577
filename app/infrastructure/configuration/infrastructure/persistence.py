"""Persistence infrastructure settings."""

from typing import Optional

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class PersistenceSettings(InfrastructureSettings):
    """Document store backend configuration.

    Environment Variables:
        PERSISTENCE_BACKEND: 'memory' (development, tests) or 'dynamodb'
        DYNAMODB_TABLE_NAME: Single table holding every collection
        AWS_REGION: AWS region for DynamoDB (default: ca-central-1)
        DYNAMODB_ENDPOINT_URL: Optional endpoint override (local DynamoDB)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        if settings.persistence.backend == "dynamodb":
            table = settings.persistence.dynamodb_table_name
        ```
    """

    backend: str = Field(
        default="memory",
        alias="PERSISTENCE_BACKEND",
        description="Document store backend: 'memory' or 'dynamodb'",
    )
    dynamodb_table_name: str = Field(
        default="notification_engine",
        alias="DYNAMODB_TABLE_NAME",
        description="DynamoDB table name (pk=collection, sk=key)",
    )
    aws_region: str = Field(default="ca-central-1", alias="AWS_REGION")
    dynamodb_endpoint_url: Optional[str] = Field(
        default=None, alias="DYNAMODB_ENDPOINT_URL"
    )

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Only the supported backends are accepted."""
        value = v.strip().lower()
        if value not in ("memory", "dynamodb"):
            raise ValueError(f"Unsupported persistence backend: {v}")
        return value
