"""Chat policy HTTP API."""

from modules.chat.api.routes import router

__all__ = ["router"]
