"""Notifications HTTP API."""

from modules.notifications.api.routes import router

__all__ = ["router"]
