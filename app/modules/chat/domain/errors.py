"""Errors for the chat policy module."""


class ChatPolicyError(Exception):
    """Base class for chat policy errors."""


class SettingsVersionConflict(ChatPolicyError):
    """A settings replacement was based on a stale version."""

    def __init__(self, name: str, expected_version: int, current_version: int):
        super().__init__(
            f"{name} was modified concurrently: expected version "
            f"{expected_version}, current version is {current_version}"
        )
        self.name = name
        self.expected_version = expected_version
        self.current_version = current_version
