"""Factories for chat policy settings."""

from typing import Any, Dict

from modules.chat.domain import ChatPermissionMatrix, PermissionCell


def make_cell(**flags: Any) -> PermissionCell:
    """Open permission cell (chat, initiate, respond) with ``flags`` applied."""
    fields: Dict[str, Any] = {"can_chat": True, "can_initiate": True, "can_respond": True}
    fields.update(flags)
    return PermissionCell(**fields)


def make_matrix(
    cells: Dict[str, Dict[str, PermissionCell]], version: int = 0
) -> ChatPermissionMatrix:
    """Create a permission matrix from ``from_role -> to_role -> cell``.

    Example:
        matrix = make_matrix({"creator": {"learner": make_cell(max_daily_messages=3)}})
    """
    return ChatPermissionMatrix(version=version, matrix=cells)
