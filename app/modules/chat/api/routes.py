"""Chat policy HTTP API: settings records and permission decisions."""

from fastapi import APIRouter, HTTPException

from modules.chat.api.schemas import PolicyRequest
from modules.chat.dependencies import ChatPolicyEvaluatorDep, ChatSettingsStoreDep
from modules.chat.domain import (
    ChatAvailabilitySettings,
    ChatPermissionMatrix,
    ChatRestrictionSet,
    PolicyDecision,
    SettingsVersionConflict,
)

router = APIRouter(prefix="/chat", tags=["Chat"])


def _conflict(e: SettingsVersionConflict) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": str(e),
            "expectedVersion": e.expected_version,
            "currentVersion": e.current_version,
        },
    )


@router.get("/permissions", response_model=ChatPermissionMatrix)
def get_permissions(settings: ChatSettingsStoreDep):
    return settings.get_permissions()


@router.put("/permissions", response_model=ChatPermissionMatrix)
def replace_permissions(matrix: ChatPermissionMatrix, settings: ChatSettingsStoreDep):
    """Replace the whole matrix. ``version`` must be the version last read."""
    try:
        return settings.replace_permissions(matrix)
    except SettingsVersionConflict as e:
        raise _conflict(e)


@router.get("/availability", response_model=ChatAvailabilitySettings)
def get_availability(settings: ChatSettingsStoreDep):
    return settings.get_availability()


@router.put("/availability", response_model=ChatAvailabilitySettings)
def replace_availability(
    availability: ChatAvailabilitySettings, settings: ChatSettingsStoreDep
):
    try:
        return settings.replace_availability(availability)
    except SettingsVersionConflict as e:
        raise _conflict(e)


@router.get("/restrictions", response_model=ChatRestrictionSet)
def get_restrictions(settings: ChatSettingsStoreDep):
    return settings.get_restrictions()


@router.put("/restrictions", response_model=ChatRestrictionSet)
def replace_restrictions(
    restrictions: ChatRestrictionSet, settings: ChatSettingsStoreDep
):
    try:
        return settings.replace_restrictions(restrictions)
    except SettingsVersionConflict as e:
        raise _conflict(e)


@router.post("/can-initiate", response_model=PolicyDecision)
def can_initiate(request: PolicyRequest, policy: ChatPolicyEvaluatorDep):
    """Decide whether ``fromRole`` may open a conversation with ``toRole``.

    A denial is a normal response (``allowed: false`` with a ``reason``),
    not an HTTP error.
    """
    return policy.can_initiate(request.from_role, request.to_role, request.context)


@router.post("/can-respond", response_model=PolicyDecision)
def can_respond(request: PolicyRequest, policy: ChatPolicyEvaluatorDep):
    return policy.can_respond(request.from_role, request.to_role, request.context)
