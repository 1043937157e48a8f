"""Meeting role API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.adapters.problem_details import GovernanceErrorAdapter
from src.api.dependencies.governance import get_role_registry
from src.api.models.role import (
    AssignRoleRequest,
    HandOverRoleRequest,
    MeetingRoleResponse,
    VotingWeightResponse,
)
from src.application.services.role_registry_service import RoleRegistryService
from src.domain.exceptions import GovernanceError

router = APIRouter(prefix="/v1/meetings/{meeting_id}/roles", tags=["roles"])


@router.post("", response_model=MeetingRoleResponse, status_code=201)
async def assign_role(
    meeting_id: UUID,
    request_data: AssignRoleRequest,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> MeetingRoleResponse:
    try:
        role = await registry.assign_role(
            meeting_id=meeting_id,
            user_id=request_data.user_id,
            role_tag=request_data.role_tag,
            voting_weight=request_data.voting_weight,
            capabilities=(
                frozenset(request_data.capabilities)
                if request_data.capabilities is not None
                else None
            ),
            assigned_by=request_data.assigned_by,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingRoleResponse.model_validate(role.to_dict())


@router.post("/{role_id}/deactivate", response_model=MeetingRoleResponse)
async def deactivate_role(
    meeting_id: UUID,
    role_id: UUID,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> MeetingRoleResponse:
    try:
        role = await registry.deactivate_role(role_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingRoleResponse.model_validate(role.to_dict())


@router.post("/{role_id}/delegate", response_model=MeetingRoleResponse)
async def delegate_role(
    meeting_id: UUID,
    role_id: UUID,
    request_data: HandOverRoleRequest,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> MeetingRoleResponse:
    """Lend the role's procedural capabilities; the holder keeps the vote."""
    try:
        role = await registry.delegate_role(
            role_id, request_data.user_id, request_data.reason
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingRoleResponse.model_validate(role.to_dict())


@router.post("/{role_id}/substitute", response_model=MeetingRoleResponse)
async def substitute_role(
    meeting_id: UUID,
    role_id: UUID,
    request_data: HandOverRoleRequest,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> MeetingRoleResponse:
    """Hand the whole role, vote and weight included, to a substitute."""
    try:
        role = await registry.substitute_role(
            role_id, request_data.user_id, request_data.reason
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingRoleResponse.model_validate(role.to_dict())


@router.post("/{role_id}/restore", response_model=MeetingRoleResponse)
async def restore_role(
    meeting_id: UUID,
    role_id: UUID,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> MeetingRoleResponse:
    try:
        role = await registry.restore_role(role_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingRoleResponse.model_validate(role.to_dict())


@router.get("/users/{user_id}", response_model=list[MeetingRoleResponse])
async def roles_for_user(
    meeting_id: UUID,
    user_id: str,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> list[MeetingRoleResponse]:
    roles = await registry.roles_for(meeting_id, user_id)
    return [MeetingRoleResponse.model_validate(r.to_dict()) for r in roles]


@router.get("/users/{user_id}/weight", response_model=VotingWeightResponse)
async def voting_weight(
    meeting_id: UUID,
    user_id: str,
    request: Request,
    registry: RoleRegistryService = Depends(get_role_registry),
) -> VotingWeightResponse:
    """Resolve the participant's own voting weight, before any proxies."""
    try:
        resolved = await registry.resolve_voting_weight(meeting_id, user_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return VotingWeightResponse(
        meeting_id=meeting_id,
        user_id=user_id,
        weight=resolved.weight,
        eligible=resolved.eligible,
        reason=resolved.reason,
    )
