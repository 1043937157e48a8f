"""Resolution API routes.

Resolution outcomes are written by voting session closure only; there is
no route that sets passed or rejected directly.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.adapters.problem_details import GovernanceErrorAdapter
from src.api.dependencies.governance import get_resolution_registry
from src.api.models.resolution import (
    ProposeResolutionRequest,
    ResolutionActionRequest,
    ResolutionListResponse,
    ResolutionResponse,
    SecondResolutionRequest,
    SupersedeResolutionRequest,
)
from src.application.services.resolution_registry_service import (
    ResolutionRegistryService,
)
from src.domain.exceptions import GovernanceError

router = APIRouter(prefix="/v1/meetings/{meeting_id}/resolutions", tags=["resolutions"])
resolution_router = APIRouter(prefix="/v1/resolutions", tags=["resolutions"])


@router.post("", response_model=ResolutionResponse, status_code=201)
async def propose_resolution(
    meeting_id: UUID,
    request_data: ProposeResolutionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.propose(
            meeting_id=meeting_id,
            title=request_data.title,
            text=request_data.text,
            proposer=request_data.proposer,
            seconder=request_data.seconder,
            classification=request_data.classification,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@router.get("", response_model=ResolutionListResponse)
async def list_resolutions(
    meeting_id: UUID,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionListResponse:
    resolutions = await registry.list_for_meeting(meeting_id)
    return ResolutionListResponse(
        resolutions=[ResolutionResponse.model_validate(r.to_dict()) for r in resolutions]
    )


@resolution_router.get("/{resolution_id}", response_model=ResolutionResponse)
async def get_resolution(
    resolution_id: UUID,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.get(resolution_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@resolution_router.post("/{resolution_id}/second", response_model=ResolutionResponse)
async def second_resolution(
    resolution_id: UUID,
    request_data: SecondResolutionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.second(resolution_id, request_data.seconder)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@resolution_router.post("/{resolution_id}/table", response_model=ResolutionResponse)
async def table_resolution(
    resolution_id: UUID,
    request_data: ResolutionActionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.table(resolution_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@resolution_router.post("/{resolution_id}/withdraw", response_model=ResolutionResponse)
async def withdraw_resolution(
    resolution_id: UUID,
    request_data: ResolutionActionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.withdraw(resolution_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@resolution_router.post("/{resolution_id}/reopen", response_model=ResolutionResponse)
async def reopen_resolution(
    resolution_id: UUID,
    request_data: ResolutionActionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    try:
        resolution = await registry.reopen(resolution_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())


@resolution_router.post(
    "/{resolution_id}/supersede", response_model=ResolutionResponse, status_code=201
)
async def supersede_resolution(
    resolution_id: UUID,
    request_data: SupersedeResolutionRequest,
    request: Request,
    registry: ResolutionRegistryService = Depends(get_resolution_registry),
) -> ResolutionResponse:
    """Create a replacement resolution referencing this one."""
    try:
        resolution = await registry.supersede(
            resolution_id,
            title=request_data.title,
            text=request_data.text,
            proposer=request_data.proposer,
            seconder=request_data.seconder,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ResolutionResponse.model_validate(resolution.to_dict())
