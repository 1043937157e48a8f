"""Meeting and workflow API routes.

FastAPI routers for opening meetings and driving their workflow through
its stage sequence. Domain rejections are returned as RFC 7807 problem
details carrying the error kind and the invariant violated.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from src.api.adapters.problem_details import GovernanceErrorAdapter
from src.api.dependencies.governance import get_workflow_engine
from src.api.models.meeting import (
    AdvanceStageRequest,
    ArchiveMeetingRequest,
    MeetingResponse,
    OpenMeetingRequest,
    OpenMeetingResponse,
    RecordQuorumRequest,
    StageTransitionListResponse,
    StageTransitionResponse,
    WorkflowActionRequest,
    WorkflowInstanceResponse,
)
from src.application.services.workflow_engine_service import WorkflowEngineService
from src.domain.exceptions import GovernanceError

router = APIRouter(prefix="/v1/meetings", tags=["meetings"])
workflow_router = APIRouter(prefix="/v1/workflows", tags=["workflows"])


@router.post("", response_model=OpenMeetingResponse, status_code=201)
async def open_meeting(
    request_data: OpenMeetingRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> OpenMeetingResponse:
    """Open a meeting and create its workflow instance at the first stage.

    Raises:
        HTTPException 422: Invalid stage sequence.
    """
    try:
        opened = await engine.open_meeting(
            organization_id=request_data.organization_id,
            title=request_data.title,
            controller=request_data.controller,
            quorum_required=request_data.quorum_required,
            workflow_type=request_data.workflow_type,
            stage_sequence=request_data.stage_sequence,
            auto_progression=request_data.auto_progression,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None

    return OpenMeetingResponse(
        meeting=MeetingResponse.model_validate(opened.meeting.to_dict()),
        workflow=WorkflowInstanceResponse.model_validate(opened.instance.to_dict()),
    )


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: UUID,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> MeetingResponse:
    try:
        meeting = await engine.get_meeting(meeting_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingResponse.model_validate(meeting.to_dict())


@router.post("/{meeting_id}/archive", response_model=MeetingResponse)
async def archive_meeting(
    meeting_id: UUID,
    request_data: ArchiveMeetingRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> MeetingResponse:
    """Archive a meeting whose workflow has finished. Meetings are never deleted."""
    try:
        meeting = await engine.archive_meeting(meeting_id, request_data.archived_by)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return MeetingResponse.model_validate(meeting.to_dict())


@router.delete("/{meeting_id}", status_code=405)
async def delete_meeting(
    meeting_id: UUID,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> None:
    """Meetings are archived, never deleted. Always answers 405 for a known meeting."""
    try:
        meeting = await engine.get_meeting(meeting_id)
        meeting.delete()
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None


@workflow_router.get("/{instance_id}", response_model=WorkflowInstanceResponse)
async def get_workflow(
    instance_id: UUID,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> WorkflowInstanceResponse:
    try:
        instance = await engine.get_instance(instance_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return WorkflowInstanceResponse.model_validate(instance.to_dict())


@workflow_router.post("/{instance_id}/advance", response_model=StageTransitionResponse)
async def advance_stage(
    instance_id: UUID,
    request_data: AdvanceStageRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> StageTransitionResponse:
    """Advance the workflow to its next stage.

    Raises:
        HTTPException 403: Caller is not the controller.
        HTTPException 409: Stale stage index, stage locked by a voting
            session, quorum not met, or terminal workflow.
    """
    try:
        transition = await engine.advance(
            instance_id,
            requested_by=request_data.requested_by,
            expected_stage_index=request_data.expected_stage_index,
            conditions_met=request_data.conditions_met,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return StageTransitionResponse.model_validate(transition.to_dict())


@workflow_router.post("/{instance_id}/quorum", response_model=WorkflowInstanceResponse)
async def record_quorum(
    instance_id: UUID,
    request_data: RecordQuorumRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> WorkflowInstanceResponse:
    try:
        instance = await engine.record_quorum(
            instance_id, request_data.attendance_count, request_data.recorded_by
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return WorkflowInstanceResponse.model_validate(instance.to_dict())


@workflow_router.post("/{instance_id}/fail", response_model=StageTransitionResponse)
async def fail_workflow(
    instance_id: UUID,
    request_data: WorkflowActionRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> StageTransitionResponse:
    try:
        transition = await engine.fail(
            instance_id,
            reason=request_data.reason or "failed",
            triggered_by=request_data.requested_by,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return StageTransitionResponse.model_validate(transition.to_dict())


@workflow_router.post("/{instance_id}/recover", response_model=StageTransitionResponse)
async def recover_workflow(
    instance_id: UUID,
    request_data: WorkflowActionRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> StageTransitionResponse:
    """Restore a failed workflow to the exact stage index it failed at. Allowed once."""
    try:
        transition = await engine.recover(instance_id, request_data.requested_by)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return StageTransitionResponse.model_validate(transition.to_dict())


@workflow_router.post("/{instance_id}/cancel", response_model=StageTransitionResponse)
async def cancel_workflow(
    instance_id: UUID,
    request_data: WorkflowActionRequest,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> StageTransitionResponse:
    try:
        transition = await engine.cancel(
            instance_id, request_data.requested_by, request_data.reason or "cancelled"
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return StageTransitionResponse.model_validate(transition.to_dict())


@workflow_router.get(
    "/{instance_id}/transitions", response_model=StageTransitionListResponse
)
async def list_transitions(
    instance_id: UUID,
    request: Request,
    engine: WorkflowEngineService = Depends(get_workflow_engine),
) -> StageTransitionListResponse:
    try:
        transitions = await engine.list_transitions(instance_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return StageTransitionListResponse(
        transitions=[StageTransitionResponse.model_validate(t.to_dict()) for t in transitions]
    )
