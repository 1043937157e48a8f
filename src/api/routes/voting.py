"""Voting session API routes.

Open sessions, cast ballots, close and tally. Ballot listings honour the
session's anonymity level: only aggregate tallies are unconditionally
visible.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from src.api.adapters.problem_details import GovernanceErrorAdapter
from src.api.dependencies.governance import get_voting_session_service
from src.api.models.voting import (
    BallotListResponse,
    BallotResponse,
    CastBallotRequest,
    CloseSessionResponse,
    ItemOutcomeResponse,
    OpenVotingSessionRequest,
    SessionActionRequest,
    SessionItemListResponse,
    SessionItemResponse,
    TallyResponse,
    VotingSessionResponse,
)
from src.application.services.voting_session_service import VotingSessionService
from src.domain.exceptions import GovernanceError
from src.domain.models.voting_session import SessionItemSpec, VotingSessionConfig

router = APIRouter(prefix="/v1/voting-sessions", tags=["voting"])


@router.post("", response_model=VotingSessionResponse, status_code=201)
async def open_session(
    request_data: OpenVotingSessionRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> VotingSessionResponse:
    """Open a voting session in the workflow's current voting stage.

    Raises:
        HTTPException 409: Workflow not at a voting stage, stage locked by
            another session, or a resolution that cannot be voted on.
        HTTPException 422: No items on the ballot.
    """
    config = VotingSessionConfig(
        voting_method=request_data.voting_method,
        anonymity_level=request_data.anonymity_level,
        pass_threshold_percent=request_data.pass_threshold_percent,
        required_quorum=request_data.required_quorum,
        voting_deadline=request_data.voting_deadline,
        allow_abstentions=request_data.allow_abstentions,
        allow_proxy_voting=request_data.allow_proxy_voting,
        require_unanimous_consent=request_data.require_unanimous_consent,
        start_immediately=request_data.start_immediately,
    )
    try:
        session = await service.open_session(
            meeting_id=request_data.meeting_id,
            workflow_instance_id=request_data.workflow_instance_id,
            items=[
                SessionItemSpec(i.resolution_id, i.threshold_override)
                for i in request_data.items
            ],
            config=config,
            opened_by=request_data.opened_by,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return VotingSessionResponse.model_validate(session.to_dict())


@router.get("/{session_id}", response_model=VotingSessionResponse)
async def get_session(
    session_id: UUID,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> VotingSessionResponse:
    try:
        session = await service.get_session(session_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return VotingSessionResponse.model_validate(session.to_dict())


@router.get("/{session_id}/items", response_model=SessionItemListResponse)
async def list_items(
    session_id: UUID,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> SessionItemListResponse:
    try:
        items = await service.list_items(session_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return SessionItemListResponse(
        items=[SessionItemResponse.model_validate(i.to_dict()) for i in items]
    )


@router.post("/{session_id}/start", response_model=VotingSessionResponse)
async def start_session(
    session_id: UUID,
    request_data: SessionActionRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> VotingSessionResponse:
    try:
        session = await service.start_session(session_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return VotingSessionResponse.model_validate(session.to_dict())


@router.post(
    "/{session_id}/items/{item_id}/ballots",
    response_model=BallotResponse,
    status_code=201,
)
async def cast_ballot(
    session_id: UUID,
    item_id: UUID,
    request_data: CastBallotRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> BallotResponse:
    """Cast one aggregated ballot for the voter and every proxy they hold.

    The response always includes the caller's own voter fields.

    Raises:
        HTTPException 403: Voter is ineligible and holds no proxy.
        HTTPException 409: Duplicate vote, session not open, deadline
            passed, round not open, or a proxy used up meanwhile.
        HTTPException 422: Departing from a proxy instruction without a reason.
    """
    try:
        ballot = await service.cast_ballot(
            session_id,
            item_id,
            voter_id=request_data.voter_id,
            choice=request_data.choice,
            round=request_data.round,
            instruction_override_reason=request_data.instruction_override_reason,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return BallotResponse.model_validate(ballot.to_dict())


@router.get("/{session_id}/items/{item_id}/ballots", response_model=BallotListResponse)
async def list_ballots(
    session_id: UUID,
    item_id: UUID,
    request: Request,
    requester: str = Query(..., min_length=1, description="Identity reading the ballots"),
    service: VotingSessionService = Depends(get_voting_session_service),
) -> BallotListResponse:
    """List ballots, withholding voter identity per the session's anonymity level."""
    try:
        ballots = await service.get_ballots(session_id, item_id, requester)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return BallotListResponse(ballots=[BallotResponse.model_validate(b) for b in ballots])


@router.get("/{session_id}/items/{item_id}/tally", response_model=TallyResponse)
async def get_tally(
    session_id: UUID,
    item_id: UUID,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> TallyResponse:
    try:
        tally = await service.get_tally(session_id, item_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return TallyResponse.model_validate(tally.to_dict())


@router.post(
    "/{session_id}/items/{item_id}/rounds", response_model=SessionItemResponse
)
async def open_new_round(
    session_id: UUID,
    item_id: UUID,
    request_data: SessionActionRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> SessionItemResponse:
    try:
        item = await service.open_new_round(session_id, item_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return SessionItemResponse.model_validate(item.to_dict())


@router.post("/{session_id}/close", response_model=CloseSessionResponse)
async def close_session(
    session_id: UUID,
    request_data: SessionActionRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> CloseSessionResponse:
    """Close voting, tally and record outcomes. Closing a completed session is idempotent.

    Raises:
        HTTPException 409: Session not open.
        HTTPException 500: Tally consistency violation; the session stays
            in counting.
    """
    try:
        outcomes = await service.close(session_id, request_data.actor)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return CloseSessionResponse(
        session_id=session_id,
        outcomes=[ItemOutcomeResponse.model_validate(o.to_dict()) for o in outcomes],
    )


@router.post("/{session_id}/cancel", response_model=VotingSessionResponse)
async def cancel_session(
    session_id: UUID,
    request_data: SessionActionRequest,
    request: Request,
    service: VotingSessionService = Depends(get_voting_session_service),
) -> VotingSessionResponse:
    try:
        session = await service.cancel(session_id, request_data.actor, request_data.reason)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return VotingSessionResponse.model_validate(session.to_dict())
