"""
API models (Pydantic DTOs) for the governance engine.

This module contains all Pydantic request/response models
used by API endpoints.
"""

from src.api.models.health import HealthResponse
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
from src.api.models.proxy import (
    EffectiveHolderResponse,
    ExpireSweepResponse,
    GrantProxyRequest,
    ProxyGrantListResponse,
    ProxyGrantResponse,
    RevokeProxyRequest,
)
from src.api.models.resolution import (
    ProposeResolutionRequest,
    ResolutionActionRequest,
    ResolutionListResponse,
    ResolutionResponse,
    SecondResolutionRequest,
    SupersedeResolutionRequest,
)
from src.api.models.role import (
    AssignRoleRequest,
    MeetingRoleResponse,
    VotingWeightResponse,
)
from src.api.models.voting import (
    BallotListResponse,
    BallotResponse,
    CastBallotRequest,
    CloseSessionResponse,
    ItemOutcomeResponse,
    OpenVotingSessionRequest,
    SessionActionRequest,
    SessionItemListResponse,
    SessionItemRequest,
    SessionItemResponse,
    TallyResponse,
    VotingSessionResponse,
)

__all__: list[str] = [
    "HealthResponse",
    # Meetings and workflows
    "AdvanceStageRequest",
    "ArchiveMeetingRequest",
    "MeetingResponse",
    "OpenMeetingRequest",
    "OpenMeetingResponse",
    "RecordQuorumRequest",
    "StageTransitionListResponse",
    "StageTransitionResponse",
    "WorkflowActionRequest",
    "WorkflowInstanceResponse",
    # Roles
    "AssignRoleRequest",
    "MeetingRoleResponse",
    "VotingWeightResponse",
    # Proxies
    "EffectiveHolderResponse",
    "ExpireSweepResponse",
    "GrantProxyRequest",
    "ProxyGrantListResponse",
    "ProxyGrantResponse",
    "RevokeProxyRequest",
    # Resolutions
    "ProposeResolutionRequest",
    "ResolutionActionRequest",
    "ResolutionListResponse",
    "ResolutionResponse",
    "SecondResolutionRequest",
    "SupersedeResolutionRequest",
    # Voting
    "BallotListResponse",
    "BallotResponse",
    "CastBallotRequest",
    "CloseSessionResponse",
    "ItemOutcomeResponse",
    "OpenVotingSessionRequest",
    "SessionActionRequest",
    "SessionItemListResponse",
    "SessionItemRequest",
    "SessionItemResponse",
    "TallyResponse",
    "VotingSessionResponse",
]
