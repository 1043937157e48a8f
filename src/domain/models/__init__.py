"""Domain models for the governance engine.

Contains the dataclasses that represent meetings, workflow state, roles,
proxy grants, voting sessions, ballots and resolutions. Models contain no
infrastructure dependencies.
"""

from src.domain.models.ballot import Ballot
from src.domain.models.meeting import (
    DEFAULT_STAGE_SEQUENCE,
    DEFAULT_STAGE_SEQUENCES,
    DEFAULT_VOTING_STAGES,
    SYSTEM_ACTOR,
    Meeting,
    MeetingStatus,
    StageTransition,
    TransitionType,
    WorkflowInstance,
    WorkflowStage,
    WorkflowStatus,
    WorkflowType,
)
from src.domain.models.meeting_role import Capability, MeetingRole, RoleStatus, RoleTag
from src.domain.models.proxy_grant import (
    MAX_PROXY_CHAIN_DEPTH,
    EffectiveWindow,
    ProxyGrant,
    ProxyScope,
    ProxyStatus,
    ProxyType,
)
from src.domain.models.resolution import (
    Resolution,
    ResolutionClassification,
    ResolutionStatus,
)
from src.domain.models.voting_session import (
    AnonymityLevel,
    ItemOutcome,
    ItemTally,
    SessionItem,
    SessionItemSpec,
    SessionStatus,
    VoteChoice,
    VotingMethod,
    VotingSession,
    VotingSessionConfig,
)

__all__: list[str] = [
    "Ballot",
    "DEFAULT_STAGE_SEQUENCE",
    "DEFAULT_STAGE_SEQUENCES",
    "DEFAULT_VOTING_STAGES",
    "SYSTEM_ACTOR",
    "Meeting",
    "MeetingStatus",
    "StageTransition",
    "TransitionType",
    "WorkflowInstance",
    "WorkflowStage",
    "WorkflowStatus",
    "WorkflowType",
    "Capability",
    "MeetingRole",
    "RoleStatus",
    "RoleTag",
    "MAX_PROXY_CHAIN_DEPTH",
    "EffectiveWindow",
    "ProxyGrant",
    "ProxyScope",
    "ProxyStatus",
    "ProxyType",
    "Resolution",
    "ResolutionClassification",
    "ResolutionStatus",
    "AnonymityLevel",
    "ItemOutcome",
    "ItemTally",
    "SessionItem",
    "SessionItemSpec",
    "SessionStatus",
    "VoteChoice",
    "VotingMethod",
    "VotingSession",
    "VotingSessionConfig",
]
