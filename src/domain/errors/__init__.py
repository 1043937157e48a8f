"""Domain errors for the governance engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from GovernanceError.
"""

from src.domain.errors.concurrent_modification import (
    ConcurrentModificationError,
    LockTimeoutError,
)
from src.domain.errors.proxy import (
    ChainTooDeepError,
    CycleDetectedError,
    InvalidProxyInstructionsError,
    InvalidProxyWindowError,
    ProxyError,
    ProxyGrantNotFoundError,
    ProxyInstructionNotFollowedError,
    ProxyUseConflictError,
    SelfProxyError,
    SubDelegationNotPermittedError,
)
from src.domain.errors.records import DeletionProhibitedError
from src.domain.errors.resolution import (
    InvalidResolutionTransitionError,
    OutcomeAlreadyRecordedError,
    ResolutionError,
    ResolutionNotFoundError,
    ResolutionOnBallotError,
    SelfSecondError,
)
from src.domain.errors.role import (
    InvalidRoleTransitionError,
    InvalidVotingWeightError,
    MeetingRoleNotFoundError,
)
from src.domain.errors.voting import (
    CancellationNotPermittedError,
    ChoiceNotPermittedError,
    DeadlinePassedError,
    DuplicateVoteError,
    EmptyBallotError,
    IneligibleVoterError,
    ResolutionNotVotableError,
    RoundNotOpenError,
    SessionItemNotFoundError,
    SessionNotOpenError,
    TallyError,
    VotingError,
    VotingSessionNotFoundError,
)
from src.domain.errors.workflow import (
    InvalidStageError,
    InvalidStageSequenceError,
    MeetingNotFoundError,
    NotControllerError,
    QuorumNotMetError,
    RecoveryExhaustedError,
    StageLockedError,
    StaleWorkflowStateError,
    WorkflowError,
    WorkflowNotFoundError,
)

__all__: list[str] = [
    # Concurrency
    "ConcurrentModificationError",
    "LockTimeoutError",
    # Records
    "DeletionProhibitedError",
    # Workflow
    "WorkflowError",
    "MeetingNotFoundError",
    "WorkflowNotFoundError",
    "InvalidStageSequenceError",
    "InvalidStageError",
    "StageLockedError",
    "QuorumNotMetError",
    "NotControllerError",
    "StaleWorkflowStateError",
    "RecoveryExhaustedError",
    # Roles
    "MeetingRoleNotFoundError",
    "InvalidVotingWeightError",
    "InvalidRoleTransitionError",
    # Proxy graph
    "ProxyError",
    "ProxyGrantNotFoundError",
    "SelfProxyError",
    "ChainTooDeepError",
    "CycleDetectedError",
    "SubDelegationNotPermittedError",
    "InvalidProxyWindowError",
    "InvalidProxyInstructionsError",
    "ProxyInstructionNotFollowedError",
    "ProxyUseConflictError",
    # Voting
    "VotingError",
    "VotingSessionNotFoundError",
    "SessionItemNotFoundError",
    "EmptyBallotError",
    "DuplicateVoteError",
    "IneligibleVoterError",
    "SessionNotOpenError",
    "DeadlinePassedError",
    "ChoiceNotPermittedError",
    "ResolutionNotVotableError",
    "RoundNotOpenError",
    "TallyError",
    "CancellationNotPermittedError",
    # Resolutions
    "ResolutionError",
    "ResolutionNotFoundError",
    "SelfSecondError",
    "InvalidResolutionTransitionError",
    "OutcomeAlreadyRecordedError",
    "ResolutionOnBallotError",
]
