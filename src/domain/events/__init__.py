"""Audit event payloads, one module per aggregate.

Services wrap a payload in a GovernanceEvent envelope before handing it
to the audit sink.
"""

from src.domain.events.governance_event import (
    GOVERNANCE_EVENT_SCHEMA_VERSION,
    GovernanceEvent,
)
from src.domain.events.proxy import (
    ProxyGrantedEvent,
    ProxyRevokedEvent,
    ProxyStatusChangedEvent,
)
from src.domain.events.resolution import (
    ResolutionProposedEvent,
    ResolutionStatusChangedEvent,
)
from src.domain.events.voting import (
    BallotCastEvent,
    VotingSessionClosedEvent,
    VotingSessionOpenedEvent,
    VotingSessionStatusEvent,
)
from src.domain.events.workflow import (
    MeetingArchivedEvent,
    MeetingOpenedEvent,
    QuorumRecordedEvent,
    StageTransitionedEvent,
)

__all__: list[str] = [
    "GOVERNANCE_EVENT_SCHEMA_VERSION",
    "BallotCastEvent",
    "GovernanceEvent",
    "MeetingArchivedEvent",
    "MeetingOpenedEvent",
    "ProxyGrantedEvent",
    "ProxyRevokedEvent",
    "ProxyStatusChangedEvent",
    "QuorumRecordedEvent",
    "ResolutionProposedEvent",
    "ResolutionStatusChangedEvent",
    "StageTransitionedEvent",
    "VotingSessionClosedEvent",
    "VotingSessionOpenedEvent",
    "VotingSessionStatusEvent",
]
