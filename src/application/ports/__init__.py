"""Application ports - Abstract interfaces for infrastructure adapters.

This module defines the contracts that infrastructure adapters must implement.
Ports enable dependency inversion and make the application layer testable.

Available ports:
- MembershipPort: organization membership lookups (external)
- AuditSinkPort: fire-and-forget audit emission (external)
- TimeAuthorityProtocol: timestamps
- *RepositoryProtocol: persistence per aggregate
"""

from src.application.ports.audit_sink import AuditSinkPort
from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.meeting_role_repository import MeetingRoleRepositoryProtocol
from src.application.ports.membership import MembershipPort
from src.application.ports.proxy_grant_repository import ProxyGrantRepositoryProtocol
from src.application.ports.resolution_repository import ResolutionRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.ports.voting_repository import VotingRepositoryProtocol
from src.application.ports.workflow_repository import WorkflowRepositoryProtocol

__all__: list[str] = [
    "AuditSinkPort",
    "MeetingRepositoryProtocol",
    "MeetingRoleRepositoryProtocol",
    "MembershipPort",
    "ProxyGrantRepositoryProtocol",
    "ResolutionRepositoryProtocol",
    "TimeAuthorityProtocol",
    "VotingRepositoryProtocol",
    "WorkflowRepositoryProtocol",
]
