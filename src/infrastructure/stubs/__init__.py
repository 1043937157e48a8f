"""Infrastructure stubs for development and testing.

This module provides in-memory implementations of the application ports
for use in development and testing environments.

Available stubs:
- MembershipStub: organization membership table (external in production)
- AuditSinkStub: records events, can be made to fail or stall
- MeetingRepositoryStub / WorkflowRepositoryStub: meetings, CAS workflow
  instances, append-only transitions
- MeetingRoleRepositoryStub: meeting roles
- ProxyGrantRepositoryStub: grant arena with single-active-grant constraint
- VotingRepositoryStub: sessions, items, ballots with uniqueness constraints
- ResolutionRepositoryStub: resolutions with unique numbering

WARNING: These stubs are NOT for production use.
"""

from src.infrastructure.stubs.audit_sink_stub import AuditSinkStub
from src.infrastructure.stubs.meeting_repository_stub import MeetingRepositoryStub
from src.infrastructure.stubs.meeting_role_repository_stub import (
    MeetingRoleRepositoryStub,
)
from src.infrastructure.stubs.membership_stub import MembershipStub
from src.infrastructure.stubs.proxy_grant_repository_stub import (
    ProxyGrantRepositoryStub,
)
from src.infrastructure.stubs.resolution_repository_stub import (
    ResolutionRepositoryStub,
)
from src.infrastructure.stubs.voting_repository_stub import VotingRepositoryStub
from src.infrastructure.stubs.workflow_repository_stub import WorkflowRepositoryStub

__all__: list[str] = [
    "AuditSinkStub",
    "MeetingRepositoryStub",
    "MeetingRoleRepositoryStub",
    "MembershipStub",
    "ProxyGrantRepositoryStub",
    "ResolutionRepositoryStub",
    "VotingRepositoryStub",
    "WorkflowRepositoryStub",
]
