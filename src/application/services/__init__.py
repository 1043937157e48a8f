"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- WorkflowEngineService: Meeting lifecycle and stage progression
- RoleRegistryService: Role assignment and voting weight resolution
- ProxyGraphService: Proxy delegation, chain resolution and expiry
- VotingSessionService: Ballot casting, tallying and outcomes
- ResolutionRegistryService: Resolution lifecycle and outcome records
- AuditPublisher: Bounded, non-failing audit emission
- KeyedLockRegistry: Per-aggregate write serialization
- TimeAuthorityService: System clock
"""

from src.application.services.audit_publisher import AuditPublisher
from src.application.services.base import LoggingMixin
from src.application.services.keyed_lock import KeyedLockRegistry
from src.application.services.proxy_graph_service import (
    ProxyGraphService,
    ResolvedChain,
)
from src.application.services.resolution_registry_service import (
    ResolutionRegistryService,
)
from src.application.services.role_registry_service import (
    RoleRegistryService,
    VotingWeight,
)
from src.application.services.time_authority_service import TimeAuthorityService
from src.application.services.voting_session_service import VotingSessionService
from src.application.services.workflow_engine_service import (
    OpenedMeeting,
    WorkflowEngineService,
)

__all__ = [
    "AuditPublisher",
    "KeyedLockRegistry",
    "LoggingMixin",
    "OpenedMeeting",
    "ProxyGraphService",
    "ResolutionRegistryService",
    "ResolvedChain",
    "RoleRegistryService",
    "TimeAuthorityService",
    "VotingSessionService",
    "VotingWeight",
    "WorkflowEngineService",
]
