"""Governance API dependencies.

Dependency injection setup for the meeting governance services. All
services share one lock registry, one audit publisher and one time
authority so that per-aggregate serialization holds across routers.

Note: These are stub implementations. Production would use:
- Database-backed repositories with compare-and-swap updates
- The organization's membership service
- A durable audit sink
"""

from src.application.ports.audit_sink import AuditSinkPort
from src.application.ports.membership import MembershipPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_publisher import AuditPublisher
from src.application.services.keyed_lock import KeyedLockRegistry
from src.application.services.proxy_graph_service import ProxyGraphService
from src.application.services.resolution_registry_service import (
    ResolutionRegistryService,
)
from src.application.services.role_registry_service import RoleRegistryService
from src.application.services.time_authority_service import TimeAuthorityService
from src.application.services.voting_session_service import VotingSessionService
from src.application.services.workflow_engine_service import WorkflowEngineService
from src.config.governance_config import GovernanceConfig
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
from src.workers.proxy_expiry_worker import ProxyExpiryWorker

# Singleton instances
# In production, these would be configured via environment-based factory

_config: GovernanceConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_audit_sink: AuditSinkPort | None = None
_membership: MembershipPort | None = None
_locks: KeyedLockRegistry | None = None
_audit_publisher: AuditPublisher | None = None
_meeting_repository: MeetingRepositoryStub | None = None
_workflow_repository: WorkflowRepositoryStub | None = None
_role_repository: MeetingRoleRepositoryStub | None = None
_proxy_repository: ProxyGrantRepositoryStub | None = None
_voting_repository: VotingRepositoryStub | None = None
_resolution_repository: ResolutionRepositoryStub | None = None
_role_registry: RoleRegistryService | None = None
_workflow_engine: WorkflowEngineService | None = None
_proxy_graph: ProxyGraphService | None = None
_resolution_registry: ResolutionRegistryService | None = None
_voting_session_service: VotingSessionService | None = None
_proxy_expiry_worker: ProxyExpiryWorker | None = None


def get_governance_config() -> GovernanceConfig:
    """Get governance configuration, read once from the environment."""
    global _config
    if _config is None:
        _config = GovernanceConfig.from_environment()
    return _config


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = TimeAuthorityService()
    return _time_authority


def get_audit_sink() -> AuditSinkPort:
    """Get audit sink instance.

    Returns singleton AuditSinkStub for development.
    In production, this would return the durable audit log writer.
    """
    global _audit_sink
    if _audit_sink is None:
        _audit_sink = AuditSinkStub()
    return _audit_sink


def get_membership() -> MembershipPort:
    """Get membership port.

    The development stub treats every identity as an active member.
    """
    global _membership
    if _membership is None:
        _membership = MembershipStub(default_active=True)
    return _membership


def get_lock_registry() -> KeyedLockRegistry:
    global _locks
    if _locks is None:
        _locks = KeyedLockRegistry(get_governance_config().lock_timeout_seconds)
    return _locks


def get_audit_publisher() -> AuditPublisher:
    global _audit_publisher
    if _audit_publisher is None:
        _audit_publisher = AuditPublisher(
            sink=get_audit_sink(),
            time_authority=get_time_authority(),
            timeout_seconds=get_governance_config().audit_timeout_seconds,
        )
    return _audit_publisher


def get_meeting_repository() -> MeetingRepositoryStub:
    global _meeting_repository
    if _meeting_repository is None:
        _meeting_repository = MeetingRepositoryStub()
    return _meeting_repository


def get_workflow_repository() -> WorkflowRepositoryStub:
    global _workflow_repository
    if _workflow_repository is None:
        _workflow_repository = WorkflowRepositoryStub()
    return _workflow_repository


def get_role_repository() -> MeetingRoleRepositoryStub:
    global _role_repository
    if _role_repository is None:
        _role_repository = MeetingRoleRepositoryStub()
    return _role_repository


def get_proxy_repository() -> ProxyGrantRepositoryStub:
    global _proxy_repository
    if _proxy_repository is None:
        _proxy_repository = ProxyGrantRepositoryStub()
    return _proxy_repository


def get_voting_repository() -> VotingRepositoryStub:
    global _voting_repository
    if _voting_repository is None:
        _voting_repository = VotingRepositoryStub()
    return _voting_repository


def get_resolution_repository() -> ResolutionRepositoryStub:
    global _resolution_repository
    if _resolution_repository is None:
        _resolution_repository = ResolutionRepositoryStub()
    return _resolution_repository


def get_role_registry() -> RoleRegistryService:
    """Get role registry service instance."""
    global _role_registry
    if _role_registry is None:
        _role_registry = RoleRegistryService(
            roles=get_role_repository(),
            meetings=get_meeting_repository(),
            membership=get_membership(),
            time_authority=get_time_authority(),
        )
    return _role_registry


def get_workflow_engine() -> WorkflowEngineService:
    """Get workflow engine service instance."""
    global _workflow_engine
    if _workflow_engine is None:
        _workflow_engine = WorkflowEngineService(
            meetings=get_meeting_repository(),
            workflows=get_workflow_repository(),
            time_authority=get_time_authority(),
            audit=get_audit_publisher(),
            locks=get_lock_registry(),
        )
    return _workflow_engine


def get_proxy_graph() -> ProxyGraphService:
    """Get proxy graph service instance."""
    global _proxy_graph
    if _proxy_graph is None:
        _proxy_graph = ProxyGraphService(
            grants=get_proxy_repository(),
            meetings=get_meeting_repository(),
            time_authority=get_time_authority(),
            audit=get_audit_publisher(),
            locks=get_lock_registry(),
            config=get_governance_config(),
        )
    return _proxy_graph


def get_resolution_registry() -> ResolutionRegistryService:
    """Get resolution registry service instance."""
    global _resolution_registry
    if _resolution_registry is None:
        _resolution_registry = ResolutionRegistryService(
            resolutions=get_resolution_repository(),
            meetings=get_meeting_repository(),
            time_authority=get_time_authority(),
            audit=get_audit_publisher(),
            locks=get_lock_registry(),
        )
    return _resolution_registry


def get_voting_session_service() -> VotingSessionService:
    """Get voting session service instance."""
    global _voting_session_service
    if _voting_session_service is None:
        _voting_session_service = VotingSessionService(
            workflow_engine=get_workflow_engine(),
            role_registry=get_role_registry(),
            proxy_graph=get_proxy_graph(),
            resolution_registry=get_resolution_registry(),
            voting=get_voting_repository(),
            time_authority=get_time_authority(),
            audit=get_audit_publisher(),
            locks=get_lock_registry(),
            config=get_governance_config(),
        )
    return _voting_session_service


def get_proxy_expiry_worker() -> ProxyExpiryWorker:
    global _proxy_expiry_worker
    if _proxy_expiry_worker is None:
        _proxy_expiry_worker = ProxyExpiryWorker(
            proxy_graph=get_proxy_graph(),
            time_authority=get_time_authority(),
            interval_seconds=get_governance_config().proxy_sweep_interval_seconds,
        )
    return _proxy_expiry_worker


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Override the time authority (for testing). Call before any service is built."""
    global _time_authority
    _time_authority = time_authority


def reset_governance_dependencies() -> None:
    """Reset all singleton instances for testing.

    Call this in test fixtures to ensure clean state between tests.
    """
    global _config
    global _time_authority
    global _audit_sink
    global _membership
    global _locks
    global _audit_publisher
    global _meeting_repository
    global _workflow_repository
    global _role_repository
    global _proxy_repository
    global _voting_repository
    global _resolution_repository
    global _role_registry
    global _workflow_engine
    global _proxy_graph
    global _resolution_registry
    global _voting_session_service
    global _proxy_expiry_worker

    _config = None
    _time_authority = None
    _audit_sink = None
    _membership = None
    _locks = None
    _audit_publisher = None
    _meeting_repository = None
    _workflow_repository = None
    _role_repository = None
    _proxy_repository = None
    _voting_repository = None
    _resolution_repository = None
    _role_registry = None
    _workflow_engine = None
    _proxy_graph = None
    _resolution_registry = None
    _voting_session_service = None
    _proxy_expiry_worker = None
