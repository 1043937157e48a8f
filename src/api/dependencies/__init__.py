"""API dependencies for dependency injection."""

from src.api.dependencies.governance import (
    get_audit_sink,
    get_governance_config,
    get_proxy_expiry_worker,
    get_proxy_graph,
    get_resolution_registry,
    get_role_registry,
    get_time_authority,
    get_voting_session_service,
    get_workflow_engine,
    reset_governance_dependencies,
    set_time_authority,
)

__all__: list[str] = [
    "get_audit_sink",
    "get_governance_config",
    "get_proxy_expiry_worker",
    "get_proxy_graph",
    "get_resolution_registry",
    "get_role_registry",
    "get_time_authority",
    "get_voting_session_service",
    "get_workflow_engine",
    "reset_governance_dependencies",
    "set_time_authority",
]
