"""
API routes for the governance engine.

This module contains all FastAPI router definitions.
Routes are organized by domain concern.

Available routers:
- health: Health check endpoints
- meetings: Meeting lifecycle and workflow stage control
- roles: Meeting role assignment and voting weight
- proxies: Proxy delegation and chain resolution
- resolutions: Resolution proposal and lifecycle
- voting: Voting sessions, ballots and tallies
"""

from src.api.routes.health import router as health_router
from src.api.routes.meetings import router as meetings_router
from src.api.routes.meetings import workflow_router
from src.api.routes.proxies import grant_router as proxy_grant_router
from src.api.routes.proxies import router as proxies_router
from src.api.routes.resolutions import resolution_router
from src.api.routes.resolutions import router as resolutions_router
from src.api.routes.roles import router as roles_router
from src.api.routes.voting import router as voting_router

__all__: list[str] = [
    "health_router",
    "meetings_router",
    "proxies_router",
    "proxy_grant_router",
    "resolution_router",
    "resolutions_router",
    "roles_router",
    "voting_router",
    "workflow_router",
]
