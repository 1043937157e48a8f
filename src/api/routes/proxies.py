"""Proxy grant API routes.

Delegation, revocation and chain resolution. Graph invariant violations
(self proxy, chain too deep, cycles) are permanent rejections.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from src.api.adapters.problem_details import GovernanceErrorAdapter
from src.api.dependencies.governance import get_proxy_graph, get_time_authority
from src.api.models.proxy import (
    EffectiveHolderResponse,
    ExpireSweepResponse,
    GrantProxyRequest,
    ProxyGrantListResponse,
    ProxyGrantResponse,
    RevokeProxyRequest,
)
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.proxy_graph_service import ProxyGraphService
from src.domain.exceptions import GovernanceError
from src.domain.models.proxy_grant import EffectiveWindow, ProxyStatus

router = APIRouter(prefix="/v1/meetings/{meeting_id}/proxies", tags=["proxies"])
grant_router = APIRouter(prefix="/v1/proxies", tags=["proxies"])


@router.post("", response_model=ProxyGrantResponse, status_code=201)
async def grant_proxy(
    meeting_id: UUID,
    request_data: GrantProxyRequest,
    request: Request,
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ProxyGrantResponse:
    """Delegate the grantor's vote. Any prior active grant of the grantor is superseded.

    Raises:
        HTTPException 404: Meeting or parent grant not found.
        HTTPException 422: Self proxy, chain too deep, cycle, parent
            grant not usable for sub-delegation, or instructions that do
            not fit the proxy type.
    """
    try:
        grant = await graph.grant(
            meeting_id=meeting_id,
            grantor=request_data.grantor,
            holder=request_data.holder,
            window=EffectiveWindow(request_data.effective_from, request_data.effective_until),
            voting_weight=request_data.voting_weight,
            can_sub_delegate=request_data.can_sub_delegate,
            parent_grant_id=request_data.parent_grant_id,
            proxy_type=request_data.proxy_type,
            resolution_ids=(
                frozenset(request_data.resolution_ids)
                if request_data.resolution_ids is not None
                else None
            ),
            max_votes_allowed=request_data.max_votes_allowed,
            voting_instructions=request_data.voting_instructions,
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ProxyGrantResponse.model_validate(grant.to_dict())


@router.get("", response_model=ProxyGrantListResponse)
async def list_proxies(
    meeting_id: UUID,
    status: ProxyStatus | None = Query(default=None),
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ProxyGrantListResponse:
    grants = await graph.list_grants(meeting_id, status)
    return ProxyGrantListResponse(
        grants=[ProxyGrantResponse.model_validate(g.to_dict()) for g in grants]
    )


@router.get("/holders/{grantor}", response_model=EffectiveHolderResponse)
async def effective_holder(
    meeting_id: UUID,
    grantor: str,
    request: Request,
    at: datetime | None = Query(default=None, description="Defaults to now"),
    resolution_id: UUID | None = Query(default=None),
    graph: ProxyGraphService = Depends(get_proxy_graph),
    time_authority: TimeAuthorityProtocol = Depends(get_time_authority),
) -> EffectiveHolderResponse:
    """Resolve who ultimately votes for the grantor."""
    try:
        chain = await graph.resolve_chain(
            meeting_id, grantor, at or time_authority.now(), resolution_id
        )
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return EffectiveHolderResponse(
        meeting_id=meeting_id,
        grantor=grantor,
        holder=chain.holder,
        delegated=chain.delegated,
        chain=[g.grant_id for g in chain.grants],
    )


@grant_router.get("/{grant_id}", response_model=ProxyGrantResponse)
async def get_proxy(
    grant_id: UUID,
    request: Request,
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ProxyGrantResponse:
    try:
        grant = await graph.get_grant(grant_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ProxyGrantResponse.model_validate(grant.to_dict())


@grant_router.get("/{grant_id}/chain", response_model=ProxyGrantListResponse)
async def get_proxy_chain(
    grant_id: UUID,
    request: Request,
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ProxyGrantListResponse:
    """Return the grant's ancestry, root first."""
    try:
        chain = await graph.get_chain(grant_id)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ProxyGrantListResponse(
        grants=[ProxyGrantResponse.model_validate(g.to_dict()) for g in chain]
    )


@grant_router.post("/{grant_id}/revoke", response_model=ProxyGrantResponse)
async def revoke_proxy(
    grant_id: UUID,
    request_data: RevokeProxyRequest,
    request: Request,
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ProxyGrantResponse:
    """Revoke a grant. Idempotent; sub-delegated children stay active."""
    try:
        grant = await graph.revoke(grant_id, request_data.revoked_by, request_data.reason)
    except GovernanceError as e:
        raise GovernanceErrorAdapter.to_http_exception(e, request) from None
    return ProxyGrantResponse.model_validate(grant.to_dict())


@grant_router.post("/expire-sweep", response_model=ExpireSweepResponse)
async def expire_sweep(
    graph: ProxyGraphService = Depends(get_proxy_graph),
) -> ExpireSweepResponse:
    """Expire every grant whose window has elapsed. Safe to call repeatedly."""
    expired = await graph.expire_sweep()
    return ExpireSweepResponse(expired_grant_ids=expired)
