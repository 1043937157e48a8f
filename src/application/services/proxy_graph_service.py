"""Proxy graph service.

Owns proxy grants, resolves effective delegation chains and tells the
voting session who ultimately casts a ballot on behalf of whom.

Chain model:
    A grantor has at most one active grant per meeting. A holder whose
    grant allows it may sub-delegate onward; the child grant points at its
    parent through `parent_grant_id`, and the parent records the new holder
    in `sub_delegated_to`. Resolution walks forward from the grantor's
    active grant along `sub_delegated_to`, iteratively, with a hop cap of
    max depth + 1.

Revocation never cascades: children of a revoked grant stay active until
they expire or are revoked themselves.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from src.application.ports.meeting_repository import MeetingRepositoryProtocol
from src.application.ports.proxy_grant_repository import ProxyGrantRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.audit_publisher import AuditPublisher
from src.application.services.base import LoggingMixin
from src.application.services.keyed_lock import KeyedLockRegistry
from src.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from src.domain.errors.proxy import (
    ChainTooDeepError,
    CycleDetectedError,
    ProxyGrantNotFoundError,
    ProxyUseConflictError,
    SelfProxyError,
    SubDelegationNotPermittedError,
)
from src.domain.errors.workflow import MeetingNotFoundError
from src.domain.events.proxy import (
    PROXY_EXECUTED_EVENT_TYPE,
    PROXY_EXPIRED_EVENT_TYPE,
    PROXY_GRANTED_EVENT_TYPE,
    PROXY_REVOKED_EVENT_TYPE,
    ProxyGrantedEvent,
    ProxyRevokedEvent,
    ProxyStatusChangedEvent,
)
from src.domain.models.proxy_grant import (
    SUPERSEDED_REASON,
    EffectiveWindow,
    ProxyGrant,
    ProxyStatus,
    ProxyType,
)
from src.domain.models.voting_session import VoteChoice
from src.domain.primitives.ensure_atomicity import AtomicOperationContext

# Revocation reason used when a grant write is compensated
ROLLED_BACK_REASON: str = "rolled_back"


@dataclass(frozen=True)
class ResolvedChain:
    """Outcome of walking a grantor's delegation chain.

    Attributes:
        grantor: The identity whose vote was resolved.
        holder: Effective holder; the grantor itself when nothing is delegated.
        grants: Grants traversed, grantor's own grant first.
    """

    grantor: str
    holder: str
    grants: tuple[ProxyGrant, ...]

    @property
    def delegated(self) -> bool:
        return bool(self.grants)

    @property
    def effective_weight(self) -> Decimal:
        """Smallest weight along the chain; authority never grows when passed on."""
        return min(g.voting_weight for g in self.grants)

    @property
    def root_grant_id(self) -> UUID:
        return self.grants[0].grant_id


class ProxyGraphService(LoggingMixin):
    """Proxy grant lifecycle and delegation chain resolution."""

    def __init__(
        self,
        grants: ProxyGrantRepositoryProtocol,
        meetings: MeetingRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        audit: AuditPublisher,
        locks: KeyedLockRegistry,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._grants = grants
        self._meetings = meetings
        self._time = time_authority
        self._audit = audit
        self._locks = locks
        self._max_depth = config.max_proxy_chain_depth
        self._init_logger()

    @staticmethod
    def _grantor_key(meeting_id: UUID, grantor: str) -> str:
        return f"proxy:{meeting_id}:{grantor}"

    async def get_grant(self, grant_id: UUID) -> ProxyGrant:
        grant = await self._grants.get(grant_id)
        if grant is None:
            raise ProxyGrantNotFoundError(grant_id)
        return grant

    async def active_grant_for(self, meeting_id: UUID, grantor: str) -> ProxyGrant | None:
        return await self._grants.get_active_for_grantor(meeting_id, grantor)

    async def list_grants(
        self, meeting_id: UUID, status: ProxyStatus | None = None
    ) -> list[ProxyGrant]:
        return await self._grants.list_for_meeting(meeting_id, status)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def grant(
        self,
        meeting_id: UUID,
        grantor: str,
        holder: str,
        window: EffectiveWindow,
        voting_weight: Decimal = Decimal("1.0"),
        can_sub_delegate: bool = False,
        parent_grant_id: UUID | None = None,
        proxy_type: ProxyType = ProxyType.GENERAL,
        resolution_ids: frozenset[UUID] | None = None,
        max_votes_allowed: int | None = None,
        voting_instructions: dict[UUID, VoteChoice] | None = None,
    ) -> ProxyGrant:
        """Create a proxy grant, superseding the grantor's prior active grant.

        Superseding the prior grant, inserting the new one and linking it to
        its parent happen as one unit; a failure part way restores the prior
        grant.

        Raises:
            SelfProxyError: grantor == holder.
            MeetingNotFoundError: Unknown meeting.
            ProxyGrantNotFoundError: Unknown parent grant.
            SubDelegationNotPermittedError: Parent not usable for sub-delegation.
            ChainTooDeepError: Resulting depth exceeds the maximum.
            CycleDetectedError: Holder already appears in the chain.
            InvalidProxyInstructionsError: Instructions on a non-instructed
                proxy, none on an instructed one, or outside its scope.
        """
        if grantor == holder:
            raise SelfProxyError(grantor)
        log = self._log_operation(
            "grant", meeting_id=str(meeting_id), grantor=grantor, holder=holder
        )
        if await self._meetings.get(meeting_id) is None:
            raise MeetingNotFoundError(meeting_id)

        async with self._locks.hold(self._grantor_key(meeting_id, grantor)):
            parent = None
            if parent_grant_id is not None:
                parent = await self._validate_parent(meeting_id, grantor, parent_grant_id)
                depth = parent.chain_depth + 1
                if depth > self._max_depth:
                    log.info("grant_rejected_chain_too_deep", depth=depth)
                    raise ChainTooDeepError(depth, self._max_depth)
                ancestors = await self._ancestors(parent) + [parent]
                path = [g.grantor for g in ancestors] + [grantor]
                if holder in path:
                    log.warning("grant_rejected_cycle", path=path + [holder])
                    raise CycleDetectedError(meeting_id, grantor, path + [holder])

            now = self._time.now()
            new_grant = ProxyGrant.create(
                meeting_id=meeting_id,
                grantor=grantor,
                holder=holder,
                window=window,
                voting_weight=voting_weight,
                can_sub_delegate=can_sub_delegate,
                parent=parent,
                proxy_type=proxy_type,
                resolution_ids=resolution_ids,
                max_votes_allowed=max_votes_allowed,
                voting_instructions=voting_instructions,
                created_at=now,
            )

            superseded = await self._grants.get_active_for_grantor(meeting_id, grantor)
            async with AtomicOperationContext("proxy_grant") as ctx:
                if superseded is not None:
                    original = copy.deepcopy(superseded)
                    self._mark_revoked(superseded, grantor, SUPERSEDED_REASON, now)
                    await self._grants.update(superseded)
                    ctx.add_rollback(lambda: self._grants.update(original))

                await self._grants.add(new_grant)
                ctx.add_rollback(lambda: self._compensate_insert(new_grant, now))

                if parent is not None:
                    parent.sub_delegated_to = holder
                    await self._grants.update(parent)

        if superseded is not None:
            await self._audit.publish(
                PROXY_REVOKED_EVENT_TYPE,
                meeting_id,
                ProxyRevokedEvent(superseded.grant_id, grantor, grantor, SUPERSEDED_REASON),
            )
        await self._audit.publish(
            PROXY_GRANTED_EVENT_TYPE,
            meeting_id,
            ProxyGrantedEvent(
                grant_id=new_grant.grant_id,
                grantor=grantor,
                holder=holder,
                chain_depth=new_grant.chain_depth,
                parent_grant_id=parent_grant_id,
                superseded_grant_id=superseded.grant_id if superseded else None,
            ),
        )
        log.info(
            "proxy_granted",
            grant_id=str(new_grant.grant_id),
            chain_depth=new_grant.chain_depth,
            superseded_grant_id=str(superseded.grant_id) if superseded else None,
        )
        return new_grant

    async def revoke(self, grant_id: UUID, revoked_by: str, reason: str) -> ProxyGrant:
        """Revoke a grant. Revoking a grant that is no longer active is a no-op.

        Children are left untouched. If the grant was a sub-delegation its
        parent's `sub_delegated_to` is cleared so authority returns to the
        parent's holder.
        """
        log = self._log_operation("revoke", grant_id=str(grant_id), revoked_by=revoked_by)
        grant = await self.get_grant(grant_id)
        async with self._locks.hold(self._grantor_key(grant.meeting_id, grant.grantor)):
            grant = await self.get_grant(grant_id)
            if not grant.is_active:
                log.info("proxy_revoke_noop", status=grant.status.value)
                return grant
            self._mark_revoked(grant, revoked_by, reason, self._time.now())
            await self._grants.update(grant)
            if grant.parent_grant_id is not None:
                parent = await self._grants.get(grant.parent_grant_id)
                if parent is not None and parent.sub_delegated_to == grant.holder:
                    parent.sub_delegated_to = None
                    await self._grants.update(parent)

        await self._audit.publish(
            PROXY_REVOKED_EVENT_TYPE,
            grant.meeting_id,
            ProxyRevokedEvent(grant.grant_id, grant.grantor, revoked_by, reason),
        )
        log.info("proxy_revoked", reason=reason)
        return grant

    async def expire_sweep(self, now: datetime | None = None) -> list[UUID]:
        """Expire every active grant whose window ended before `now`.

        Safe to run repeatedly; a second run with the same `now` changes
        nothing.

        Returns:
            IDs of grants expired by this run.
        """
        now = now or self._time.now()
        expired: list[UUID] = []
        for candidate in await self._grants.list_active():
            if not candidate.window.elapsed(now):
                continue
            async with self._locks.hold(
                self._grantor_key(candidate.meeting_id, candidate.grantor)
            ):
                grant = await self._grants.get(candidate.grant_id)
                if grant is None or not grant.is_active or not grant.window.elapsed(now):
                    continue
                grant.status = ProxyStatus.EXPIRED
                grant.expired_at = now
                await self._grants.update(grant)
            expired.append(grant.grant_id)
            await self._audit.publish(
                PROXY_EXPIRED_EVENT_TYPE,
                grant.meeting_id,
                ProxyStatusChangedEvent(grant.grant_id, grant.grantor, grant.status.value),
            )

        if expired:
            self._log_operation("expire_sweep").info(
                "proxy_grants_expired", count=len(expired)
            )
        return expired

    async def reserve_proxy_use(
        self, grant_ids: tuple[UUID, ...] | list[UUID], at: datetime
    ) -> list[ProxyGrant]:
        """Count one ballot against each grant, under each grantor's lock.

        Each grant must still be active, inside its window and below its
        vote limit when counted. A failure releases the grants already
        counted, so either all are counted or none are. The caller releases
        them too if the ballot is not stored.

        Returns:
            Grants that reached their limit and are now executed.

        Raises:
            ProxyUseConflictError: A grant stopped being usable after the
                ballot was resolved.
        """
        executed: list[ProxyGrant] = []
        async with AtomicOperationContext("reserve_proxy_use") as ctx:
            for grant_id in grant_ids:
                grant = await self.get_grant(grant_id)
                async with self._locks.hold(
                    self._grantor_key(grant.meeting_id, grant.grantor)
                ):
                    grant = await self.get_grant(grant_id)
                    if not grant.is_active:
                        raise ProxyUseConflictError(grant_id, f"grant is {grant.status.value}")
                    if not grant.window.contains(at):
                        raise ProxyUseConflictError(grant_id, "outside its effective window")
                    if grant.limit_reached:
                        raise ProxyUseConflictError(
                            grant_id, f"all {grant.max_votes_allowed} votes are used"
                        )
                    grant.votes_cast += 1
                    if grant.limit_reached:
                        grant.status = ProxyStatus.EXECUTED
                        executed.append(grant)
                    await self._grants.update(grant)
                ctx.add_rollback(lambda gid=grant_id: self.release_proxy_use([gid]))
        return executed

    async def release_proxy_use(self, grant_ids: tuple[UUID, ...] | list[UUID]) -> None:
        """Undo a reservation. A grant executed by it becomes active again."""
        for grant_id in grant_ids:
            grant = await self.get_grant(grant_id)
            async with self._locks.hold(self._grantor_key(grant.meeting_id, grant.grantor)):
                grant = await self.get_grant(grant_id)
                if grant.votes_cast == 0:
                    continue
                grant.votes_cast -= 1
                if grant.status == ProxyStatus.EXECUTED and not grant.limit_reached:
                    grant.status = ProxyStatus.ACTIVE
                await self._grants.update(grant)

    async def announce_executed(self, grants: list[ProxyGrant]) -> None:
        for grant in grants:
            await self._audit.publish(
                PROXY_EXECUTED_EVENT_TYPE,
                grant.meeting_id,
                ProxyStatusChangedEvent(grant.grant_id, grant.grantor, grant.status.value),
            )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def resolve_effective_holder(
        self,
        meeting_id: UUID,
        grantor: str,
        at_time: datetime,
        resolution_id: UUID | None = None,
    ) -> str:
        """Return who ultimately votes for `grantor` at `at_time`.

        Raises:
            CycleDetectedError: If the stored chain loops or exceeds the hop cap.
        """
        active = await self._active_index(meeting_id)
        return self._walk(meeting_id, grantor, active, at_time, resolution_id).holder

    async def resolve_chain(
        self,
        meeting_id: UUID,
        grantor: str,
        at_time: datetime,
        resolution_id: UUID | None = None,
    ) -> ResolvedChain:
        active = await self._active_index(meeting_id)
        return self._walk(meeting_id, grantor, active, at_time, resolution_id)

    async def represented_grantors(
        self,
        meeting_id: UUID,
        holder: str,
        at_time: datetime,
        resolution_id: UUID | None = None,
    ) -> dict[str, ResolvedChain]:
        """Every grantor whose effective holder is `holder`, with their chains."""
        active = await self._active_index(meeting_id)
        represented: dict[str, ResolvedChain] = {}
        for grantor in active:
            chain = self._walk(meeting_id, grantor, active, at_time, resolution_id)
            if chain.delegated and chain.holder == holder:
                represented[grantor] = chain
        return represented

    async def get_chain(self, grant_id: UUID) -> list[ProxyGrant]:
        """Return the grant's ancestry, root first, ending with the grant itself."""
        grant = await self.get_grant(grant_id)
        return await self._ancestors(grant) + [grant]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _active_index(self, meeting_id: UUID) -> dict[str, ProxyGrant]:
        grants = await self._grants.list_for_meeting(meeting_id, ProxyStatus.ACTIVE)
        return {g.grantor: g for g in grants}

    def _walk(
        self,
        meeting_id: UUID,
        grantor: str,
        active: dict[str, ProxyGrant],
        at_time: datetime,
        resolution_id: UUID | None,
    ) -> ResolvedChain:
        grant = active.get(grantor)
        if grant is None or not grant.is_usable_at(at_time, resolution_id):
            return ResolvedChain(grantor, grantor, ())

        path = [grantor]
        seen = {grantor}
        traversed: list[ProxyGrant] = []
        max_hops = self._max_depth + 1
        while grant is not None:
            if len(traversed) >= max_hops or grant.holder in seen:
                self._log_operation("resolve", meeting_id=str(meeting_id)).error(
                    "proxy_cycle_detected", path=path + [grant.holder]
                )
                raise CycleDetectedError(meeting_id, grantor, path + [grant.holder])
            traversed.append(grant)
            path.append(grant.holder)
            seen.add(grant.holder)

            next_grant = None
            if grant.sub_delegated_to is not None:
                child = active.get(grant.holder)
                if (
                    child is not None
                    and child.parent_grant_id == grant.grant_id
                    and child.holder == grant.sub_delegated_to
                    and child.is_usable_at(at_time, resolution_id)
                ):
                    next_grant = child
            grant = next_grant

        return ResolvedChain(grantor, traversed[-1].holder, tuple(traversed))

    async def _validate_parent(
        self, meeting_id: UUID, grantor: str, parent_grant_id: UUID
    ) -> ProxyGrant:
        parent = await self.get_grant(parent_grant_id)
        if parent.meeting_id != meeting_id:
            raise SubDelegationNotPermittedError(
                parent_grant_id, "parent grant belongs to another meeting"
            )
        if not parent.is_active:
            raise SubDelegationNotPermittedError(
                parent_grant_id, f"parent grant is {parent.status.value}"
            )
        if parent.holder != grantor:
            raise SubDelegationNotPermittedError(
                parent_grant_id, f"{grantor} does not hold the parent grant"
            )
        if not parent.can_sub_delegate:
            raise SubDelegationNotPermittedError(
                parent_grant_id, "parent grant does not allow sub-delegation"
            )
        return parent

    async def _ancestors(self, grant: ProxyGrant) -> list[ProxyGrant]:
        """Ancestors of `grant`, root first. Bounded by the depth cap."""
        chain: list[ProxyGrant] = []
        seen = {grant.grant_id}
        current = grant
        while current.parent_grant_id is not None:
            if len(chain) > self._max_depth or current.parent_grant_id in seen:
                raise CycleDetectedError(
                    grant.meeting_id, grant.grantor, [g.grantor for g in reversed(chain)]
                )
            parent = await self._grants.get(current.parent_grant_id)
            if parent is None:
                break
            seen.add(parent.grant_id)
            chain.append(parent)
            current = parent
        chain.reverse()
        return chain

    @staticmethod
    def _mark_revoked(
        grant: ProxyGrant, revoked_by: str, reason: str, at: datetime
    ) -> None:
        grant.status = ProxyStatus.REVOKED
        grant.revocation_reason = reason
        grant.revoked_by = revoked_by
        grant.revoked_at = at

    async def _compensate_insert(self, grant: ProxyGrant, at: datetime) -> None:
        stored = await self._grants.get(grant.grant_id)
        if stored is not None and stored.is_active:
            self._mark_revoked(stored, grant.grantor, ROLLED_BACK_REASON, at)
            await self._grants.update(stored)

