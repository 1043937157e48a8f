"""Governance services and the ports they depend on.

Services hold the per-aggregate locks, publish audit events and enforce
the cross-aggregate rules (quorum, eligibility, tally). Storage, clock,
membership and audit sink are reached only through ports.
"""

__all__: list[str] = []
