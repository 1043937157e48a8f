"""Domain error to HTTP translation."""

from src.api.adapters.problem_details import GovernanceErrorAdapter

__all__: list[str] = ["GovernanceErrorAdapter"]
