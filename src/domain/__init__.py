"""Meetings, workflows, proxy grants, ballots and resolutions.

Pure data and rules. Nothing here imports the application, infrastructure
or api packages.
"""

from src.domain.exceptions import GovernanceError

__all__: list[str] = ["GovernanceError"]
