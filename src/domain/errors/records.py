"""Record retention errors."""

from src.domain.exceptions import GovernanceError


class DeletionProhibitedError(GovernanceError):
    """Raised when code attempts to hard-delete a governance record.

    Meetings, transitions, ballots and outcomes are archived, never deleted.

    HTTP Status: 405 Method Not Allowed
    """

    kind = "DeletionProhibited"
    title = "Deletion Prohibited"
    http_status = 405
    invariant = "governance records are archived, never hard-deleted"
