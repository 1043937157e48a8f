"""Archive-only records.

Meetings, stage transitions, ballots and resolution outcomes form the
audit trail of a meeting. They leave active use by archival; there is no
delete path, and calling `delete()` on one fails loudly.
"""

from src.domain.errors.records import DeletionProhibitedError


class DeletePreventionMixin:
    """Gives a record a `delete()` that always raises DeletionProhibitedError."""

    def delete(self) -> None:
        raise DeletionProhibitedError(
            f"{type(self).__name__} records are archived, never deleted"
        )
