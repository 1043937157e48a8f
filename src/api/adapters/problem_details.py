"""Governance error adapter.

Converts domain errors into HTTPException with RFC 7807 problem details.
Every rejection carries its taxonomy kind and the invariant it violated.
"""

from fastapi import HTTPException, Request

from src.domain.exceptions import GovernanceError


class GovernanceErrorAdapter:
    """Converts GovernanceError instances to HTTP responses."""

    @staticmethod
    def to_http_exception(error: GovernanceError, request: Request) -> HTTPException:
        """Build the HTTPException for a domain error.

        Args:
            error: The domain error raised by a service.
            request: FastAPI request, used for the problem instance URI.

        Returns:
            HTTPException with the error's status and problem details.
        """
        detail = error.to_rfc7807_dict()
        detail["instance"] = str(request.url)
        return HTTPException(status_code=error.http_status, detail=detail)
