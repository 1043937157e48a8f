"""Unit tests for TimeAuthorityService."""

from datetime import datetime, timedelta, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.time_authority_service import TimeAuthorityService


class TestTimeAuthorityService:
    """Tests for the system clock time authority."""

    def test_implements_protocol(self) -> None:
        assert isinstance(TimeAuthorityService(), TimeAuthorityProtocol)

    def test_now_is_timezone_aware_utc(self) -> None:
        now = TimeAuthorityService().now()

        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)
        assert abs(datetime.now(timezone.utc) - now) < timedelta(seconds=5)

    def test_monotonic_never_decreases(self) -> None:
        service = TimeAuthorityService()

        first = service.monotonic()
        second = service.monotonic()

        assert second >= first
