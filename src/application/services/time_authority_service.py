"""Wall clock used by the API process."""

import time
from datetime import datetime, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol


class TimeAuthorityService(TimeAuthorityProtocol):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    utcnow = now

    def monotonic(self) -> float:
        return time.monotonic()
