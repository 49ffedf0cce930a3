"""Transport protocol — how the engine reaches the alert backend.

Architectural rules:
    1. Both calls are asynchronous and may fail.
    2. Every delivery failure surfaces as SubmissionFailed, whatever the
       underlying cause (network, auth, HTTP status, bad payload).
    3. The transport never touches engine state.
"""

from __future__ import annotations

from typing import Protocol

from aurora_sentinel.domain.escalation import AlertRequest
from aurora_sentinel.domain.zone import RiskZone


class AlertTransport(Protocol):
    async def submit_alert(self, request: AlertRequest) -> str:
        """Deliver a fired alert and return the backend's alert id.

        Raises:
            SubmissionFailed: On any delivery failure.
        """
        ...

    async def fetch_zones(self) -> list[RiskZone]:
        """Fetch the current risk-zone set.

        Raises:
            SubmissionFailed: On any network or payload failure.
        """
        ...
