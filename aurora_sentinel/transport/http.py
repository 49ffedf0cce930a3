"""HttpAlertTransport — talks to the alert backend's REST API with httpx.

    POST {base}/sos         → {"id": ...}
    GET  {base}/risk-zones  → [{"id", "name", "type", "polygon": GeoJSON Polygon}]

Every failure mode (connect error, timeout, non-2xx, unparseable body)
is raised as SubmissionFailed so the engine has one error to handle.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from aurora_sentinel.domain.errors import SubmissionFailed
from aurora_sentinel.domain.escalation import AlertRequest
from aurora_sentinel.domain.zone import RiskZone

logger = logging.getLogger(__name__)


def alert_payload(request: AlertRequest) -> dict[str, Any]:
    """Shape an AlertRequest the way the backend's /sos endpoint expects."""
    payload: dict[str, Any] = {
        "risk_score": round(request.score, 2),
        "factors": {k: round(v, 2) for k, v in request.factors.items()},
        "trigger_type": request.trigger_kind.value,
    }
    if request.location is not None:
        loc = request.location
        payload["location"] = {"lat": loc.lat, "lng": loc.lng}
        if loc.matched_zone is not None:
            payload["location"]["zone"] = loc.matched_zone.name
    return payload


def parse_zone(raw: dict[str, Any]) -> RiskZone:
    """Translate one backend zone record into a RiskZone.

    Raises:
        ValueError: If the record has no usable outer ring.
    """
    polygon = raw.get("polygon") or {}
    coordinates = polygon.get("coordinates") or []
    if not coordinates:
        raise ValueError("zone has no polygon coordinates")
    return RiskZone.model_validate({
        "id": str(raw.get("id", "")),
        "name": raw.get("name") or "",
        "kind": raw.get("type"),
        "polygon": coordinates[0],
    })


class HttpAlertTransport:
    """AlertTransport over HTTP.

    Args:
        base_url: API root, e.g. ``https://campus.example/api``.
        token: Optional bearer token.
        timeout: Per-request timeout in seconds.
        client: Pre-built AsyncClient (tests inject one with a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        token: str = "",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit_alert(self, request: AlertRequest) -> str:
        try:
            resp = await self._client.post("/sos", json=alert_payload(request))
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SubmissionFailed(f"backend answered {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SubmissionFailed(str(exc) or type(exc).__name__) from exc

        alert_id = data.get("id") if isinstance(data, dict) else None
        if alert_id is None:
            raise SubmissionFailed("response carried no alert id")
        return str(alert_id)

    async def fetch_zones(self) -> list[RiskZone]:
        try:
            resp = await self._client.get("/risk-zones")
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise SubmissionFailed(f"backend answered {exc.response.status_code}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise SubmissionFailed(str(exc) or type(exc).__name__) from exc

        if not isinstance(data, list):
            raise SubmissionFailed("risk-zones response is not a list")

        zones: list[RiskZone] = []
        for raw in data:
            try:
                zones.append(parse_zone(raw))
            except (ValidationError, ValueError, AttributeError) as exc:
                logger.warning("Ignoring malformed zone record: %s", exc)
        return zones
