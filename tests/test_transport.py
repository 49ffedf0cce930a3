"""Tests for the HTTP alert transport, driven through httpx.MockTransport."""

from __future__ import annotations

import json
from uuid import uuid4

import httpx
import pytest

from aurora_sentinel.domain.enums import TriggerKind, ZoneKind
from aurora_sentinel.domain.errors import SubmissionFailed
from aurora_sentinel.domain.escalation import AlertRequest
from aurora_sentinel.domain.zone import LocationContext, ZoneRef
from aurora_sentinel.transport.http import HttpAlertTransport, alert_payload, parse_zone


def _request(location: LocationContext | None = None, kind: TriggerKind = TriggerKind.AUTO) -> AlertRequest:
    return AlertRequest(
        arming_id=uuid4(),
        score=71.234,
        factors={"audio": 26.254, "motion": 5.0, "time": 20.0, "location": 20.0},
        location=location,
        trigger_kind=kind,
    )


def _transport(handler) -> HttpAlertTransport:
    client = httpx.AsyncClient(base_url="http://backend.test/api", transport=httpx.MockTransport(handler))
    return HttpAlertTransport("http://backend.test/api", client=client)


_ZONE_RECORD = {
    "id": 7,
    "name": "North Gate",
    "type": "high",
    "polygon": {
        "type": "Polygon",
        "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]],
    },
}


class TestPayload:
    def test_auto_alert_with_zone(self) -> None:
        loc = LocationContext(
            lat=12.5, lng=77.1,
            matched_zone=ZoneRef(id="7", name="North Gate", kind=ZoneKind.HIGH),
            is_normal_zone=False,
        )
        payload = alert_payload(_request(loc))
        assert payload["risk_score"] == 71.23
        assert payload["trigger_type"] == "ai"
        assert payload["factors"]["audio"] == 26.25
        assert payload["location"] == {"lat": 12.5, "lng": 77.1, "zone": "North Gate"}

    def test_manual_alert_without_location(self) -> None:
        payload = alert_payload(_request(kind=TriggerKind.MANUAL))
        assert payload["trigger_type"] == "manual"
        assert "location" not in payload


class TestSubmitAlert:
    @pytest.mark.asyncio
    async def test_posts_to_sos_and_returns_id(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 42})

        transport = _transport(handler)
        assert await transport.submit_alert(_request()) == "42"
        assert seen["path"] == "/api/sos"
        assert seen["body"]["trigger_type"] == "ai"
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_server_error_becomes_submission_failed(self) -> None:
        transport = _transport(lambda request: httpx.Response(503))
        with pytest.raises(SubmissionFailed, match="503"):
            await transport.submit_alert(_request())

    @pytest.mark.asyncio
    async def test_connect_error_becomes_submission_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(SubmissionFailed, match="connection refused"):
            await _transport(handler).submit_alert(_request())

    @pytest.mark.asyncio
    async def test_missing_id_is_a_failure(self) -> None:
        transport = _transport(lambda request: httpx.Response(200, json={"ok": True}))
        with pytest.raises(SubmissionFailed, match="no alert id"):
            await transport.submit_alert(_request())

    @pytest.mark.asyncio
    async def test_non_json_body_is_a_failure(self) -> None:
        transport = _transport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(SubmissionFailed):
            await transport.submit_alert(_request())


class TestFetchZones:
    def test_parse_zone_reads_outer_ring(self) -> None:
        zone = parse_zone(_ZONE_RECORD)
        assert zone.id == "7"
        assert zone.kind == ZoneKind.HIGH
        assert zone.polygon[2] == (1, 1)

    def test_parse_zone_without_coordinates(self) -> None:
        with pytest.raises(ValueError):
            parse_zone({"id": 1, "type": "low", "polygon": {"coordinates": []}})

    @pytest.mark.asyncio
    async def test_malformed_records_are_skipped(self) -> None:
        records = [_ZONE_RECORD, {"id": 8, "type": "medium", "polygon": _ZONE_RECORD["polygon"]}, {"id": 9}]

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/risk-zones"
            return httpx.Response(200, json=records)

        zones = await _transport(handler).fetch_zones()
        assert [z.id for z in zones] == ["7"]

    @pytest.mark.asyncio
    async def test_non_list_body_is_a_failure(self) -> None:
        transport = _transport(lambda request: httpx.Response(200, json={"zones": []}))
        with pytest.raises(SubmissionFailed, match="not a list"):
            await transport.fetch_zones()
