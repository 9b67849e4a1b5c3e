from unittest.mock import AsyncMock
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from httpx import Response

from app.schemas.twilio import CallMetadata
from app.services.call_placement import CallPlacementService
from app.services.twilio import NO_SID_MESSAGE, TwilioService

CALLS_URL = "https://api.twilio.com/2010-04-01/Accounts/AC123/Calls.json"


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


def _service(client, default_from="+15550000000", default_url="https://example.com/voice.xml"):
    twilio = TwilioService(client, "AC123", "token")
    return CallPlacementService(twilio, default_from=default_from, default_url=default_url)


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


async def test_missing_credentials_checked_first():
    service = CallPlacementService(None, default_from="", default_url="")

    result = await service.place_call("")

    assert result.error == "missing-credentials"
    assert result.status == "missing-credentials"
    assert result.sid is None
    assert result.http_status == 500


async def test_missing_credentials_when_sid_empty(http_client):
    twilio = TwilioService(http_client, "", "token")
    service = CallPlacementService(twilio, default_from="+15550000000")

    result = await service.place_call("+15551234567")

    assert result.error == "missing-credentials"


async def test_missing_destination(http_client):
    result = await _service(http_client).place_call("   ")

    assert result.error == "missing-destination"
    assert result.http_status == 400


async def test_invalid_destination(http_client):
    result = await _service(http_client).place_call("123")

    assert result.error == "invalid-destination"
    assert result.to == "123"
    assert result.http_status == 400


async def test_missing_source(http_client):
    result = await _service(http_client, default_from="").place_call("+15551234567")

    assert result.error == "missing-source"
    assert result.http_status == 400


@respx.mock
async def test_success_uses_defaults(http_client):
    route = respx.post(CALLS_URL).mock(
        return_value=Response(201, json={"sid": "CA1", "status": "queued"})
    )

    result = await _service(http_client).place_call("555-123-4567")

    assert result.ok
    assert result.sid == "CA1"
    assert result.status == "queued"
    assert result.to == "+15551234567"
    assert result.from_ == "+15550000000"
    assert result.error is None
    assert result.http_status == 200

    form = _form(route.calls[0].request)
    assert form["To"] == "+15551234567"
    assert form["From"] == "+15550000000"
    assert form["Url"] == "https://example.com/voice.xml"


@respx.mock
async def test_explicit_from_and_url_override_defaults(http_client):
    route = respx.post(CALLS_URL).mock(
        return_value=Response(201, json={"sid": "CA2", "status": "queued"})
    )

    result = await _service(http_client).place_call(
        "+15551234567", from_number="+15559999999", url="https://other.example/twiml"
    )

    form = _form(route.calls[0].request)
    assert form["From"] == "+15559999999"
    assert form["Url"] == "https://other.example/twiml"
    assert result.from_ == "+15559999999"


@respx.mock
async def test_status_defaults_to_queued(http_client):
    respx.post(CALLS_URL).mock(return_value=Response(201, json={"sid": "CA3"}))

    result = await _service(http_client).place_call("+15551234567")

    assert result.status == "queued"


@respx.mock
async def test_twiml_and_digits_from_metadata(http_client):
    route = respx.post(CALLS_URL).mock(
        return_value=Response(201, json={"sid": "CA4", "status": "queued"})
    )

    await _service(http_client, default_url="").place_call(
        "+15551234567",
        metadata=CallMetadata(intent="Check order status", send_digits=["2", "1", "0"]),
    )

    form = _form(route.calls[0].request)
    assert "Url" not in form
    assert form["Twiml"] == "<Response><Say>Check order status</Say></Response>"
    assert form["SendDigits"] == "2w1w0"


@respx.mock
async def test_emergency_number_dialed_as_is(http_client):
    route = respx.post(CALLS_URL).mock(
        return_value=Response(201, json={"sid": "CA5", "status": "queued"})
    )

    result = await _service(http_client).place_call("911")

    assert _form(route.calls[0].request)["To"] == "911"
    assert result.to == "911"


@respx.mock
async def test_provider_error_preserves_status(http_client):
    respx.post(CALLS_URL).mock(
        return_value=Response(400, json={"message": "Invalid 'To' Phone Number"})
    )

    result = await _service(http_client).place_call("+15551234567")

    assert result.sid is None
    assert result.status == "twilio-error"
    assert result.error == "Invalid 'To' Phone Number"
    assert result.http_status == 400


@respx.mock
async def test_network_failure_is_invalid_request(http_client):
    respx.post(CALLS_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    result = await _service(http_client).place_call("+15551234567")

    assert result.error == "invalid-request"
    assert result.http_status == 400
    assert not result.ok


async def test_unexpected_exception_is_invalid_request():
    twilio = AsyncMock(spec=TwilioService)
    twilio.account_sid = "AC123"
    twilio.create_call.side_effect = RuntimeError("boom")
    service = CallPlacementService(twilio, default_from="+15550000000")

    result = await service.place_call("+15551234567")

    assert result.error == "invalid-request"


@respx.mock
async def test_sidless_acceptance_is_unconfirmed(http_client):
    respx.post(CALLS_URL).mock(return_value=Response(200, text="<html><body>OK</body></html>"))

    result = await _service(http_client).place_call("+15551234567")

    assert result.sid is None
    assert result.status == "twilio-unconfirmed"
    assert result.error == NO_SID_MESSAGE
    assert result.http_status == 502
    assert not result.ok


async def test_configured_property(http_client):
    assert _service(http_client).configured
    assert not CallPlacementService(None).configured
    assert not CallPlacementService(TwilioService(http_client, "", "token")).configured
