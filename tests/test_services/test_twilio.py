from urllib.parse import parse_qs

import httpx
import pytest
import respx
from httpx import Response

from app.exceptions.custom import TwilioError, UnconfirmedCallError
from app.services.twilio import NO_SID_MESSAGE, TwilioService, build_say_twiml, calls_url

CALLS_URL = "https://api.twilio.com/2010-04-01/Accounts/AC123/Calls.json"


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def test_calls_url():
    assert calls_url("AC123") == CALLS_URL


def test_build_say_twiml_escapes():
    assert build_say_twiml("Tom & Jerry") == "<Response><Say>Tom &amp; Jerry</Say></Response>"


@respx.mock
async def test_create_call_success():
    route = respx.post(CALLS_URL).mock(
        return_value=Response(
            201,
            json={"sid": "CA111", "status": "queued", "to": "+15551234567", "from": "+15550000000"},
        )
    )

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        call = await service.create_call(
            "+15551234567", "+15550000000", url="https://example.com/voice.xml"
        )

    assert call.sid == "CA111"
    assert call.status == "queued"
    assert call.from_ == "+15550000000"

    sent = route.calls[0].request
    assert _form(sent) == {
        "To": "+15551234567",
        "From": "+15550000000",
        "Url": "https://example.com/voice.xml",
    }
    assert sent.headers["authorization"].startswith("Basic ")


@respx.mock
async def test_create_call_with_twiml_and_digits():
    route = respx.post(CALLS_URL).mock(
        return_value=Response(201, json={"sid": "CA222", "status": "queued"})
    )

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        await service.create_call(
            "+15551234567",
            "+15550000000",
            twiml="<Response><Say>Hi</Say></Response>",
            send_digits="2w1",
        )

    form = _form(route.calls[0].request)
    assert "Url" not in form
    assert form["Twiml"] == "<Response><Say>Hi</Say></Response>"
    assert form["SendDigits"] == "2w1"


@respx.mock
async def test_create_call_plain_text_body():
    respx.post(CALLS_URL).mock(return_value=Response(200, text="sid=CA333&status=ringing"))

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        call = await service.create_call("+15551234567", "+15550000000")

    assert call.sid == "CA333"
    assert call.status == "ringing"


@pytest.mark.parametrize(
    "body",
    [
        Response(200, text="CA444"),
        Response(200, text="<html><body>OK</body></html>"),
        Response(201, json={"status": "queued"}),
        Response(201, json={"sid": "  ", "status": "queued"}),
    ],
)
@respx.mock
async def test_create_call_without_sid_is_unconfirmed(body):
    respx.post(CALLS_URL).mock(return_value=body)

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        with pytest.raises(UnconfirmedCallError) as exc_info:
            await service.create_call("+15551234567", "+15550000000")

    assert exc_info.value.code == "twilio-unconfirmed"
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == NO_SID_MESSAGE


@respx.mock
async def test_create_call_error_json_message():
    respx.post(CALLS_URL).mock(
        return_value=Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})
    )

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        with pytest.raises(TwilioError) as exc_info:
            await service.create_call("+15551234567", "+15550000000")

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid 'To' Phone Number"


@respx.mock
async def test_create_call_error_plain_text():
    respx.post(CALLS_URL).mock(return_value=Response(503, text="Service Unavailable"))

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        with pytest.raises(TwilioError) as exc_info:
            await service.create_call("+15551234567", "+15550000000")

    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Service Unavailable"


@respx.mock
async def test_create_call_error_empty_body():
    respx.post(CALLS_URL).mock(return_value=Response(401))

    async with httpx.AsyncClient() as client:
        service = TwilioService(client, "AC123", "token")
        with pytest.raises(TwilioError) as exc_info:
            await service.create_call("+15551234567", "+15550000000")

    assert exc_info.value.message == "Twilio request failed (401)"
