import logging
from html import escape

import httpx

from app.exceptions.custom import TwilioError, UnconfirmedCallError
from app.schemas.twilio import TwilioCallResponse

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.twilio.com/2010-04-01"

DEFAULT_GREETING = "Hello, this is an automated call."
NO_SID_MESSAGE = "Twilio accepted the request but returned no call sid."


def calls_url(account_sid: str) -> str:
    return f"{API_BASE_URL}/Accounts/{account_sid}/Calls.json"


def build_say_twiml(text: str | None) -> str:
    return f"<Response><Say>{escape(text or DEFAULT_GREETING)}</Say></Response>"


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    text = resp.text.strip()
    return text or f"Twilio request failed ({resp.status_code})"


def _parse_call_body(resp: httpx.Response) -> TwilioCallResponse:
    try:
        data = resp.json()
    except ValueError:
        data = None

    if not isinstance(data, dict):
        # Form-style body: "sid=CA123&status=queued"
        data = {}
        for part in resp.text.strip().split("&"):
            key, sep, value = part.partition("=")
            if sep:
                data[key.strip().lower()] = value.strip()

    try:
        return TwilioCallResponse.model_validate(data)
    except ValueError:
        logger.warning("Unparsable Twilio call body: %.200s", resp.text)
        return TwilioCallResponse()


class TwilioService:
    def __init__(
        self,
        client: httpx.AsyncClient,
        account_sid: str,
        auth_token: str,
    ):
        self._client = client
        self._account_sid = account_sid
        self._auth = (account_sid, auth_token)

    @property
    def account_sid(self) -> str:
        return self._account_sid

    async def create_call(
        self,
        to_number: str,
        from_number: str,
        url: str | None = None,
        twiml: str | None = None,
        send_digits: str | None = None,
    ) -> TwilioCallResponse:
        data: dict[str, str] = {"To": to_number, "From": from_number}
        if url:
            data["Url"] = url
        else:
            data["Twiml"] = twiml or build_say_twiml(None)
        if send_digits:
            data["SendDigits"] = send_digits

        logger.info("Creating Twilio call to %s from %s", to_number, from_number)
        resp = await self._client.post(
            calls_url(self._account_sid), data=data, auth=self._auth
        )

        if resp.status_code >= 400:
            raise TwilioError(_error_message(resp), status_code=resp.status_code)

        call = _parse_call_body(resp)
        if not (call.sid or "").strip():
            raise UnconfirmedCallError(NO_SID_MESSAGE, status_code=502)
        logger.info("Twilio call created: sid=%s status=%s", call.sid, call.status)
        return call
