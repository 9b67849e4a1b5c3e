import logging

from app.exceptions.custom import ConfigurationError, TwilioError, ValidationError
from app.mappers.phone import normalize_phone
from app.schemas.twilio import CallMetadata, CallResult
from app.services.twilio import TwilioService, build_say_twiml

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "missing-credentials"
MISSING_DESTINATION = "missing-destination"
MISSING_SOURCE = "missing-source"
INVALID_DESTINATION = "invalid-destination"
INVALID_REQUEST = "invalid-request"

_STATUS_CODES = {
    MISSING_CREDENTIALS: 500,
    MISSING_DESTINATION: 400,
    MISSING_SOURCE: 400,
    INVALID_DESTINATION: 400,
    INVALID_REQUEST: 400,
}

DEFAULT_CALL_STATUS = "queued"


def rejected_result(code: str, to: str | None = None, from_number: str | None = None) -> CallResult:
    return CallResult(
        sid=None,
        status=code,
        to=to,
        from_=from_number,
        error=code,
        http_status=_STATUS_CODES[code],
    )


class CallPlacementService:
    def __init__(
        self,
        twilio: TwilioService | None,
        default_from: str = "",
        default_url: str = "",
    ):
        self._twilio = twilio
        self._default_from = default_from
        self._default_url = default_url

    async def place_call(
        self,
        to: str | None,
        from_number: str | None = None,
        url: str | None = None,
        metadata: CallMetadata | None = None,
    ) -> CallResult:
        """Validate and place one outbound call. Never raises."""
        to = (to or "").strip()
        source: str | None = None
        try:
            destination = self._validate_destination(to)
            source = self._resolve_source(from_number)
            return await self._submit(destination, source, url, metadata)
        except ConfigurationError as exc:
            logger.error("Call placement not configured: %s", exc.message)
            return rejected_result(exc.code, to=to or None)
        except ValidationError as exc:
            logger.info("Call placement rejected: %s", exc.code)
            return rejected_result(exc.code, to=to or None, from_number=source)
        except TwilioError as exc:
            logger.error("Twilio error: %s (status=%s)", exc.message, exc.status_code)
            return CallResult(
                sid=None,
                status=exc.code,
                to=to,
                from_=source,
                error=exc.message or "Unable to place call.",
                http_status=exc.status_code or 502,
            )
        except Exception:
            logger.exception("Call placement to %s failed", to)
            return rejected_result(INVALID_REQUEST, to=to or None, from_number=source)

    @property
    def configured(self) -> bool:
        return self._twilio is not None and bool(self._twilio.account_sid)

    def _validate_destination(self, to: str) -> str:
        # Credentials are checked before anything about the request itself
        if not self.configured:
            raise ConfigurationError(MISSING_CREDENTIALS, "Twilio account is not configured.")
        if not to:
            raise ValidationError(MISSING_DESTINATION, "Destination phone required.")
        destination = normalize_phone(to)
        if destination is None:
            raise ValidationError(INVALID_DESTINATION, f"Cannot dial {to!r}.")
        return destination

    def _resolve_source(self, from_number: str | None) -> str:
        source = (from_number or "").strip() or self._default_from.strip()
        if not source:
            raise ValidationError(MISSING_SOURCE, "Caller id required.")
        return source

    async def _submit(
        self,
        destination: str,
        source: str,
        url: str | None,
        metadata: CallMetadata | None,
    ) -> CallResult:
        metadata = metadata or CallMetadata()
        voice_url = (url or "").strip() or self._default_url.strip() or None
        digits = "w".join(d.strip() for d in metadata.send_digits if d.strip())

        call = await self._twilio.create_call(
            destination,
            source,
            url=voice_url,
            twiml=None if voice_url else build_say_twiml(metadata.intent),
            send_digits=digits or None,
        )
        return CallResult(
            sid=call.sid,
            status=call.status or DEFAULT_CALL_STATUS,
            to=call.to or destination,
            from_=call.from_ or source,
        )
