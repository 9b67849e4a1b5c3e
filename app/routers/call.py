import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.dependencies import CallPlacementDep
from app.schemas.twilio import CallMetadata, CallRequest, CallResult
from app.services.call_placement import (
    INVALID_REQUEST,
    MISSING_CREDENTIALS,
    rejected_result,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _respond(result: CallResult) -> JSONResponse:
    return JSONResponse(status_code=result.http_status, content=result.model_dump(by_alias=True))


@router.post("/call", response_model=CallResult)
async def place_call(request: Request, service: CallPlacementDep) -> JSONResponse:
    # Credentials are reported before anything about the body
    if not service.configured:
        logger.error("POST /call with no Twilio account configured")
        return _respond(rejected_result(MISSING_CREDENTIALS))

    try:
        body = CallRequest.model_validate(await request.json())
    except ValueError as exc:
        logger.warning("Invalid /call body: %s", exc)
        return _respond(rejected_result(INVALID_REQUEST))

    result = await service.place_call(
        body.to,
        from_number=body.from_,
        url=body.url,
        metadata=CallMetadata(intent=body.intent, send_digits=body.send_digits),
    )
    return _respond(result)
