import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import SessionBusyError, SessionNotFoundError, ValidationError
from app.exceptions.handlers import (
    session_busy_handler,
    session_not_found_handler,
    validation_error_handler,
)
from app.routers.call import router as call_router
from app.routers.plan import router as plan_router
from app.routers.sessions import router as sessions_router
from app.services.call_placement import CallPlacementService
from app.services.claude import ClaudeService
from app.services.collection import FieldCollectionService
from app.services.planner import PlannerService
from app.services.twilio import TwilioService
from app.sessions import SessionStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=30.0) as client:
        # Missing credentials surface per call, not at startup
        twilio: TwilioService | None = None
        if settings.twilio_account_sid:
            twilio = TwilioService(
                client, settings.twilio_account_sid, settings.twilio_auth_token
            )

        claude: ClaudeService | None = None
        if settings.anthropic_api_key:
            claude = ClaudeService(settings.anthropic_api_key, settings.anthropic_model)

        placement = CallPlacementService(
            twilio,
            default_from=settings.twilio_from_number,
            default_url=settings.twilio_voice_url,
        )

        app.state.planner_service = PlannerService(claude)
        app.state.call_placement_service = placement
        app.state.collection_service = FieldCollectionService(placement)
        app.state.session_store = SessionStore(max_sessions=settings.max_sessions)

        yield


app = FastAPI(title="Call Planner", lifespan=lifespan)

app.add_exception_handler(ValidationError, validation_error_handler)
app.add_exception_handler(SessionNotFoundError, session_not_found_handler)
app.add_exception_handler(SessionBusyError, session_busy_handler)

app.include_router(plan_router)
app.include_router(call_router)
app.include_router(sessions_router)
