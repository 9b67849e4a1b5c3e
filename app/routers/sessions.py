import logging

from fastapi import APIRouter

from app.dependencies import CollectionDep, PlannerDep, SessionStoreDep
from app.mappers.call_status import progress
from app.mappers.plan_parser import parse_client_plan
from app.schemas.session import (
    CollectionSession,
    CollectionState,
    SessionResponse,
    StartSessionRequest,
    SubmitFieldRequest,
)
from app.services.collection import FieldCollectionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions")


def _to_response(session: CollectionSession, service: FieldCollectionService) -> SessionResponse:
    step = total = None
    if session.state == CollectionState.awaiting_field:
        step, total = progress(session.pending_fields, session.collected)
    return SessionResponse(
        session_id=session.session_id,
        state=session.state,
        plan=session.plan,
        pending_fields=session.pending_fields,
        collected=session.collected,
        prompt=service.prompt(session),
        step=step,
        total=total,
        status=session.status,
        result=session.result,
    )


@router.post("", response_model=SessionResponse, status_code=201)
async def start_session(
    service: CollectionDep,
    planner: PlannerDep,
    store: SessionStoreDep,
    request: StartSessionRequest | None = None,
) -> SessionResponse:
    request = request or StartSessionRequest()
    session = store.create()
    async with store.acquire(session.session_id) as session:
        if request.plan is not None:
            plan = parse_client_plan(request.plan)
        else:
            plan = await planner.plan(request.natural or "")
        await service.start(session, plan)
        return _to_response(session, service)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    service: CollectionDep,
    store: SessionStoreDep,
) -> SessionResponse:
    return _to_response(store.get(session_id), service)


@router.post("/{session_id}/fields", response_model=SessionResponse)
async def submit_field(
    session_id: str,
    request: SubmitFieldRequest,
    service: CollectionDep,
    store: SessionStoreDep,
) -> SessionResponse:
    async with store.acquire(session_id) as session:
        await service.submit_field(session, request.value)
        return _to_response(session, service)


@router.post("/{session_id}/cancel", response_model=SessionResponse)
async def cancel_session(
    session_id: str,
    service: CollectionDep,
    store: SessionStoreDep,
) -> SessionResponse:
    async with store.acquire(session_id) as session:
        service.cancel(session)
        return _to_response(session, service)


@router.post("/{session_id}/retry", response_model=SessionResponse)
async def retry_session(
    session_id: str,
    service: CollectionDep,
    store: SessionStoreDep,
) -> SessionResponse:
    async with store.acquire(session_id) as session:
        await service.retry(session)
        return _to_response(session, service)
