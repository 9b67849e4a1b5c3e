import logging

from fastapi import APIRouter, Request

from app.dependencies import PlannerDep
from app.mappers.plan_parser import parse_client_plan
from app.mappers.slot_merger import merge_slots
from app.schemas.plan import CallPlan, MergeRequest, MergeResult, PlanRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/plan", response_model=CallPlan)
async def plan_call(request: Request, planner: PlannerDep) -> CallPlan:
    # Always 200: an unreadable body plans from empty text
    try:
        body = PlanRequest.model_validate(await request.json())
    except ValueError:
        logger.warning("Unreadable /plan body, planning from empty text")
        body = PlanRequest()
    return await planner.plan(body.natural)


@router.post("/merge", response_model=MergeResult)
async def merge_plan(request: MergeRequest) -> MergeResult:
    return merge_slots(parse_client_plan(request.plan or {}), request.overrides)
