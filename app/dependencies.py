from typing import Annotated

from fastapi import Depends, Request

from app.services.call_placement import CallPlacementService
from app.services.collection import FieldCollectionService
from app.services.planner import PlannerService
from app.sessions import SessionStore


def get_planner_service(request: Request) -> PlannerService:
    return request.app.state.planner_service


def get_call_placement_service(request: Request) -> CallPlacementService:
    return request.app.state.call_placement_service


def get_collection_service(request: Request) -> FieldCollectionService:
    return request.app.state.collection_service


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


PlannerDep = Annotated[PlannerService, Depends(get_planner_service)]
CallPlacementDep = Annotated[CallPlacementService, Depends(get_call_placement_service)]
CollectionDep = Annotated[FieldCollectionService, Depends(get_collection_service)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
