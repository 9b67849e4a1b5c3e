from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from app.schemas.plan import CallPlan, MissingFieldPrompt
from app.schemas.twilio import CallResult


class CollectionState(StrEnum):
    idle = "idle"
    awaiting_field = "awaiting_field"
    submitting = "submitting"


class CollectionSession(BaseModel):
    session_id: str
    created_at: datetime
    touched_at: datetime | None = None
    state: CollectionState = CollectionState.idle
    plan: CallPlan | None = None
    pending_fields: list[str] = []
    collected: dict[str, str] = {}
    current_field: str | None = None
    status: str | None = None
    result: CallResult | None = None

    def clear(self) -> None:
        self.state = CollectionState.idle
        self.plan = None
        self.pending_fields = []
        self.collected = {}
        self.current_field = None


class StartSessionRequest(BaseModel):
    natural: str | None = None
    plan: dict[str, Any] | None = None


class SubmitFieldRequest(BaseModel):
    value: str = ""


class SessionResponse(BaseModel):
    session_id: str
    state: CollectionState
    plan: CallPlan | None = None
    pending_fields: list[str] = []
    collected: dict[str, str] = {}
    prompt: MissingFieldPrompt | None = None
    step: int | None = None
    total: int | None = None
    status: str | None = None
    result: CallResult | None = None
