from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IvrOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auto_navigate: bool = Field(True, alias="autoNavigate")
    send_digits: list[str] = Field(default_factory=list, alias="sendDigits")
    language_pref: str | None = Field(None, alias="languagePref")


class SafetyInfo(BaseModel):
    emergency: bool = False
    warn: str | None = None


class CallPlan(BaseModel):
    intent: str = ""
    slots: dict[str, str | None] = {}
    required: list[str] = []
    ivr: IvrOptions = Field(default_factory=IvrOptions)
    safety: SafetyInfo = Field(default_factory=SafetyInfo)


class MissingFieldPrompt(BaseModel):
    field: str
    label: str
    placeholder: str
    description: str


class MergeResult(BaseModel):
    plan: CallPlan
    missing: list[str] = []


class PlanRequest(BaseModel):
    natural: str = ""


class MergeRequest(BaseModel):
    plan: dict[str, Any] | None = None
    overrides: dict[str, str] = {}
