from pydantic import BaseModel, ConfigDict, Field


class CallRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str = ""
    from_: str | None = Field(None, alias="from")
    url: str | None = None
    intent: str | None = None
    send_digits: list[str] = Field(default_factory=list, alias="sendDigits")


class CallMetadata(BaseModel):
    intent: str | None = None
    send_digits: list[str] = []


class TwilioCallResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sid: str | None = None
    status: str | None = None
    to: str | None = None
    from_: str | None = Field(None, alias="from")


class CallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sid: str | None = None
    status: str
    to: str | None = None
    from_: str | None = Field(None, alias="from")
    error: str | None = None
    http_status: int = Field(200, exclude=True)

    @property
    def ok(self) -> bool:
        return self.sid is not None and self.error is None
