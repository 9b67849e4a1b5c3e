"""Coerce planner output into a CallPlan, substituting defaults field by field."""

import logging
from typing import Any

from app.schemas.plan import CallPlan, IvrOptions, SafetyInfo

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "Make the requested call and achieve the stated outcome."
DEFAULT_REQUIRED = ("target", "phone")

DEFAULT_PLAN = CallPlan(
    intent=DEFAULT_INTENT,
    slots={},
    required=list(DEFAULT_REQUIRED),
    ivr=IvrOptions(auto_navigate=True, send_digits=[]),
    safety=SafetyInfo(emergency=False, warn=None),
)


def default_plan() -> CallPlan:
    return DEFAULT_PLAN.model_copy(deep=True)


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _parse_slots(raw: Any) -> dict[str, str | None]:
    if not isinstance(raw, dict):
        return {}
    slots: dict[str, str | None] = {}
    for key, value in raw.items():
        if value is not None and _as_text(value) is None:
            # Nested objects/arrays have no slot representation
            continue
        slots[str(key)] = _as_text(value)
    return slots


def _parse_required(raw: Any, fallback: tuple[str, ...]) -> list[str]:
    if not isinstance(raw, list):
        return list(fallback)
    required: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        key = item.strip()
        if key and key not in required:
            required.append(key)
    return required


def _parse_ivr(raw: Any) -> IvrOptions:
    if not isinstance(raw, dict):
        return IvrOptions()
    auto = raw.get("autoNavigate")
    digits = raw.get("sendDigits")
    language = raw.get("languagePref")
    return IvrOptions(
        auto_navigate=auto if isinstance(auto, bool) else True,
        send_digits=[
            text for text in (_as_text(d) for d in digits) if text
        ] if isinstance(digits, list) else [],
        language_pref=language if isinstance(language, str) and language.strip() else None,
    )


def _parse_safety(raw: Any) -> SafetyInfo:
    if not isinstance(raw, dict):
        return SafetyInfo()
    emergency = raw.get("emergency")
    warn = raw.get("warn")
    return SafetyInfo(
        emergency=emergency if isinstance(emergency, bool) else False,
        warn=warn if isinstance(warn, str) and warn.strip() else None,
    )


def parse_or_default(raw: Any, default_required: tuple[str, ...] = DEFAULT_REQUIRED) -> CallPlan:
    """Build a CallPlan from an untrusted planner payload.

    Anything that is not a JSON object yields the default plan. Otherwise
    each field is kept when well-formed and replaced by its default when not;
    a missing or malformed `required` becomes `default_required`.
    """
    if not isinstance(raw, dict):
        logger.warning("Planner payload is not an object, using default plan")
        return default_plan()

    intent = raw.get("intent")
    return CallPlan(
        intent=intent.strip() if isinstance(intent, str) and intent.strip() else DEFAULT_INTENT,
        slots=_parse_slots(raw.get("slots")),
        required=_parse_required(raw.get("required"), default_required),
        ivr=_parse_ivr(raw.get("ivr")),
        safety=_parse_safety(raw.get("safety")),
    )


def parse_client_plan(raw: Any) -> CallPlan:
    """Coerce a plan sent by a client; missing collections are empty."""
    return parse_or_default(raw, default_required=())
