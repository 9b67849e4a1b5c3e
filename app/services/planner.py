import logging

from app.exceptions.custom import MalformedResponseError
from app.mappers.plan_parser import default_plan, parse_or_default
from app.schemas.plan import CallPlan
from app.services.claude import ClaudeService

logger = logging.getLogger(__name__)

SLOT_HINTS = ("target", "phone", "when", "count", "account", "callback", "notes")

_SYSTEM_PROMPT = (
    "You are the pre-call planner for a phone agent.\n"
    "Read the user's natural request and produce a JSON object with:\n"
    "1. intent: a short one-liner the agent will open with (what outcome to achieve).\n"
    "2. slots: an object of extracted information needed to complete the call "
    f"({', '.join(SLOT_HINTS)}, etc.). Include only what is relevant; "
    "you may add new keys as needed. Values are strings.\n"
    "3. required: array of slot keys that MUST be known before dialing to avoid stalling.\n"
    "4. ivr (optional): if the user described phone menu steps, "
    '{"autoNavigate": true, "sendDigits": ["2", "1", "0"], "languagePref": null}.\n'
    "5. safety (optional): "
    '{"emergency": true, "warn": "Emergency calling policies vary."} '
    'if the user describes an emergency (e.g., "call 911").\n\n'
    'Do NOT invent phone numbers; if unknown, leave phone empty and add "phone" to required.\n'
    "Keep outputs concise and grounded in the user's text. "
    "Respond ONLY with valid JSON, no markdown or extra explanation."
)


class PlannerService:
    def __init__(self, claude: ClaudeService | None):
        self._claude = claude

    async def plan(self, natural: str) -> CallPlan:
        """Turn free text into a CallPlan. Never raises."""
        if self._claude is None:
            logger.warning("Anthropic not configured, returning default plan")
            return default_plan()

        try:
            raw = await self._claude.analyze(
                _SYSTEM_PROMPT, f"User request: {natural or ''}"
            )
            if raw is None:
                raise MalformedResponseError("Planner returned no parsable JSON object")
        except Exception:
            logger.exception("Planning failed, returning default plan")
            return default_plan()

        plan = parse_or_default(raw)
        logger.info(
            "Planned call: intent=%r slots=%s required=%s",
            plan.intent, sorted(plan.slots), plan.required,
        )
        return plan
