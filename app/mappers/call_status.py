from app.schemas.plan import CallPlan
from app.schemas.twilio import CallResult

DIALING_STATUS = "Dialing via Twilio…"
CANCELLED_STATUS = "Collection cancelled. You can start a new request."


def build_call_status(result: CallResult, plan: CallPlan | None = None) -> str:
    """One-line summary of a placement attempt for the user."""
    if not result.ok:
        if result.error:
            return result.error
        return f"Call failed ({result.http_status})"

    slots = plan.slots if plan else {}
    target = slots.get("target")
    phone = result.to or slots.get("phone") or ""

    message = "Call queued"
    if target:
        message += f" to {target}"
    if phone:
        message += f" at {phone}"
    message += "."
    if result.sid:
        message += f" SID {result.sid}"

    if plan and plan.safety.emergency and plan.safety.warn:
        message += f" {plan.safety.warn}"
    return message


def progress(pending_fields: list[str], collected: dict[str, str]) -> tuple[int, int]:
    """(current step, total steps) for the field collection form."""
    total = len(pending_fields)
    answered = sum(1 for f in pending_fields if f in collected)
    return min(answered + 1, total), total
