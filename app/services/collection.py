"""Field collection state machine.

A session walks idle -> awaiting_field(f) -> ... -> submitting -> idle.
Required slots that the plan leaves empty are asked for one at a time, in
`required` order, and the call is placed once none remain. The session
object is plain data; this service only moves it between states.
"""

import logging

from app.exceptions.custom import UnconfirmedCallError, ValidationError
from app.mappers.call_status import CANCELLED_STATUS, DIALING_STATUS, build_call_status
from app.mappers.field_prompts import get_field_prompt
from app.mappers.slot_merger import PHONE_SLOT, merge_slots
from app.schemas.plan import CallPlan, MissingFieldPrompt
from app.schemas.session import CollectionSession, CollectionState
from app.schemas.twilio import CallMetadata, CallResult
from app.services.call_placement import CallPlacementService

logger = logging.getLogger(__name__)


class FieldCollectionService:
    def __init__(self, placement: CallPlacementService):
        self._placement = placement

    async def start(self, session: CollectionSession, plan: CallPlan) -> CollectionSession:
        session.clear()
        session.result = None
        session.status = None

        merged = merge_slots(plan)
        session.plan = merged.plan
        if not merged.missing:
            logger.info("Session %s: plan complete, placing call", session.session_id)
            await self._place(session)
            return session

        session.pending_fields = merged.missing
        session.collected = {}
        session.current_field = merged.missing[0]
        session.state = CollectionState.awaiting_field
        logger.info(
            "Session %s: collecting %s", session.session_id, ", ".join(merged.missing)
        )
        return session

    def prompt(self, session: CollectionSession) -> MissingFieldPrompt | None:
        if session.state != CollectionState.awaiting_field or session.plan is None:
            return None
        return get_field_prompt(session.current_field, session.plan)

    async def submit_field(self, session: CollectionSession, value: str | None) -> CollectionSession:
        if session.state != CollectionState.awaiting_field or session.current_field is None:
            raise ValidationError("no-active-field", "No field is waiting for a value.")

        answer = (value or "").strip()
        if not answer:
            raise ValidationError("empty-field", "Please provide the required information.")

        session.collected = {**session.collected, session.current_field: answer}
        remaining = [f for f in session.pending_fields if f not in session.collected]

        if remaining:
            session.current_field = remaining[0]
            return session

        session.current_field = None
        await self._place(session)
        return session

    def cancel(self, session: CollectionSession) -> CollectionSession:
        if session.state == CollectionState.submitting:
            raise ValidationError("nothing-to-cancel", "A call is already being placed.")
        if session.plan is None:
            raise ValidationError("nothing-to-cancel", "There is no collection to cancel.")

        logger.info("Session %s: collection cancelled", session.session_id)
        session.clear()
        session.result = None
        session.status = CANCELLED_STATUS
        return session

    async def retry(self, session: CollectionSession) -> CollectionSession:
        """Place the call again after a failed attempt, reusing collected answers."""
        failed = session.result is not None and not session.result.ok
        if session.state != CollectionState.idle or session.plan is None or not failed:
            raise ValidationError("nothing-to-retry", "There is no failed call to retry.")
        if session.result.status == UnconfirmedCallError.code:
            # Twilio accepted the last request; dialing again could ring twice
            raise ValidationError(
                "unconfirmed-call", "The last call may already be ringing; check Twilio before retrying."
            )
        await self._place(session)
        return session

    async def _place(self, session: CollectionSession) -> CallResult:
        session.state = CollectionState.submitting
        session.status = DIALING_STATUS

        merged = merge_slots(session.plan, session.collected)
        plan = merged.plan
        result = await self._placement.place_call(
            plan.slots.get(PHONE_SLOT),
            metadata=CallMetadata(
                intent=plan.intent,
                send_digits=plan.ivr.send_digits,
            ),
        )

        session.result = result
        session.status = build_call_status(result, plan)
        if result.ok:
            logger.info("Session %s: call placed, sid=%s", session.session_id, result.sid)
            session.clear()
        else:
            # Keep plan and answers so the user can fix config or retry
            logger.warning("Session %s: call failed: %s", session.session_id, result.error)
            session.state = CollectionState.idle
            session.current_field = None
        return result
