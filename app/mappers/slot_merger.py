import logging
from collections.abc import Mapping

from app.mappers.phone import normalize_phone
from app.schemas.plan import CallPlan, MergeResult

logger = logging.getLogger(__name__)

PHONE_SLOT = "phone"


def is_present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def find_missing(plan: CallPlan) -> list[str]:
    """Required slot keys with no usable value, in `required` order."""
    missing: list[str] = []
    for field in plan.required or []:
        if field in missing:
            continue
        if not is_present((plan.slots or {}).get(field)):
            missing.append(field)
    return missing


def merge_slots(
    plan: CallPlan,
    overrides: Mapping[str, str | None] | None = None,
) -> MergeResult:
    """Apply user overrides on top of the planner's slots.

    Overrides win on key collision. The phone slot is normalized when
    possible and left as typed otherwise. The input plan is not mutated.
    """
    slots: dict[str, str | None] = dict(plan.slots or {})
    slots.update(overrides or {})

    phone = slots.get(PHONE_SLOT)
    if is_present(phone):
        normalized = normalize_phone(phone)
        if normalized is not None:
            slots[PHONE_SLOT] = normalized
        else:
            logger.warning("Could not normalize phone slot %r, keeping raw value", phone)

    merged = plan.model_copy(
        update={"slots": slots, "required": list(plan.required or [])}, deep=True
    )
    return MergeResult(plan=merged, missing=find_missing(merged))
