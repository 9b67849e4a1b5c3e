from app.schemas.plan import CallPlan, MissingFieldPrompt


def _phone_prompt(plan: CallPlan) -> MissingFieldPrompt:
    target = (plan.slots or {}).get("target") or "this contact"
    return MissingFieldPrompt(
        field="phone",
        label="Phone Number",
        placeholder="e.g., +1-555-123-4567 or 911",
        description=f"To call {target}, please provide the phone number:",
    )


_FIXED_PROMPTS: dict[str, MissingFieldPrompt] = {
    "target": MissingFieldPrompt(
        field="target",
        label="Who to Call",
        placeholder="e.g., Pizza Palace, Dr. Smith, 911",
        description="Who would you like to call?",
    ),
    "when": MissingFieldPrompt(
        field="when",
        label="When to Call",
        placeholder="e.g., now, tomorrow 2pm, tonight",
        description="When should this call be made?",
    ),
    "account": MissingFieldPrompt(
        field="account",
        label="Account Number",
        placeholder="e.g., Account #12345",
        description="Please provide your account number or reference:",
    ),
    "callback": MissingFieldPrompt(
        field="callback",
        label="Callback Number",
        placeholder="e.g., +1-555-987-6543",
        description="What number should they call you back at?",
    ),
}


def get_field_prompt(field: str, plan: CallPlan) -> MissingFieldPrompt:
    if field == "phone":
        return _phone_prompt(plan)
    fixed = _FIXED_PROMPTS.get(field)
    if fixed is not None:
        return fixed.model_copy()
    return MissingFieldPrompt(
        field=field,
        label=field[:1].upper() + field[1:],
        placeholder=f"Please provide {field}",
        description=f"Please provide the {field}:",
    )
