import re

EMERGENCY_NUMBER = "911"

_NON_DIGIT_RE = re.compile(r"\D")


def normalize_phone(raw: str | None) -> str | None:
    """Map a user-entered phone string to a dialable E.164-style string.

    Returns None when the input cannot be normalized (empty, or fewer than
    ten digits). "911" is passed through untouched.
    """
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    if value == EMERGENCY_NUMBER:
        return value

    digits = _NON_DIGIT_RE.sub("", value)
    if len(digits) < 10:
        return None

    if value.startswith("+"):
        return f"+{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"+1{digits}"
    return f"+{digits}"
