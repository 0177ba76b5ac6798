"""
Company form validation.

Pure functions: nothing here raises or logs. ``validate_company_form``
collects every field error so the dashboard can mark all offending inputs
at once; ``validate_field`` checks a single input for live feedback while
the user types. Optional fields are only checked when they are non-empty.
"""

import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from investpro.schemas.common import FieldError, ValidationResult

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_REGEX = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)
PHONE_REGEX = re.compile(r"^\+?[1-9]\d{0,15}$")
_PHONE_NOISE = re.compile(r"[^\d+]")

NAME_MAX = 100
INDUSTRY_MAX = 100
EMAIL_MAX = 320
PHONE_MAX = 32
WEBSITE_MAX = 2048
DESCRIPTION_MAX = 1000
ADDRESS_MAX = 200
CATEGORY_MAX = 50

FormData = Union[Mapping[str, Any], BaseModel]


def validate_email(email: str) -> bool:
    return bool(EMAIL_REGEX.match(email.strip()))


def validate_url(url: str) -> bool:
    if not url.strip():
        return True
    return bool(URL_REGEX.match(url.strip()))


def validate_phone(phone: str) -> bool:
    """Accept any punctuation; only digits and a leading ``+`` are checked."""
    if not phone.strip():
        return True
    return bool(PHONE_REGEX.match(_PHONE_NOISE.sub("", phone)))


def validate_required(value: str) -> bool:
    return len(value.strip()) > 0


def validate_length(value: str, min_len: int, max_len: Optional[int] = None) -> bool:
    length = len(value.strip())
    if length < min_len:
        return False
    if max_len and length > max_len:
        return False
    return True


# ── Per-field rules ──
# Each returns an error message or None. The order of checks inside a rule
# matters: "required" wins over format/length for the same field.


def _check_name(value: str) -> Optional[str]:
    if not validate_required(value):
        return "Company name is required"
    if not validate_length(value, 1, NAME_MAX):
        return f"Company name must be between 1 and {NAME_MAX} characters"
    return None


def _check_industry(value: str) -> Optional[str]:
    if not validate_required(value):
        return "Industry is required"
    if not validate_length(value, 1, INDUSTRY_MAX):
        return f"Industry must be less than {INDUSTRY_MAX} characters"
    return None


def _check_contact_email(value: str) -> Optional[str]:
    if not validate_required(value):
        return "Contact email is required"
    if not validate_email(value):
        return "Please enter a valid email address"
    if not validate_length(value, 1, EMAIL_MAX):
        return f"Contact email must be less than {EMAIL_MAX} characters"
    return None


def _check_website(value: str) -> Optional[str]:
    if value and not validate_url(value):
        return "Please enter a valid URL (e.g., https://example.com)"
    if value and not validate_length(value, 0, WEBSITE_MAX):
        return f"Website must be less than {WEBSITE_MAX} characters"
    return None


def _check_contact_phone(value: str) -> Optional[str]:
    if value and not validate_phone(value):
        return "Please enter a valid phone number"
    if value and not validate_length(value, 0, PHONE_MAX):
        return f"Phone number must be less than {PHONE_MAX} characters"
    return None


def _max_length_rule(max_len: int, message: str) -> Callable[[str], Optional[str]]:
    def _check(value: str) -> Optional[str]:
        if value and not validate_length(value, 0, max_len):
            return message
        return None

    return _check


FIELD_RULES: Dict[str, Callable[[str], Optional[str]]] = {
    "name": _check_name,
    "industry": _check_industry,
    "contact_email": _check_contact_email,
    "website": _check_website,
    "contact_phone": _check_contact_phone,
    "description": _max_length_rule(
        DESCRIPTION_MAX, f"Description must be less than {DESCRIPTION_MAX} characters"
    ),
    "address": _max_length_rule(
        ADDRESS_MAX, f"Address must be less than {ADDRESS_MAX} characters"
    ),
    "category": _max_length_rule(
        CATEGORY_MAX, f"Category must be less than {CATEGORY_MAX} characters"
    ),
}


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _form_values(data: FormData) -> Mapping[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump()
    return data


def validate_field(
    field_name: str, value: Any, data: Optional[FormData] = None
) -> Optional[FieldError]:
    """
    Validate one form field.

    ``data`` is the rest of the form; no current rule depends on other
    fields, but callers pass it so cross-field rules can be added without
    changing the signature. Unknown field names always pass.
    """
    rule = FIELD_RULES.get(field_name)
    if rule is None:
        return None
    message = rule(_as_text(value))
    if message is None:
        return None
    return FieldError(field=field_name, message=message)


def validate_company_form(data: FormData) -> ValidationResult:
    """Validate a full company form; missing keys are treated as empty."""
    values = _form_values(data)
    errors: List[FieldError] = []
    for field_name in FIELD_RULES:
        error = validate_field(field_name, values.get(field_name), values)
        if error is not None:
            errors.append(error)
    return ValidationResult(is_valid=not errors, errors=errors)
