"""
Shape rules for caller-supplied short ids.

Rules are evaluated in order and the first failing rule wins. An absent or
empty id means "not provided" and is accepted, the service generates one.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from shortlink_app.exceptions import BadRequestError


MIN_LENGTH = 6

_LETTER = re.compile(r"[a-zA-Z]")
_DIGIT = re.compile(r"[0-9]")
_WHITESPACE = re.compile(r"\s")


@dataclass(frozen=True)
class ValidationRule:
    """A predicate over the id paired with the message reported when it fails"""
    check: Callable[[str], bool]
    message: str


RULES: List[ValidationRule] = [
    ValidationRule(
        lambda value: len(value) >= MIN_LENGTH,
        f"custom_id must be at least {MIN_LENGTH} characters long.",
    ),
    ValidationRule(
        lambda value: _LETTER.search(value) is not None,
        "custom_id must contain letters.",
    ),
    ValidationRule(
        lambda value: _DIGIT.search(value) is not None,
        "custom_id must contain at least one digit.",
    ),
    ValidationRule(
        lambda value: _WHITESPACE.search(value) is None,
        "custom_id cannot contain whitespace.",
    ),
]


def validate_short_id(value: Optional[str]) -> Optional[str]:
    """
    Check a custom id against every rule.

    Args:
        value: The id supplied by the caller, possibly None or empty

    Returns:
        The message of the first failing rule, or None when the id passes
    """
    if not value:
        return None

    for rule in RULES:
        if not rule.check(value):
            return rule.message
    return None


def ensure_valid_short_id(value: Optional[str]) -> None:
    """Raise BadRequestError with the first failing rule's message"""
    message = validate_short_id(value)
    if message is not None:
        raise BadRequestError(message)
