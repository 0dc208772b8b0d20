"""Per-field presence, shape and pattern rules."""
import re
from typing import Any, List

from processor.errors import (
    EmptyArray,
    EmptyField,
    InvalidElement,
    InvalidEmail,
    RequiredFieldMissing,
)

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def require_text(field: str, value: Any) -> str:
    """
    Validate a required text field and return it trimmed.

    Raises:
        RequiredFieldMissing: If the value is absent
        EmptyField: If the value is not text or blank after trimming
    """
    if value is None:
        raise RequiredFieldMissing(field, f'{field} is required')
    if not isinstance(value, str):
        raise EmptyField(field, f'{field} must be text')

    trimmed = value.strip()
    if not trimmed:
        raise EmptyField(field, f'{field} cannot be empty')
    return trimmed


def require_text_list(field: str, values: Any) -> List[str]:
    """
    Validate a required list of text and return its elements trimmed.

    Raises:
        RequiredFieldMissing: If the list is absent
        EmptyArray: If the list has no elements
        InvalidElement: If any element is absent, not text or blank
    """
    if values is None:
        raise RequiredFieldMissing(field, f'{field} is required')
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple)):
        raise InvalidElement(field, f'{field} must be a list of strings')
    if len(values) == 0:
        raise EmptyArray(field, f'{field} must be a non-empty array of strings')

    trimmed = []
    for index, item in enumerate(values):
        if not isinstance(item, str) or not item.strip():
            raise InvalidElement(
                field, f'{field}[{index}] must be a non-empty string'
            )
        trimmed.append(item.strip())
    return trimmed


def normalize_email(value: Any, field: str = 'email') -> str:
    """
    Trim and lower-case an email address, then check its shape.

    Raises:
        RequiredFieldMissing: If the value is absent
        InvalidEmail: If the value does not look like local-part@domain.tld
    """
    if value is None:
        raise RequiredFieldMissing(field, f'{field} is required')
    if not isinstance(value, str):
        raise InvalidEmail(field, f'{field} must be a valid email address')

    email = value.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmail(field, f'{field} must be a valid email address')
    return email
