"""Field and form validation driven by field descriptors."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from .consts import (
    EMAIL_PATTERN,
    MSG_DATE_RANGE,
    MSG_INVALID_EMAIL,
    MSG_INVALID_FORMAT,
    MSG_INVALID_NUMBER,
    MSG_MIN_LENGTH,
    MSG_MIN_VALUE,
    MSG_REQUIRED,
)
from .enums import FieldType
from .schema import EntitySchema, FieldDescriptor

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(EMAIL_PATTERN)


@dataclass
class FormValidation:
    """Aggregated result of validating every field of a form."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not any(self.errors.values())

    @property
    def invalid_fields(self) -> list[str]:
        return [name for name, error in self.errors.items() if error]


def is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_number(value: Any) -> Optional[float]:
    """Parse a form value as a finite number, or return None."""
    if isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_date(value: Any) -> Optional[date]:
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def _format_min(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def validate_field(descriptor: FieldDescriptor, value: Any) -> str:
    """Validate a single value against its descriptor.

    Rules are applied in order and the first failure wins: required-ness,
    email shape, pattern, minimum length, then numeric parsing and minimum.
    Reference ids must parse as whole numbers. A blank value on an optional field passes.

    Returns:
        The error message, or an empty string when the value is valid
    """
    if is_blank(value):
        if descriptor.required:
            return MSG_REQUIRED.format(label=descriptor.label)
        return ""

    text = str(value)

    if descriptor.type == FieldType.EMAIL and not _EMAIL_RE.fullmatch(text):
        return MSG_INVALID_EMAIL

    if descriptor.pattern and not re.fullmatch(descriptor.pattern, text):
        return descriptor.pattern_message or MSG_INVALID_FORMAT

    if descriptor.min_length is not None and len(text) < descriptor.min_length:
        return MSG_MIN_LENGTH.format(min_length=descriptor.min_length)

    if descriptor.type == FieldType.NUMBER:
        number = parse_number(value)
        if number is None:
            return MSG_INVALID_NUMBER
        if descriptor.min is not None and number < descriptor.min:
            return MSG_MIN_VALUE.format(min=_format_min(descriptor.min))

    if descriptor.type == FieldType.SELECT_REF:
        number = parse_number(value)
        if number is None or not number.is_integer():
            return MSG_INVALID_NUMBER

    return ""


def validate_form(schema: EntitySchema, values: Mapping[str, Any]) -> FormValidation:
    """Validate every field of ``schema`` and apply the cross-field date rules.

    All fields are checked so that every error can be shown at once.
    """
    result = FormValidation()
    for descriptor in schema.fields:
        result.errors[descriptor.name] = validate_field(descriptor, values.get(descriptor.name))

    for start_name, end_name in schema.date_ranges:
        start = values.get(start_name)
        end = values.get(end_name)
        if is_blank(start) or is_blank(end):
            continue

        start_date, end_date = parse_date(start), parse_date(end)
        if start_date is None or end_date is None:
            continue
        if end_date <= start_date:
            result.errors[end_name] = MSG_DATE_RANGE

    if not result.valid:
        logger.debug(f"Form for '{schema.endpoint}' invalid: {result.invalid_fields}")
    return result
