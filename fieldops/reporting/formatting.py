"""Display strings for typed checklist responses.

Pure formatting, shared by the PDF export and the in-page view. Glyph
substitution for a specific font belongs to the renderer.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Protocol

from fieldops.models import ItemType
from fieldops.reporting.i18n import labels_for

PLACEHOLDER = "—"


class ResponseValue(Protocol):
    value_text: str | None
    value_number: float | None
    value_bool: bool | None


def format_number(value: float | int | None) -> str:
    """Decimal string without a trailing ``.0`` for integral values.

    Exponent notation is used only below 1e-6 and from 1e21 up, written as
    ``1e-7`` or ``1e+21`` without zero padding.
    """
    if value is None:
        return PLACEHOLDER
    number = float(value)
    if not math.isfinite(number):
        return PLACEHOLDER
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    text = repr(number)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    if -7 < int(exponent) < 21:
        return format(Decimal(text), "f")
    return f"{mantissa}e{int(exponent):+d}"


def format_bool(value: bool | None, locale: str | None = None) -> str:
    if value is None:
        return PLACEHOLDER
    labels = labels_for(locale)
    return labels["yes"] if value else labels["no"]


def format_response_value(
    item_type: str | ItemType,
    response: ResponseValue | None,
    locale: str | None = None,
) -> str:
    """Map a response to its display string according to the item type.

    Only the field matching the item type is read; the others are ignored
    even when populated. Unknown item types are shown as text.
    """
    if response is None:
        return PLACEHOLDER

    item_type = item_type.value if isinstance(item_type, ItemType) else item_type

    if item_type == ItemType.CHECKBOX.value:
        return format_bool(response.value_bool, locale)

    if item_type == ItemType.NUMBER.value:
        return format_number(response.value_number)

    text = (response.value_text or "").strip()
    return text or PLACEHOLDER
