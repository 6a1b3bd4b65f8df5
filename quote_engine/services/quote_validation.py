"""Validation rules checked before a quote is submitted."""
from typing import Iterable, List

from quote_engine.services.line_items import LineItem
from quote_engine.services.pricing_calculator import line_subtotal
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.utils.errors import QuoteValidationError, ValidationFailure
from quote_engine.utils.logger import get_logger
from quote_engine.utils.validators import is_blank

logger = get_logger(__name__)

NO_DESCRIBED_LINES = "NO_DESCRIBED_LINES"
NEGATIVE_VALUES = "NEGATIVE_VALUES"
MISSING_DESCRIPTION = "MISSING_DESCRIPTION"
DISCOUNT_EXCEEDS_SUBTOTAL = "DISCOUNT_EXCEEDS_SUBTOTAL"
TOTAL_NOT_POSITIVE = "TOTAL_NOT_POSITIVE"

MESSAGES = {
    NO_DESCRIBED_LINES: "Please add at least one line item",
    NEGATIVE_VALUES: "Line items cannot have a negative quantity or unit price",
    MISSING_DESCRIPTION: "Line items with a quantity or unit price need a description",
    DISCOUNT_EXCEEDS_SUBTOTAL: "Discount cannot exceed subtotal",
    TOTAL_NOT_POSITIVE: "Total must be greater than $0",
}


def _failure(code: str) -> ValidationFailure:
    return ValidationFailure(code, MESSAGES[code])


def validate_quote(line_items: Iterable[LineItem], params: QuoteParameters) -> List[ValidationFailure]:
    """
    Evaluate every submission rule and return all failures in rule order.

    Rules:
        1. At least one row has a non-blank description.
        2. No row has a negative quantity or unit price.
        3. Every row with a non-zero quantity or unit price has a description.
        4. The discount does not exceed the subtotal before discount.
        5. The resulting total is greater than zero.

    Returns:
        List of ValidationFailure; empty when the quote may be submitted
    """
    items = list(line_items)
    failures = []

    if not any(not is_blank(item.description) for item in items):
        failures.append(_failure(NO_DESCRIBED_LINES))

    if any(item.quantity < 0 or item.unit_price < 0 for item in items):
        failures.append(_failure(NEGATIVE_VALUES))

    if any((item.quantity != 0 or item.unit_price != 0) and is_blank(item.description) for item in items):
        failures.append(_failure(MISSING_DESCRIPTION))

    subtotal = line_subtotal(items) + params.initiation_total
    if params.discount_amount > subtotal:
        failures.append(_failure(DISCOUNT_EXCEEDS_SUBTOTAL))

    if subtotal - params.discount_amount <= 0:
        failures.append(_failure(TOTAL_NOT_POSITIVE))

    return failures


def ensure_submittable(line_items: Iterable[LineItem], params: QuoteParameters) -> None:
    """
    Raise QuoteValidationError carrying every failure, first failure first.
    """
    failures = validate_quote(line_items, params)
    if failures:
        logger.warning(
            "Quote failed validation",
            extra={"failure_codes": [failure.code for failure in failures]}
        )
        raise QuoteValidationError(failures)
