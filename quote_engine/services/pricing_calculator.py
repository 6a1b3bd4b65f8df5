"""Pricing calculator for quotes: unit prices, totals and payment split."""
import math
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List

from quote_engine.config.settings import FIXED_EXCHANGE_RATE
from quote_engine.services.line_items import AREA_UOM, LineItem, LineItemCategory
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.services.rate_table import (
    BASELINE_RISK_MULTIPLIER,
    STANDARD_LINE_DESCRIPTIONS,
    RiskProfile,
    SystemKey,
    rate_factor,
    risk_multiplier
)


@dataclass(frozen=True)
class QuoteTotals:
    """Derived totals for a quote. Never stored on the client."""
    line_subtotal: float
    initiation_total: float
    subtotal: float
    total: float
    usd_total: float
    prepay_amount: float
    balance_amount: float
    prepayment_pct: float = 0.0

    @property
    def balance_pct(self) -> float:
        return 100 - self.prepayment_pct

    def to_dict(self) -> Dict[str, float]:
        return {
            "line_subtotal": self.line_subtotal,
            "initiation_total": self.initiation_total,
            "subtotal": self.subtotal,
            "total": self.total,
            "usd_total": self.usd_total,
            "prepay_amount": self.prepay_amount,
            "balance_amount": self.balance_amount,
            "prepayment_pct": self.prepayment_pct,
            "balance_pct": self.balance_pct,
        }

    def formatted(self) -> Dict[str, str]:
        """Presentation strings: whole JMD units, two-decimal USD."""
        return {
            "line_subtotal": format_jmd(self.line_subtotal),
            "initiation_total": format_jmd(self.initiation_total),
            "subtotal": format_jmd(self.subtotal),
            "total": format_jmd(self.total),
            "usd_total": format_usd(self.usd_total),
            "prepay_amount": format_jmd(self.prepay_amount),
            "balance_amount": format_jmd(self.balance_amount),
        }


def round_half_up(value: float) -> int:
    """
    Round to the nearest whole currency unit, halves rounding up.

    Python's round() uses banker's rounding (92.5 -> 92); quotes use
    half-up (92.5 -> 93).
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def effective_factor(service_factor: float, risk_profile: RiskProfile) -> float:
    """
    Service factor adjusted for risk, normalized so that a low-risk
    profile leaves the service factor unchanged.

    Args:
        service_factor: Base JMD per area unit
        risk_profile: low, medium or high

    Returns:
        service_factor * (multiplier / 4)
    """
    return (service_factor or 0) * (risk_multiplier(risk_profile) / BASELINE_RISK_MULTIPLIER)


def standard_unit_price(system_key: SystemKey, factor: float) -> int:
    return round_half_up(factor * rate_factor(system_key))


def default_standard_line(system_key: SystemKey, survey_area_sqm: float, factor: float) -> LineItem:
    """
    Build the default row for a standard service line.

    Args:
        system_key: Standard line tag
        survey_area_sqm: Billable area; becomes the row quantity
        factor: Effective factor (see effective_factor)

    Returns:
        LineItem priced at round_half_up(factor * rate_factor(system_key))
    """
    system_key = SystemKey(system_key)
    position = list(SystemKey).index(system_key) + 1
    return LineItem(
        id=f"li-{position}",
        system_key=system_key,
        description=STANDARD_LINE_DESCRIPTIONS[system_key],
        quantity=survey_area_sqm,
        unit_price=standard_unit_price(system_key, factor),
        uom=AREA_UOM,
        category=LineItemCategory.PROFESSIONAL_SERVICE,
    )


def create_default_lines(survey_area_sqm: float, factor: float) -> List[LineItem]:
    """All four standard rows, in quote order."""
    return [default_standard_line(key, survey_area_sqm, factor) for key in SystemKey]


def recalculate_standard_lines(
    line_items: Iterable[LineItem],
    survey_area_sqm: float,
    factor: float
) -> List[LineItem]:
    """
    Refresh standard rows from the current parameters.

    Standard rows always get a fresh unit price; their quantity is reset to
    the survey area only when their UOM is the area unit. Rows without a
    system_key are returned unchanged.
    """
    refreshed = []
    for item in line_items:
        if item.system_key is None:
            refreshed.append(item)
            continue
        refreshed.append(replace(
            item,
            quantity=survey_area_sqm if item.uom == AREA_UOM else item.quantity,
            unit_price=standard_unit_price(item.system_key, factor),
        ))
    return refreshed


def line_subtotal(line_items: Iterable[LineItem]) -> float:
    return sum((item.quantity * item.unit_price for item in line_items), 0.0)


def calculate_totals(
    line_items: Iterable[LineItem],
    params: QuoteParameters,
    exchange_rate: float = FIXED_EXCHANGE_RATE
) -> QuoteTotals:
    """
    Calculate quote totals.

    Arithmetic keeps full float precision; rounding happens only at
    presentation (see QuoteTotals.formatted).

    Args:
        line_items: Priced rows
        params: Quote parameters (initiation costs, discount, prepayment)
        exchange_rate: JMD per USD

    Returns:
        QuoteTotals
    """
    lines_total = line_subtotal(line_items)
    initiation = params.initiation_total
    subtotal = lines_total + initiation
    total = max(0.0, subtotal - params.discount_amount)
    prepay = total * (params.prepayment_pct / 100.0)
    return QuoteTotals(
        line_subtotal=lines_total,
        initiation_total=initiation,
        subtotal=subtotal,
        total=total,
        usd_total=total / exchange_rate,
        prepay_amount=prepay,
        balance_amount=total - prepay,
        prepayment_pct=params.prepayment_pct,
    )


def format_jmd(amount: float) -> str:
    """Format as whole JMD with thousands separators, e.g. $125,500."""
    if amount is None or not math.isfinite(amount):
        return "$0"
    return f"${round_half_up(amount):,}"


def format_usd(amount: float) -> str:
    """Format as USD with two decimals, e.g. $1,093.39."""
    if amount is None or not math.isfinite(amount):
        return "$0.00"
    cents = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${cents:,.2f}"
