"""Unit tests for quote_engine.services.pricing_calculator."""
import math
import pytest
from quote_engine.services.line_items import AREA_UOM, LineItem, LineItemCategory
from quote_engine.services.pricing_calculator import (
    QuoteTotals,
    calculate_totals,
    create_default_lines,
    default_standard_line,
    effective_factor,
    format_jmd,
    format_usd,
    line_subtotal,
    recalculate_standard_lines,
    round_half_up
)
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.services.rate_table import RiskProfile, SystemKey


class TestRoundHalfUp:
    """Tests for round_half_up function."""

    def test_half_rounds_up(self):
        """Test .5 rounds away from zero, unlike round()."""
        assert round_half_up(92.5) == 93
        assert round_half_up(57.5) == 58
        assert round_half_up(0.5) == 1

    def test_below_half(self):
        """Test values below .5 round down."""
        assert round_half_up(15.49) == 15

    def test_whole(self):
        """Test whole values are unchanged."""
        assert round_half_up(85.0) == 85


class TestEffectiveFactor:
    """Tests for effective_factor function."""

    def test_low_is_unchanged(self):
        """Test low risk leaves the service factor unchanged."""
        assert effective_factor(200, RiskProfile.LOW) == 200

    def test_medium(self):
        """Test medium risk scales by 5/4."""
        assert effective_factor(200, RiskProfile.MEDIUM) == 250

    @pytest.mark.parametrize("service_factor", [1, 80, 200, 1234.5])
    def test_high_to_low_ratio(self, service_factor):
        """Test high/low ratio is 7/4 for any positive service factor."""
        ratio = effective_factor(service_factor, "high") / effective_factor(service_factor, "low")
        assert ratio == pytest.approx(7 / 4)

    def test_linear_in_service_factor(self):
        """Test doubling the service factor doubles the effective factor."""
        assert effective_factor(400, "medium") == pytest.approx(2 * effective_factor(200, "medium"))

    def test_zero_service_factor(self):
        """Test zero service factor."""
        assert effective_factor(0, RiskProfile.HIGH) == 0


class TestDefaultLines:
    """Tests for standard line generation."""

    def test_default_standard_line(self):
        """Test a single default row."""
        item = default_standard_line(SystemKey.DATA_COLLECTION, 500, 250)
        assert item.id == "li-2"
        assert item.description == "Increment Data Collection"
        assert item.quantity == 500
        assert item.unit_price == 93
        assert item.uom == AREA_UOM
        assert item.category == LineItemCategory.PROFESSIONAL_SERVICE
        assert item.system_key == SystemKey.DATA_COLLECTION

    def test_scenario_medium_risk_survey(self):
        """Test 500 sq m at factor 200, medium risk."""
        factor = effective_factor(200, RiskProfile.MEDIUM)
        lines = create_default_lines(500, factor)

        prices = {item.system_key.value: item.unit_price for item in lines}
        assert prices == {
            "gpsGridLayout": 15,
            "dataCollection": 93,
            "dataProcessing": 58,
            "evaluationReporting": 85,
        }
        assert [item.id for item in lines] == ["li-1", "li-2", "li-3", "li-4"]
        assert line_subtotal(lines) == 125500


class TestRecalculateStandardLines:
    """Tests for recalculate_standard_lines function."""

    def test_refreshes_price_and_area_quantity(self):
        """Test standard rows follow new parameters."""
        lines = create_default_lines(500, 200)
        refreshed = recalculate_standard_lines(lines, 800, 250)
        assert all(item.quantity == 800 for item in refreshed)
        assert refreshed[1].unit_price == 93

    def test_non_area_uom_keeps_quantity(self):
        """Test quantity is only reset for area-unit rows."""
        row = LineItem(id="li-1", description="GPS", quantity=2, unit_price=1,
                       uom="Days", system_key=SystemKey.GPS_GRID_LAYOUT)
        refreshed = recalculate_standard_lines([row], 900, 200)[0]
        assert refreshed.quantity == 2
        assert refreshed.unit_price == 12

    def test_custom_rows_untouched(self):
        """Test rows without a system key are returned unchanged."""
        custom = LineItem(id="li-c", description="Travel", quantity=1, unit_price=5000, uom=AREA_UOM)
        assert recalculate_standard_lines([custom], 900, 250) == [custom]

    def test_idempotent(self):
        """Test recalculating twice gives identical rows."""
        lines = create_default_lines(300, 200) + [LineItem(id="li-c", description="Permits", quantity=1)]
        once = recalculate_standard_lines(lines, 450, 350)
        twice = recalculate_standard_lines(once, 450, 350)
        assert once == twice


class TestCalculateTotals:
    """Tests for calculate_totals function."""

    def test_scenario_initiation_costs(self):
        """Test subtotal, total and payment split with initiation costs."""
        lines = create_default_lines(500, 250)
        params = QuoteParameters(clearance_cost=10000, mobilization_cost=5000,
                                 accommodation_cost=0, discount_amount=0, prepayment_pct=40)
        totals = calculate_totals(lines, params)

        assert totals.line_subtotal == 125500
        assert totals.initiation_total == 15000
        assert totals.subtotal == 140500
        assert totals.total == 140500
        assert totals.prepay_amount == pytest.approx(56200)
        assert totals.balance_amount == pytest.approx(84300)
        assert totals.balance_pct == 60

    def test_usd_conversion(self):
        """Test USD total uses the fixed exchange rate."""
        totals = calculate_totals([], QuoteParameters(clearance_cost=12850), exchange_rate=128.5)
        assert totals.usd_total == pytest.approx(100)

    @pytest.mark.parametrize("discount", [0, 100, 7500, 7501, 1e9])
    def test_total_never_negative(self, discount):
        """Test total is clamped at zero for any discount."""
        lines = [LineItem(id="a", description="Row", quantity=1, unit_price=7500)]
        totals = calculate_totals(lines, QuoteParameters(discount_amount=discount))
        assert totals.total >= 0
        assert totals.total == max(0, 7500 - discount)

    @pytest.mark.parametrize("prepayment_pct", [0, 33.3, 40, 100])
    def test_prepay_plus_balance_is_total(self, prepayment_pct):
        """Test the payment split always adds up."""
        lines = create_default_lines(123.4, 217.9)
        totals = calculate_totals(lines, QuoteParameters(discount_amount=99.99, prepayment_pct=prepayment_pct))
        assert totals.prepay_amount + totals.balance_amount == pytest.approx(totals.total, abs=1e-6)

    def test_empty_quote(self):
        """Test totals of an empty quote are zero."""
        totals = calculate_totals([], QuoteParameters())
        assert totals.total == 0
        assert totals.usd_total == 0


class TestFormatting:
    """Tests for presentation formatting."""

    def test_format_jmd(self):
        """Test whole units with separators."""
        assert format_jmd(125500) == "$125,500"
        assert format_jmd(1234.5) == "$1,235"

    def test_format_usd(self):
        """Test two decimals with separators."""
        assert format_usd(140500 / 128.5) == "$1,093.39"
        assert format_usd(0) == "$0.00"

    def test_non_finite(self):
        """Test non-finite values render as zero."""
        assert format_jmd(math.inf) == "$0"
        assert format_usd(math.nan) == "$0.00"

    def test_totals_formatted(self):
        """Test QuoteTotals.formatted."""
        totals = QuoteTotals(
            line_subtotal=125500, initiation_total=15000, subtotal=140500, total=140500,
            usd_total=140500 / 128.5, prepay_amount=56200, balance_amount=84300, prepayment_pct=40
        )
        formatted = totals.formatted()
        assert formatted["total"] == "$140,500"
        assert formatted["usd_total"] == "$1,093.39"
        assert formatted["prepay_amount"] == "$56,200"
