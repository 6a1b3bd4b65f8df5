"""Unit tests for quote_engine.services.draft_store."""
import json
import threading
import pytest
from unittest.mock import Mock, patch

from quote_engine.services.draft_store import (
    BackgroundDraftStore,
    DatabaseDraftStore,
    DraftStore,
    InMemoryDraftStore,
    QuoteDraft,
    draft_key
)
from quote_engine.services.line_items import LineItem, LineItemCategory, LineItemList
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.services.rate_table import RiskProfile, SystemKey


@pytest.fixture
def draft(sample_params, sample_lines):
    """Draft built from the shared sample parameters and rows."""
    return QuoteDraft(parameters=sample_params, line_items=sample_lines)


@pytest.fixture
def raw_draft():
    """
    Draft holding values the sanitizing decoders would change.

    Returns:
        QuoteDraft with a cleared UOM, a long description and negative numbers
    """
    rows = LineItemList([
        LineItem(id="li-1", description="GPS", quantity=500, unit_price=12, uom="",
                 system_key=SystemKey.GPS_GRID_LAYOUT),
        LineItem(id="li-a", description="d" * 600, category=LineItemCategory.OTHER),
    ])
    rows.update("li-a", "quantity", -3)
    rows.update("li-a", "unit_price", -250.5)
    params = QuoteParameters(
        survey_area_sqm=500,
        risk_profile=RiskProfile.HIGH,
        service_head_count=0,
        clearance_cost=-10,
        prepayment_pct=150,
        admin_notes="  keep   spacing  ",
    )
    return QuoteDraft(parameters=params, line_items=rows.items)


class TestQuoteDraft:
    """Tests for QuoteDraft serialization."""

    def test_draft_key(self):
        """Test storage key format."""
        assert draft_key("req-1") == "quote-draft:req-1"

    def test_to_dict_is_flat_camel_case(self, draft):
        """Test parameters are flat camelCase keys next to lineItems."""
        data = draft.to_dict()
        assert data["surveyAreaSqm"] == 500.0
        assert data["riskProfile"] == "medium"
        assert data["adminNotes"] == "Site access via north gate"
        assert len(data["lineItems"]) == 2
        assert data["lineItems"][0]["systemKey"] == "gpsGridLayout"

    def test_json_round_trip(self, draft):
        """Test from_json(to_json()) is equal to the original."""
        assert QuoteDraft.from_json(draft.to_json()) == draft

    def test_notes(self, draft):
        """Test notes come from the parameters."""
        assert draft.notes == "Site access via north gate"

    def test_from_dict_keeps_values(self, raw_draft):
        """Test restoring returns saved values unchanged."""
        restored = QuoteDraft.from_json(raw_draft.to_json())
        assert restored == raw_draft
        assert restored.line_items[0].uom == ""
        assert len(restored.line_items[1].description) == 600
        assert restored.line_items[1].quantity == -3
        assert restored.parameters.prepayment_pct == 150

    def test_from_dict_missing_keys_default(self):
        """Test absent keys take the parameter defaults."""
        restored = QuoteDraft.from_dict({"surveyAreaSqm": 120})
        assert restored.parameters == QuoteParameters(survey_area_sqm=120)
        assert restored.line_items == ()

    def test_from_dict_unknown_risk_profile(self):
        """Test an unknown enum value is an error."""
        with pytest.raises(ValueError):
            QuoteDraft.from_dict({"riskProfile": "extreme"})


class TestInMemoryDraftStore:
    """Tests for InMemoryDraftStore."""

    def test_load_missing(self):
        """Test load of an unknown key."""
        assert InMemoryDraftStore().load("req-1") is None

    def test_round_trip(self, draft):
        """Test load after save returns an equal draft."""
        store = InMemoryDraftStore()
        store.save("req-1", draft)
        assert store.load("req-1") == draft
        assert store.keys() == ["quote-draft:req-1"]

    def test_round_trip_keeps_raw_values(self, raw_draft):
        """Test load returns exactly what was saved."""
        store = InMemoryDraftStore()
        store.save("req-1", raw_draft)
        assert store.load("req-1") == raw_draft

    def test_save_overwrites(self, draft):
        """Test a second save replaces the first."""
        store = InMemoryDraftStore()
        store.save("req-1", draft)
        replacement = QuoteDraft(parameters=QuoteParameters(survey_area_sqm=10))
        store.save("req-1", replacement)
        assert store.load("req-1") == replacement

    def test_clear(self, draft):
        """Test clear removes the draft and ignores missing keys."""
        store = InMemoryDraftStore()
        store.save("req-1", draft)
        store.clear("req-1")
        store.clear("req-2")
        assert store.load("req-1") is None

    def test_keys_isolated(self, draft):
        """Test drafts are kept per request."""
        store = InMemoryDraftStore()
        store.save("req-1", draft)
        assert store.load("req-2") is None


def _store_payload(database, request_id, payload):
    from quote_engine.models import QuoteDraftRecord
    db = database()
    try:
        db.add(QuoteDraftRecord(draft_key=f"quote-draft:{request_id}", request_id=request_id, payload=payload))
        db.commit()
    finally:
        db.close()


class TestDatabaseDraftStore:
    """Tests for DatabaseDraftStore."""

    def test_round_trip(self, database, draft):
        """Test save/load through the quote_drafts table."""
        store = DatabaseDraftStore(database)
        store.save("req-1", draft)
        assert store.load("req-1") == draft

    def test_round_trip_keeps_raw_values(self, database, raw_draft):
        """Test load returns exactly what was saved."""
        store = DatabaseDraftStore(database)
        store.save("req-1", raw_draft)
        assert store.load("req-1") == raw_draft

    def test_overwrite_keeps_one_row(self, database, draft):
        """Test save on an existing key updates in place."""
        from quote_engine.models import QuoteDraftRecord
        store = DatabaseDraftStore(database)
        store.save("req-1", draft)
        store.save("req-1", QuoteDraft(parameters=QuoteParameters(survey_area_sqm=42)))

        db = database()
        try:
            rows = db.query(QuoteDraftRecord).all()
            assert len(rows) == 1
            assert rows[0].draft_key == "quote-draft:req-1"
            assert json.loads(rows[0].payload)["surveyAreaSqm"] == 42
        finally:
            db.close()

    def test_clear(self, database, draft):
        """Test clear deletes the row."""
        store = DatabaseDraftStore(database)
        store.save("req-1", draft)
        store.clear("req-1")
        assert store.load("req-1") is None

    def test_unreadable_payload_ignored(self, database):
        """Test a corrupt payload loads as no draft."""
        _store_payload(database, "req-9", "{not json")
        assert DatabaseDraftStore(database).load("req-9") is None

    def test_unknown_risk_profile_ignored(self, database):
        """Test a payload with an unknown enum value loads as no draft."""
        _store_payload(database, "req-8", '{"riskProfile": "extreme"}')
        assert DatabaseDraftStore(database).load("req-8") is None

    def test_row_without_id_ignored(self, database):
        """Test a payload whose row has no id loads as no draft."""
        _store_payload(database, "req-8", '{"lineItems": [{"description": "no id"}]}')
        assert DatabaseDraftStore(database).load("req-8") is None


class RecordingStore(DraftStore):
    """In-memory store that records writes and can block them."""

    def __init__(self):
        self.inner = InMemoryDraftStore()
        self.writes = []
        self.gate = threading.Event()
        self.gate.set()

    def save(self, request_id, draft):
        self.gate.wait(5)
        self.writes.append((request_id, draft))
        self.inner.save(request_id, draft)

    def load(self, request_id):
        return self.inner.load(request_id)

    def clear(self, request_id):
        self.inner.clear(request_id)


class TestBackgroundDraftStore:
    """Tests for BackgroundDraftStore."""

    def test_save_is_written(self, draft):
        """Test the worker writes to the wrapped store."""
        inner = RecordingStore()
        store = BackgroundDraftStore(inner)
        try:
            store.save("req-1", draft)
            assert store.flush(5)
            assert inner.load("req-1") == draft
        finally:
            store.close()

    def test_load_sees_pending(self, draft):
        """Test a pending save is visible before it is written."""
        inner = RecordingStore()
        inner.gate.clear()
        store = BackgroundDraftStore(inner)
        try:
            store.save("req-1", draft)
            assert store.load("req-1") == draft
        finally:
            inner.gate.set()
            store.close()

    def test_last_write_wins(self, draft):
        """Test rapid saves on one key end with the latest snapshot."""
        inner = RecordingStore()
        inner.gate.clear()
        store = BackgroundDraftStore(inner)
        try:
            store.save("req-0", draft)
            snapshots = [QuoteDraft(parameters=QuoteParameters(survey_area_sqm=n)) for n in range(1, 6)]
            for snapshot in snapshots:
                store.save("req-1", snapshot)
            inner.gate.set()
            assert store.flush(5)
            assert inner.load("req-1") == snapshots[-1]
            assert len([w for w in inner.writes if w[0] == "req-1"]) < len(snapshots)
        finally:
            store.close()

    def test_load_same_before_and_after_write(self, raw_draft):
        """Test load gives the saved snapshot whether or not it is written yet."""
        inner = RecordingStore()
        inner.gate.clear()
        store = BackgroundDraftStore(inner)
        try:
            store.save("req-1", raw_draft)
            assert store.load("req-1") == raw_draft
            inner.gate.set()
            assert store.flush(5)
            assert inner.writes
            assert store.load("req-1") == raw_draft
        finally:
            inner.gate.set()
            store.close()

    def test_clear_removes_pending_and_stored(self, draft):
        """Test clear drops both the pending and the persisted draft."""
        inner = RecordingStore()
        store = BackgroundDraftStore(inner)
        try:
            store.save("req-1", draft)
            store.flush(5)
            store.save("req-1", QuoteDraft(parameters=QuoteParameters(survey_area_sqm=1)))
            store.clear("req-1")
            store.flush(5)
            assert store.load("req-1") is None
            assert inner.load("req-1") is None
        finally:
            store.close()

    def test_write_failure_is_logged(self, draft):
        """Test worker errors are logged, not raised."""
        inner = Mock(spec=DraftStore)
        inner.save.side_effect = RuntimeError("disk full")
        with patch('quote_engine.services.draft_store.log_exception') as mock_log:
            store = BackgroundDraftStore(inner)
            try:
                store.save("req-1", draft)
                assert store.flush(5)
            finally:
                store.close()
        mock_log.assert_called_once()
        assert mock_log.call_args[1]["additional_context"] == {"draft_key": "quote-draft:req-1"}

    def test_save_after_close(self, draft):
        """Test save on a closed store raises."""
        store = BackgroundDraftStore(InMemoryDraftStore())
        store.close()
        with pytest.raises(RuntimeError):
            store.save("req-1", draft)
