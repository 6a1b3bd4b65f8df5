"""Client-side quote builder and lifecycle state machine."""
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from quote_engine.services.draft_store import DraftStore, QuoteDraft
from quote_engine.services.line_items import (
    QUICK_ADD_PRESETS,
    UOM_OPTIONS,
    LineItem,
    LineItemCategory,
    LineItemList,
    create_empty_line
)
from quote_engine.services.pricing_calculator import (
    QuoteTotals,
    calculate_totals,
    create_default_lines,
    effective_factor,
    recalculate_standard_lines
)
from quote_engine.services.quote_backend import QuoteBackend, SubmittedQuote
from quote_engine.services.quote_parameters import PARAMETER_KEYS, QuoteParameters
from quote_engine.services.quote_validation import ensure_submittable, validate_quote
from quote_engine.utils.errors import QuoteStateError, TransportError
from quote_engine.utils.logger import get_logger
from quote_engine.utils.validators import sanitize_float

logger = get_logger(__name__)


class QuoteState(str, Enum):
    BUILDING = "building"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @classmethod
    def from_request_status(cls, status: Optional[str]) -> "QuoteState":
        """Map the owning request's status to the quote state."""
        return {
            "quoted": cls.SUBMITTED,
            "quote_accepted": cls.ACCEPTED,
            "quote_rejected": cls.REJECTED,
        }.get(status or "", cls.BUILDING)


def build_submit_payload(line_items: Iterable[LineItem], params: QuoteParameters) -> Dict[str, Any]:
    """
    Build the body for POST /quotes/<request_id>.

    Rows with a blank description are left out; descriptions are trimmed
    and quantity/unit price clamped to >= 0. sortOrder is the row position
    among the rows that are sent.
    """
    rows = [item for item in line_items if item.description.strip()]
    payload = params.to_submit_payload()
    payload["lineItems"] = [
        {
            "description": item.description.strip(),
            "quantity": max(0.0, item.quantity),
            "unitPrice": max(0.0, item.unit_price),
            "uom": item.uom,
            "category": item.category.value,
            "sortOrder": position,
        }
        for position, item in enumerate(rows)
    ]
    return payload


def initial_line_items(saved: Optional[List[Dict[str, Any]]], params: QuoteParameters) -> List[LineItem]:
    """
    Rows a request opens with: its saved rows, else the four standard rows
    when it has a survey area, else one empty professional-service row.
    """
    if saved:
        return LineItemList.from_list(saved).items
    if params.survey_area_sqm > 0:
        factor = effective_factor(params.service_factor, params.risk_profile)
        return create_default_lines(params.survey_area_sqm, factor)
    return [create_empty_line(LineItemCategory.PROFESSIONAL_SERVICE)]


class QuoteBuilder:
    """
    In-progress quote for one service request.

    Line items and parameters are editable only in BUILDING. Each edit is
    followed by autosave() to the injected draft store; submit() clears the
    draft only after the backend has accepted the quote.
    """

    def __init__(
        self,
        request_id: str,
        draft_store: DraftStore,
        backend: QuoteBackend,
        params: Optional[QuoteParameters] = None,
        line_items: Optional[Iterable[LineItem]] = None,
        state: QuoteState = QuoteState.BUILDING,
        quote: Optional[SubmittedQuote] = None
    ):
        self.request_id = str(request_id)
        self.draft_store = draft_store
        self.backend = backend
        self.params = params or QuoteParameters()
        self.line_items = LineItemList(list(line_items or []))
        self.state = state
        self.quote = quote

    @classmethod
    def for_request(
        cls,
        request: Dict[str, Any],
        draft_store: DraftStore,
        backend: QuoteBackend
    ) -> "QuoteBuilder":
        """
        Open a builder for a service request record.

        Parameters come from the record's snake_case columns; saved rows are
        read from "line_items". The draft is not restored automatically, see
        restore_draft().
        """
        params = QuoteParameters.from_request(request)
        return cls(
            request_id=request["request_id"],
            draft_store=draft_store,
            backend=backend,
            params=params,
            line_items=initial_line_items(request.get("line_items"), params),
            state=QuoteState.from_request_status(request.get("status")),
        )

    # Read side

    @property
    def totals(self) -> QuoteTotals:
        return calculate_totals(self.line_items, self.params)

    @property
    def effective_factor(self) -> float:
        return effective_factor(self.params.service_factor, self.params.risk_profile)

    @property
    def validation_failures(self):
        return validate_quote(self.line_items, self.params)

    def snapshot(self) -> QuoteDraft:
        return QuoteDraft(parameters=self.params, line_items=tuple(self.line_items))

    def view(self) -> Dict[str, Any]:
        """State exposed to the rendering layer."""
        totals = self.totals
        failures = self.validation_failures if self.state == QuoteState.BUILDING else []
        return {
            "request_id": self.request_id,
            "state": self.state.value,
            "parameters": self.params.to_dict(),
            "effective_factor": self.effective_factor,
            "line_items": self.line_items.to_list(),
            "totals": totals.to_dict(),
            "formatted_totals": totals.formatted(),
            "validation_errors": [failure.message for failure in failures],
            "can_edit": self.state == QuoteState.BUILDING,
            "can_submit": self.state == QuoteState.BUILDING and not failures,
            "can_respond": self.state == QuoteState.SUBMITTED,
            "uom_options": list(UOM_OPTIONS),
            "quick_add_presets": sorted(QUICK_ADD_PRESETS),
        }

    # Drafts

    def autosave(self) -> None:
        self.draft_store.save(self.request_id, self.snapshot())

    def restore_draft(self) -> bool:
        """Replace parameters and rows with the saved draft. Returns False if none."""
        self._require(QuoteState.BUILDING, "restore")
        draft = self.draft_store.load(self.request_id)
        if draft is None:
            return False
        self.params = draft.parameters
        self.line_items = LineItemList(list(draft.line_items))
        logger.info("Draft restored", extra={"request_id": self.request_id})
        return True

    def discard_draft(self) -> None:
        self.draft_store.clear(self.request_id)
        logger.info("Draft discarded", extra={"request_id": self.request_id})

    # Edits

    def add_line(self, category: LineItemCategory = LineItemCategory.PROFESSIONAL_SERVICE) -> LineItem:
        self._require(QuoteState.BUILDING, "edit")
        item = self.line_items.add(category)
        self.autosave()
        return item

    def add_quick(self, preset_or_description: str, uom: Optional[str] = None) -> LineItem:
        """Add an 'other' row from a preset name or an explicit description and UOM."""
        self._require(QuoteState.BUILDING, "edit")
        if uom is None and preset_or_description in QUICK_ADD_PRESETS:
            item = self.line_items.add_preset(preset_or_description)
        else:
            item = self.line_items.add_quick(preset_or_description, uom or "Lump Sum")
        self.autosave()
        return item

    def update_line(self, item_id: str, field: str, value: Any) -> LineItem:
        """Update one field; quantity and unit_price are clamped to >= 0 here."""
        self._require(QuoteState.BUILDING, "edit")
        if field in ("quantity", "unit_price"):
            value = sanitize_float(value, 0.0, min_value=0.0)
        item = self.line_items.update(item_id, field, value)
        self.autosave()
        return item

    def remove_line(self, item_id: str) -> bool:
        self._require(QuoteState.BUILDING, "edit")
        removed = self.line_items.remove(item_id)
        if removed:
            self.autosave()
        return removed

    def update_parameters(self, **changes) -> QuoteParameters:
        """
        Change quote parameters by attribute name, e.g.
        update_parameters(discount_amount=500). Values are sanitized.
        """
        self._require(QuoteState.BUILDING, "edit")
        keys = {attr: key for key, attr in PARAMETER_KEYS.items()}
        unknown = set(changes) - set(keys)
        if unknown:
            raise TypeError(f"Unknown quote parameters: {', '.join(sorted(unknown))}")
        data = self.params.to_dict()
        for attr, value in changes.items():
            data[keys[attr]] = getattr(value, "value", value)
        self.params = QuoteParameters.from_dict(data)
        self.autosave()
        return self.params

    def recalculate_standard_lines(self) -> List[LineItem]:
        self._require(QuoteState.BUILDING, "edit")
        self.line_items.replace_all(recalculate_standard_lines(
            self.line_items, self.params.survey_area_sqm, self.effective_factor
        ))
        self.autosave()
        return self.line_items.items

    # Transitions

    def submit(self) -> SubmittedQuote:
        """
        Validate, send the quote to the backend and move to SUBMITTED.

        Raises:
            QuoteStateError: If not in BUILDING
            QuoteValidationError: Before any network call, if a rule fails
            TransportError: If the backend call fails; state and draft are unchanged
        """
        self._require(QuoteState.BUILDING, "submit")
        ensure_submittable(self.line_items, self.params)

        payload = build_submit_payload(self.line_items, self.params)
        try:
            quote = self.backend.submit(self.request_id, payload)
        except TransportError as e:
            logger.warning(
                "Quote submission failed",
                extra={"request_id": self.request_id, "error": e.message, "status_code": e.status_code}
            )
            raise

        self.quote = quote
        self.state = QuoteState.SUBMITTED
        self.draft_store.clear(self.request_id)
        logger.info(
            "Quote submitted",
            extra={"request_id": self.request_id, "total": quote.total, "line_item_count": len(payload["lineItems"])}
        )
        return quote

    def accept(self) -> SubmittedQuote:
        self._require(QuoteState.SUBMITTED, "accept")
        self.quote = self.backend.accept(self.request_id)
        self.state = QuoteState.ACCEPTED
        logger.info("Quote accepted", extra={"request_id": self.request_id})
        return self.quote

    def reject(self, reason: Optional[str] = None) -> SubmittedQuote:
        self._require(QuoteState.SUBMITTED, "reject")
        self.quote = self.backend.reject(self.request_id, reason)
        self.state = QuoteState.REJECTED
        logger.info("Quote rejected", extra={"request_id": self.request_id, "has_reason": bool(reason)})
        return self.quote

    def _require(self, state: QuoteState, attempted: str) -> None:
        if self.state != state:
            raise QuoteStateError(self.state, attempted)
