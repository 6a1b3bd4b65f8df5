"""Per-request pricing inputs for a quote being built."""
from dataclasses import dataclass
from typing import Any, Dict

from quote_engine.config.settings import (
    DEFAULT_SERVICE_FACTOR,
    DEFAULT_RISK_PROFILE,
    DEFAULT_PREPAYMENT_PCT,
    DEFAULT_DATA_COLLECTION_DAYS,
    DEFAULT_EVALUATION_DAYS,
    DEFAULT_ESTIMATED_WEEKS
)
from quote_engine.services.rate_table import RiskProfile, risk_multiplier
from quote_engine.utils.validators import sanitize_float

# Draft JSON key -> attribute name
PARAMETER_KEYS = {
    "surveyAreaSqm": "survey_area_sqm",
    "serviceFactor": "service_factor",
    "riskProfile": "risk_profile",
    "areaDiscountedSqm": "area_discounted_sqm",
    "serviceHeadCount": "service_head_count",
    "clearanceCost": "clearance_cost",
    "mobilizationCost": "mobilization_cost",
    "accommodationCost": "accommodation_cost",
    "dataCollectionDays": "data_collection_days",
    "evaluationDays": "evaluation_days",
    "estimatedWeeks": "estimated_weeks",
    "discountAmount": "discount_amount",
    "prepaymentPct": "prepayment_pct",
    "adminNotes": "admin_notes",
}

# Column names used by the owning service request record
REQUEST_KEYS = {
    "survey_area_sqm": "survey_area_sqm",
    "service_factor": "service_factor",
    "risk_profile": "risk_profile",
    "area_discounted_sqm": "area_discounted_sqm",
    "service_head_count": "service_head_count",
    "clearance_access_cost": "clearance_cost",
    "mobilization_cost": "mobilization_cost",
    "accommodation_cost": "accommodation_cost",
    "data_collection_days": "data_collection_days",
    "evaluation_days": "evaluation_days",
    "estimated_weeks": "estimated_weeks",
    "discount_amount": "discount_amount",
    "prepayment_pct": "prepayment_pct",
    "admin_notes": "admin_notes",
}


# Keys of the submit payload sent to the quote backend
SUBMIT_KEYS = {
    "serviceFactor": "service_factor",
    "riskProfile": "risk_profile",
    "areaDiscountedSqm": "area_discounted_sqm",
    "serviceHeadCount": "service_head_count",
    "clearanceAccessCost": "clearance_cost",
    "mobilizationCost": "mobilization_cost",
    "accommodationCost": "accommodation_cost",
    "dataCollectionDays": "data_collection_days",
    "evaluationDays": "evaluation_days",
    "estimatedWeeks": "estimated_weeks",
    "discountAmount": "discount_amount",
    "prepaymentPct": "prepayment_pct",
    "notes": "admin_notes",
}


def _risk_profile(value: Any) -> RiskProfile:
    try:
        return RiskProfile(value or DEFAULT_RISK_PROFILE)
    except ValueError:
        return RiskProfile(DEFAULT_RISK_PROFILE)


@dataclass(frozen=True)
class QuoteParameters:
    """
    Pricing inputs for one in-progress quote. All money is in JMD.

    Duration estimates (data_collection_days, evaluation_days,
    estimated_weeks) are informational and not priced.
    """
    survey_area_sqm: float = 0.0
    service_factor: float = DEFAULT_SERVICE_FACTOR
    risk_profile: RiskProfile = RiskProfile(DEFAULT_RISK_PROFILE)
    area_discounted_sqm: float = 0.0
    service_head_count: int = 1
    clearance_cost: float = 0.0
    mobilization_cost: float = 0.0
    accommodation_cost: float = 0.0
    data_collection_days: float = DEFAULT_DATA_COLLECTION_DAYS
    evaluation_days: float = DEFAULT_EVALUATION_DAYS
    estimated_weeks: float = DEFAULT_ESTIMATED_WEEKS
    discount_amount: float = 0.0
    prepayment_pct: float = DEFAULT_PREPAYMENT_PCT
    admin_notes: str = ""

    @property
    def initiation_total(self) -> float:
        return self.clearance_cost + self.mobilization_cost + self.accommodation_cost

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys (draft JSON format)."""
        data = {key: getattr(self, attr) for key, attr in PARAMETER_KEYS.items()}
        data["riskProfile"] = self.risk_profile.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuoteParameters":
        """Build from camelCase draft JSON, sanitizing every field."""
        return cls._from_mapping(data, PARAMETER_KEYS)

    @classmethod
    def from_draft_dict(cls, data: Dict[str, Any]) -> "QuoteParameters":
        """
        Rebuild parameters written by to_dict() exactly as they were saved.

        Absent keys take the dataclass defaults; present values are not
        sanitized.

        Raises:
            ValueError: If riskProfile is not a known value
        """
        values = {attr: data[key] for key, attr in PARAMETER_KEYS.items() if key in data}
        if "risk_profile" in values:
            values["risk_profile"] = RiskProfile(values["risk_profile"])
        return cls(**values)

    @classmethod
    def from_request(cls, request: Dict[str, Any]) -> "QuoteParameters":
        """Build from a service request record (snake_case columns)."""
        return cls._from_mapping(request, REQUEST_KEYS)

    @classmethod
    def from_submit_payload(cls, payload: Dict[str, Any]) -> "QuoteParameters":
        """Build from a submit payload (server side; values are re-sanitized)."""
        return cls._from_mapping(payload, SUBMIT_KEYS)

    def to_submit_payload(self) -> Dict[str, Any]:
        """Parameter part of the submit payload, including the risk multiplier."""
        data = {key: getattr(self, attr) for key, attr in SUBMIT_KEYS.items()}
        data["riskProfile"] = self.risk_profile.value
        data["riskMultiplier"] = risk_multiplier(self.risk_profile)
        return data

    @classmethod
    def _from_mapping(cls, data: Dict[str, Any], keys: Dict[str, str]) -> "QuoteParameters":
        values = {attr: data.get(key) for key, attr in keys.items() if data.get(key) is not None}
        notes = values.get("admin_notes")
        return cls(
            survey_area_sqm=sanitize_float(values.get("survey_area_sqm"), 0.0, min_value=0.0),
            service_factor=sanitize_float(values.get("service_factor"), DEFAULT_SERVICE_FACTOR, min_value=0.0),
            risk_profile=_risk_profile(values.get("risk_profile")),
            area_discounted_sqm=sanitize_float(values.get("area_discounted_sqm"), 0.0, min_value=0.0),
            service_head_count=int(sanitize_float(values.get("service_head_count"), 1, min_value=1)),
            clearance_cost=sanitize_float(values.get("clearance_cost"), 0.0, min_value=0.0),
            mobilization_cost=sanitize_float(values.get("mobilization_cost"), 0.0, min_value=0.0),
            accommodation_cost=sanitize_float(values.get("accommodation_cost"), 0.0, min_value=0.0),
            data_collection_days=sanitize_float(values.get("data_collection_days"), DEFAULT_DATA_COLLECTION_DAYS, min_value=0.0),
            evaluation_days=sanitize_float(values.get("evaluation_days"), DEFAULT_EVALUATION_DAYS, min_value=0.0),
            estimated_weeks=sanitize_float(values.get("estimated_weeks"), DEFAULT_ESTIMATED_WEEKS, min_value=0.0),
            discount_amount=sanitize_float(values.get("discount_amount"), 0.0, min_value=0.0),
            prepayment_pct=sanitize_float(values.get("prepayment_pct"), DEFAULT_PREPAYMENT_PCT, min_value=0.0, max_value=100.0),
            admin_notes=notes if isinstance(notes, str) else "",
        )
