"""Rate table for standard service lines and risk profiles."""
from enum import Enum
from typing import Dict


class SystemKey(str, Enum):
    """Tags identifying the standard, regenerable service lines."""
    GPS_GRID_LAYOUT = "gpsGridLayout"
    DATA_COLLECTION = "dataCollection"
    DATA_PROCESSING = "dataProcessing"
    EVALUATION_REPORTING = "evaluationReporting"


class RiskProfile(str, Enum):
    """Three-tier site risk classification."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Per-unit rate factor applied to the effective service factor
SERVICE_RATE_FACTORS: Dict[SystemKey, float] = {
    SystemKey.GPS_GRID_LAYOUT: 0.06,
    SystemKey.DATA_COLLECTION: 0.37,
    SystemKey.DATA_PROCESSING: 0.23,
    SystemKey.EVALUATION_REPORTING: 0.34,
}

# Risk multipliers; LOW is the normalization baseline
RISK_MULTIPLIERS: Dict[RiskProfile, int] = {
    RiskProfile.LOW: 4,
    RiskProfile.MEDIUM: 5,
    RiskProfile.HIGH: 7,
}

BASELINE_RISK_MULTIPLIER = RISK_MULTIPLIERS[RiskProfile.LOW]

# Display descriptions for the standard lines, in quote order
STANDARD_LINE_DESCRIPTIONS: Dict[SystemKey, str] = {
    SystemKey.GPS_GRID_LAYOUT: "GPS Grid Layout and Referencing",
    SystemKey.DATA_COLLECTION: "Increment Data Collection",
    SystemKey.DATA_PROCESSING: "Data Processing",
    SystemKey.EVALUATION_REPORTING: "Evaluation and Reporting",
}


def rate_factor(system_key: SystemKey) -> float:
    """
    Get the per-unit rate factor for a standard line.

    Args:
        system_key: Standard line tag (SystemKey or its string value)

    Returns:
        Rate factor

    Raises:
        ValueError: If system_key is not a standard line tag
    """
    return SERVICE_RATE_FACTORS[SystemKey(system_key)]


def risk_multiplier(risk_profile: RiskProfile) -> int:
    """
    Get the multiplier for a risk profile (low=4, medium=5, high=7).

    Raises:
        ValueError: If risk_profile is not a known profile
    """
    return RISK_MULTIPLIERS[RiskProfile(risk_profile)]
