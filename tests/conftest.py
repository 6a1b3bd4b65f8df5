"""Pytest configuration and fixtures for quote engine tests."""
import os
import tempfile

# Must be set before quote_engine.config.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE_PATH", os.path.join(tempfile.gettempdir(), "quote-engine-test-logs"))
os.environ.setdefault("FLASK_ENV", "testing")
os.environ.setdefault("FLASK_DEBUG", "0")
os.environ.setdefault("API_TOKENS", "test-token")

import pytest
from unittest.mock import patch

from quote_engine.services.draft_store import InMemoryDraftStore
from quote_engine.services.line_items import LineItem, LineItemCategory
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.services.rate_table import RiskProfile, SystemKey

TEST_TOKEN = "test-token"


@pytest.fixture
def auth_headers():
    """Authorization header accepted by the quote API under test."""
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def database():
    """
    Fresh schema on the in-memory SQLite database.

    Yields:
        The scoped session factory
    """
    from quote_engine.database import SessionLocal, init_db, drop_db
    drop_db()
    init_db()
    try:
        yield SessionLocal
    finally:
        SessionLocal.remove()
        drop_db()


@pytest.fixture
def db_session(database):
    """Database session bound to the fresh schema."""
    db = database()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def service_request(db_session):
    """
    Persisted service request in 'pending' status.

    Returns:
        request_id of the created request
    """
    from quote_engine.models import ServiceRequest
    request = ServiceRequest(
        request_id="req-100",
        project_name="Forest Increment Survey",
        client_id="client-1",
        survey_area_sqm=500.0,
        status="pending"
    )
    db_session.add(request)
    db_session.commit()
    return request.request_id


@pytest.fixture
def app(database):
    """Flask app with logging setup patched out."""
    from quote_engine.app import create_app
    with patch('quote_engine.app.setup_logging'):
        app = create_app()
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def draft_store():
    """In-memory draft store."""
    return InMemoryDraftStore()


@pytest.fixture
def sample_params():
    """
    Parameters for a 500 sq m medium-risk survey with initiation costs.

    Returns:
        QuoteParameters
    """
    return QuoteParameters(
        survey_area_sqm=500.0,
        service_factor=200.0,
        risk_profile=RiskProfile.MEDIUM,
        clearance_cost=10000.0,
        mobilization_cost=5000.0,
        accommodation_cost=0.0,
        discount_amount=0.0,
        prepayment_pct=40.0,
        admin_notes="Site access via north gate"
    )


@pytest.fixture
def sample_lines():
    """
    One standard row and one custom row.

    Returns:
        List of LineItem
    """
    return [
        LineItem(
            id="li-1",
            description="GPS Grid Layout and Referencing",
            quantity=500.0,
            unit_price=15.0,
            category=LineItemCategory.PROFESSIONAL_SERVICE,
            system_key=SystemKey.GPS_GRID_LAYOUT
        ),
        LineItem(
            id="li-custom",
            description="Travel / Transport",
            quantity=1.0,
            unit_price=2500.0,
            uom="Lump Sum",
            category=LineItemCategory.OTHER
        ),
    ]


@pytest.fixture
def submit_payload():
    """
    Submit payload as produced by build_submit_payload.

    Returns:
        Dictionary with camelCase keys
    """
    return {
        "serviceFactor": 200,
        "riskProfile": "medium",
        "riskMultiplier": 5,
        "areaDiscountedSqm": 0,
        "serviceHeadCount": 2,
        "clearanceAccessCost": 10000,
        "mobilizationCost": 5000,
        "accommodationCost": 0,
        "dataCollectionDays": 3,
        "evaluationDays": 5,
        "estimatedWeeks": 3,
        "discountAmount": 0,
        "prepaymentPct": 40,
        "notes": "Site access via north gate",
        "lineItems": [
            {"description": "GPS Grid Layout and Referencing", "quantity": 500, "unitPrice": 15,
             "uom": "SQ M.", "category": "professional_service", "sortOrder": 0},
            {"description": "Increment Data Collection", "quantity": 500, "unitPrice": 93,
             "uom": "SQ M.", "category": "professional_service", "sortOrder": 1},
            {"description": "Data Processing", "quantity": 500, "unitPrice": 58,
             "uom": "SQ M.", "category": "professional_service", "sortOrder": 2},
            {"description": "Evaluation and Reporting", "quantity": 500, "unitPrice": 85,
             "uom": "SQ M.", "category": "professional_service", "sortOrder": 3},
        ]
    }
