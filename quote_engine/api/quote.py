"""Quote API endpoints."""
from flask import Blueprint, request

from quote_engine.services.quote_service_db import QuoteServiceDB
from quote_engine.utils.errors import APIError, QuoteConflictError, success_response
from quote_engine.middleware.auth_middleware import require_auth
from quote_engine.database import SessionLocal

quote_bp = Blueprint('quote', __name__)


@quote_bp.route('/quotes/<request_id>', methods=['GET'])
@require_auth
def get_quote(request_id):
    """
    Get the quote for a service request.
    Requires authentication.
    """
    db = SessionLocal()
    try:
        quote = QuoteServiceDB.get_quote(db, request_id)
        if not quote:
            raise APIError("Quote not found", status_code=404, code="QUOTE_NOT_FOUND")
        return success_response(quote.to_dict())
    finally:
        db.close()


@quote_bp.route('/quotes/<request_id>', methods=['POST'])
@require_auth
def generate_quote(request_id):
    """
    Generate the quote for a service request.
    Requires authentication.
    Totals are recomputed from the submitted line items and parameters.
    """
    data = request.get_json(silent=True) or {}

    db = SessionLocal()
    try:
        quote = QuoteServiceDB.generate_quote(db, request_id, data)
        if not quote:
            raise APIError("Service request not found", status_code=404, code="REQUEST_NOT_FOUND")
        return success_response(quote.to_dict(), status_code=201)
    except QuoteConflictError as e:
        raise APIError(str(e), status_code=409, code="QUOTE_CONFLICT")
    except ValueError as e:
        raise APIError(str(e), status_code=400, code="VALIDATION_ERROR")
    except APIError:
        raise
    except Exception as e:
        raise APIError("Failed to generate quote", status_code=500, code="INTERNAL_ERROR") from e
    finally:
        db.close()


@quote_bp.route('/quotes/<request_id>/accept', methods=['POST'])
@require_auth
def accept_quote(request_id):
    """
    Accept a submitted quote.
    Requires authentication.
    """
    db = SessionLocal()
    try:
        quote = QuoteServiceDB.accept_quote(db, request_id)
        if not quote:
            raise APIError("Quote not found", status_code=404, code="QUOTE_NOT_FOUND")
        return success_response(quote.to_dict())
    except QuoteConflictError as e:
        raise APIError(str(e), status_code=409, code="QUOTE_CONFLICT")
    except APIError:
        raise
    except Exception as e:
        raise APIError("Failed to accept quote", status_code=500, code="INTERNAL_ERROR") from e
    finally:
        db.close()


@quote_bp.route('/quotes/<request_id>/reject', methods=['POST'])
@require_auth
def reject_quote(request_id):
    """
    Reject a submitted quote.
    Requires authentication.
    Body may carry an optional free-text "reason".
    """
    data = request.get_json(silent=True) or {}

    db = SessionLocal()
    try:
        quote = QuoteServiceDB.reject_quote(db, request_id, reason=data.get('reason'))
        if not quote:
            raise APIError("Quote not found", status_code=404, code="QUOTE_NOT_FOUND")
        return success_response(quote.to_dict())
    except QuoteConflictError as e:
        raise APIError(str(e), status_code=409, code="QUOTE_CONFLICT")
    except APIError:
        raise
    except Exception as e:
        raise APIError("Failed to decline quote", status_code=500, code="INTERNAL_ERROR") from e
    finally:
        db.close()
