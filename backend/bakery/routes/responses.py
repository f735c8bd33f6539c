# Overview: Shared JSON response helpers for the route blueprints.

from flask import jsonify

from ..services.errors import (
    InsufficientStockError,
    InvalidStateError,
    NotFoundError,
    PaymentGatewayError,
    TransientStoreError,
    ValidationError,
)


STATUS_BY_ERROR_CODE = {
    NotFoundError.error_code: 404,
    InvalidStateError.error_code: 409,
    InsufficientStockError.error_code: 409,
    ValidationError.error_code: 400,
    TransientStoreError.error_code: 503,
    PaymentGatewayError.error_code: 502,
}


def action_response(result, success_status: int = 200):
    """Serialize an ActionResult; failures map error_code to an HTTP status."""
    if result.success:
        return jsonify(result.to_dict()), success_status
    return jsonify(result.to_dict()), STATUS_BY_ERROR_CODE.get(result.error_code, 400)


def missing_field(exc: KeyError):
    return jsonify({"error": f"Missing required field: {exc}"}), 400


def internal_error():
    return jsonify({"error": "Internal server error"}), 500
