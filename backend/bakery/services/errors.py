# Overview: Business-rule exceptions raised by the workflow services.

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for expected, user-visible failures of a workflow operation."""
    error_code = "workflow_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class NotFoundError(WorkflowError):
    """A referenced record does not exist."""
    error_code = "not_found"


class InvalidStateError(WorkflowError):
    """The record's current status does not permit the operation."""
    error_code = "invalid_state"


class InsufficientStockError(WorkflowError):
    """At least one requested quantity exceeds what the holder has."""
    error_code = "insufficient_stock"


class ValidationError(WorkflowError):
    """Missing or malformed input."""
    error_code = "validation_error"


class TransientStoreError(WorkflowError):
    """The database kept rejecting the transaction after every retry."""
    error_code = "transient_store_error"


class PaymentGatewayError(WorkflowError):
    """The payment gateway could not be reached or rejected the transaction."""
    error_code = "payment_gateway_error"
