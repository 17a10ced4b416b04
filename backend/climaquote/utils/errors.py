from decimal import Decimal
from typing import Dict, Iterable, Optional
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


def error_response(
    message: str,
    field_errors: Dict[str, str],
    code: int = status.HTTP_422_UNPROCESSABLE_ENTITY,
) -> HTTPException:
    """Return an HTTPException with a consistent structure and log details."""
    logger.error("%s %s", message, field_errors)
    detail = {"message": message, "field_errors": field_errors}
    return HTTPException(status_code=code, detail=detail)


class QuoteEngineError(Exception):
    """Base class for pricing, lifecycle and acceptance failures.

    ``status_code`` is the HTTP status the API answers with; ``recoverable``
    tells whether the end user can fix the input and retry.
    """

    code = "quote_error"
    status_code = status.HTTP_409_CONFLICT
    recoverable = False

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def field_errors(self) -> Dict[str, str]:
        if self.field:
            return {self.field: self.code}
        return {}


class QuoteNotFound(QuoteEngineError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, quote_id: int) -> None:
        super().__init__(f"Quote {quote_id} not found", field="quote_id")
        self.quote_id = quote_id


class IncompleteSelection(QuoteEngineError):
    code = "incomplete_selection"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    recoverable = True


class QuoteLocked(QuoteEngineError):
    code = "quote_locked"

    def __init__(self, quote_id: int, current_status: str) -> None:
        super().__init__(
            f"Quote {quote_id} is {current_status}; only draft quotes can be edited",
            field="status",
        )
        self.quote_id = quote_id
        self.current_status = current_status


class InvalidTransition(QuoteEngineError):
    code = "invalid_transition"

    def __init__(self, old: str, new: str, reason: Optional[str] = None) -> None:
        message = f"Illegal quote transition {old} -> {new}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, field="status")
        self.old = old
        self.new = new
        self.reason = reason


class ReconciliationMismatch(QuoteEngineError):
    """Stored header total disagrees with the persisted line items."""

    code = "reconciliation_mismatch"

    def __init__(self, quote_id: int, expected: Decimal, actual: Decimal, problems: Iterable[str] = ()) -> None:
        self.problems = list(problems)
        detail = "; ".join(self.problems) if self.problems else f"total {actual} != items {expected}"
        super().__init__(f"Quote {quote_id} does not reconcile: {detail}", field="total_amount")
        self.quote_id = quote_id
        self.expected = expected
        self.actual = actual


class AcceptanceError(QuoteEngineError):
    """A single customer-correctable problem with an acceptance submission."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    recoverable = True


class MissingRequiredField(AcceptanceError):
    code = "required"

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required", field=field)


class InvalidWorkOrderNumber(AcceptanceError):
    code = "invalid"

    def __init__(self, value: Optional[str]) -> None:
        super().__init__("Work order number must be exactly 8 digits", field="work_order_number")
        self.value = value


class SignatureMissing(AcceptanceError):
    code = "required"

    def __init__(self) -> None:
        super().__init__("A signature is required to accept the quote", field="signature")


class TermsNotAccepted(AcceptanceError):
    code = "required"

    def __init__(self) -> None:
        super().__init__("The terms and conditions must be accepted", field="terms_accepted")


class AcceptanceRejected(QuoteEngineError):
    """Carries every individual problem found in one confirm attempt."""

    code = "acceptance_rejected"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    recoverable = True

    def __init__(self, errors: Iterable[AcceptanceError]) -> None:
        self.errors = list(errors)
        super().__init__("Quote acceptance is incomplete")

    def field_errors(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for err in self.errors:
            out.update(err.field_errors())
        return out


class ExtractionUnavailable(QuoteEngineError):
    code = "extraction_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ExtractionTimeout(QuoteEngineError):
    code = "upstream_timeout"
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class ExtractionFailed(QuoteEngineError):
    code = "extraction_failed"
    status_code = status.HTTP_502_BAD_GATEWAY
