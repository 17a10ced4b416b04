import logging
import pytest
from fastapi import HTTPException
from sqlalchemy.orm.exc import StaleDataError

from climaquote.crud import crud_quote
from climaquote.utils.errors import (
    AcceptanceRejected,
    InvalidWorkOrderNumber,
    MissingRequiredField,
    QuoteLocked,
    error_response,
)

from conftest import STAFF_HEADERS


def test_error_response_logs(caplog):
    caplog.set_level(logging.ERROR, logger="climaquote.utils.errors")
    with pytest.raises(HTTPException) as exc:
        raise error_response("Invalid", {"field": "bad"})
    assert exc.value.status_code == 422
    assert exc.value.detail == {"message": "Invalid", "field_errors": {"field": "bad"}}
    assert any(
        "Invalid" in r.getMessage() and "'field': 'bad'" in r.getMessage()
        for r in caplog.records
    )


def test_acceptance_rejected_merges_field_errors():
    exc = AcceptanceRejected([MissingRequiredField("email"), InvalidWorkOrderNumber("12")])
    assert exc.status_code == 422
    assert exc.recoverable
    assert exc.field_errors() == {"email": "required", "work_order_number": "invalid"}


def test_quote_locked_is_a_hard_failure():
    exc = QuoteLocked(7, "accepted")
    assert exc.status_code == 409
    assert not exc.recoverable
    assert "Quote 7 is accepted" in exc.message


def test_stale_write_maps_to_conflict(client, monkeypatch):
    def stale(*args, **kwargs):
        raise StaleDataError("UPDATE statement on table 'quotes' expected to update 1 row(s); 0 were matched.")

    monkeypatch.setattr(crud_quote, "update_financing", stale)
    response = client.put(
        "/api/v1/quotes/1/financing", json={"term_months": 24}, headers=STAFF_HEADERS
    )
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "conflict"
