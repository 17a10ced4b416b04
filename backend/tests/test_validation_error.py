from conftest import STAFF_HEADERS


def test_line_item_validation_errors_are_listed(client):
    response = client.post(
        "/api/v1/quotes",
        json={"line_items": [{"description": "", "quantity": 0, "unit_price": "-1"}]},
        headers=STAFF_HEADERS,
    )
    assert response.status_code == 422
    fields = {err["loc"][-1] for err in response.json()["detail"]}
    assert fields == {"description", "quantity", "unit_price"}


def test_missing_upload_uses_field_errors(client):
    response = client.post("/api/v1/catalog/extract", headers=STAFF_HEADERS)
    assert response.status_code == 422
    assert response.json()["detail"] == {
        "message": "No file provided",
        "field_errors": {"file": "required"},
    }


def test_oversized_quantity_is_422(client):
    response = client.post(
        "/api/v1/quotes",
        json={"line_items": [{"description": "Tubería", "quantity": 10**19, "unit_price": "10"}]},
        headers=STAFF_HEADERS,
    )
    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "quantity"
