from decimal import Decimal

from conftest import STAFF_HEADERS, TENANT, split_payload

API = "/api/v1"


def create_product(client, **overrides):
    payload = split_payload()
    payload.update(overrides)
    res = client.post(f"{API}/catalog/products", json=payload, headers=STAFF_HEADERS)
    assert res.status_code == 201, res.text
    return res.json()


FULL_SELECTION = {"variant_index": 0, "kit_index": 0, "extras": {"0": 2, "1": 1}}

ACCEPTANCE_FORM = {
    "action": "confirm",
    "name": "Marta",
    "surname": "Puig",
    "email": "marta@example.com",
    "phone": "600111222",
    "address": "C/ Major 1",
    "population": "Girona",
    "tax_id": "12345678Z",
    "is_technician": True,
    "work_order_number": "12345678",
    "signature": "data:image/png;base64,iVBORw0KGgo=",
    "terms_accepted": True,
}


def test_staff_routes_require_tenant(client):
    res = client.get(f"{API}/quotes")
    assert res.status_code == 400
    assert res.json()["detail"]["field_errors"] == {"tenant_id": "required"}


def test_price_preview_lists_every_financing_term(client):
    product = create_product(client)
    res = client.post(f"{API}/catalog/products/{product['id']}/price", json=FULL_SELECTION, headers=STAFF_HEADERS)
    assert res.status_code == 200, res.text
    body = res.json()
    assert Decimal(body["subtotal"]) == Decimal("1105")
    assert [Decimal(i["line_total"]) for i in body["items"]] == [
        Decimal("900"),
        Decimal("150"),
        Decimal("20"),
        Decimal("35"),
    ]
    fees = {o["term_months"]: Decimal(o["monthly_fee_rounded"]) for o in body["financing_options"]}
    assert fees[24] == Decimal("49.84")
    assert sorted(fees) == [12, 24, 36, 48, 60]


def test_price_preview_without_variant_is_422(client):
    product = create_product(client)
    res = client.post(f"{API}/catalog/products/{product['id']}/price", json={"kit_index": 0}, headers=STAFF_HEADERS)
    assert res.status_code == 422
    detail = res.json()["detail"]
    assert detail["code"] == "incomplete_selection"
    assert detail["field_errors"] == {"variant_index": "incomplete_selection"}


def test_end_to_end_quote_to_acceptance(client):
    product = create_product(client)
    res = client.post(
        f"{API}/quotes",
        json={"selection": {"product_id": product["id"], **FULL_SELECTION}, "financing_months": 24},
        headers=STAFF_HEADERS,
    )
    assert res.status_code == 201, res.text
    quote = res.json()
    assert quote["status"] == "draft"
    assert quote["tenant_id"] == TENANT
    assert Decimal(quote["total_amount"]) == Decimal("1105")
    assert sum(Decimal(i["line_total"]) for i in quote["items"]) == Decimal("1105")
    assert quote["financing"]["term_months"] == 24
    assert Decimal(quote["financing"]["monthly_fee_rounded"]) == Decimal("49.84")
    assert quote["acceptance_url"].endswith(f"/#/presupuestos/{quote['id']}/aceptar")
    qid = quote["id"]

    link = client.get(f"{API}/quotes/{qid}/acceptance-link", headers=STAFF_HEADERS).json()
    assert link["quote_no"] == quote["quote_no"]

    assert client.post(f"{API}/quotes/{qid}/send", headers=STAFF_HEADERS).json()["status"] == "sent"

    opened = client.get(f"{API}/public/quotes/{qid}")
    assert opened.status_code == 200
    assert opened.json()["status"] == "viewed"

    bad = dict(ACCEPTANCE_FORM, work_order_number="1234", signature="")
    res = client.post(f"{API}/public/quotes/{qid}/acceptance", json=bad)
    assert res.status_code == 422
    assert res.json()["detail"]["field_errors"] == {
        "work_order_number": "invalid",
        "signature": "required",
    }

    res = client.post(f"{API}/public/quotes/{qid}/acceptance", json=ACCEPTANCE_FORM)
    assert res.status_code == 200, res.text
    accepted = res.json()
    assert accepted["status"] == "accepted"
    assert accepted["client_name"] == "Marta Puig"
    assert accepted["work_order_number"] == "12345678"

    res = client.put(
        f"{API}/quotes/{qid}/items",
        json={"items": [{"description": "Otro", "quantity": 1, "unit_price": "1"}]},
        headers=STAFF_HEADERS,
    )
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "quote_locked"

    res = client.post(f"{API}/public/quotes/{qid}/reject")
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "invalid_transition"

    pdf = client.get(f"{API}/public/quotes/{qid}/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_draft_editing_endpoints(client):
    res = client.post(
        f"{API}/quotes",
        json={"line_items": [{"description": "Caldera", "quantity": 1, "unit_price": "1800"}]},
        headers=STAFF_HEADERS,
    )
    qid = res.json()["id"]

    res = client.put(f"{API}/quotes/{qid}/financing", json={"term_months": 60}, headers=STAFF_HEADERS)
    assert Decimal(res.json()["financing"]["monthly_fee"]) == Decimal("1800") * Decimal("0.021183")

    res = client.put(
        f"{API}/quotes/{qid}/items",
        json={"items": [{"description": "Caldera", "quantity": 1, "unit_price": "2000"}]},
        headers=STAFF_HEADERS,
    )
    assert Decimal(res.json()["total_amount"]) == Decimal("2000")
    assert Decimal(res.json()["financing"]["monthly_fee"]) == Decimal("2000") * Decimal("0.021183")

    res = client.put(f"{API}/quotes/{qid}/financing", json={"term_months": None}, headers=STAFF_HEADERS)
    assert res.json()["financing"] is None

    res = client.patch(f"{API}/quotes/{qid}", json={"name": "Joan", "address": "Av. Diagonal 1"}, headers=STAFF_HEADERS)
    assert res.json()["client_name"] == "Joan"

    res = client.get(f"{API}/quotes", params={"status": "draft"}, headers=STAFF_HEADERS)
    assert [q["id"] for q in res.json()] == [qid]
    assert client.get(f"{API}/quotes/unreconciled", headers=STAFF_HEADERS).json() == []

    res = client.post(f"{API}/quotes/{qid}/expire", headers=STAFF_HEADERS)
    assert res.json()["status"] == "expired"


def test_empty_draft_cannot_be_sent_or_shared(client):
    qid = client.post(f"{API}/quotes", json={}, headers=STAFF_HEADERS).json()["id"]
    res = client.post(f"{API}/quotes/{qid}/send", headers=STAFF_HEADERS)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "invalid_transition"
    res = client.get(f"{API}/quotes/{qid}/acceptance-link", headers=STAFF_HEADERS)
    assert res.status_code == 422
    res = client.post(f"{API}/public/quotes/{qid}/acceptance", json=ACCEPTANCE_FORM)
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "invalid_transition"


def test_quote_with_items_and_selection_is_rejected(client):
    res = client.post(
        f"{API}/quotes",
        json={
            "line_items": [{"description": "A", "quantity": 1, "unit_price": "1"}],
            "selection": {"product_id": 1, "variant_index": 0},
        },
        headers=STAFF_HEADERS,
    )
    assert res.status_code == 422


def test_public_configurator_only_offers_active_products(client):
    active = create_product(client)
    hidden = create_product(client, status="draft")

    res = client.post(
        f"{API}/public/tenants/{TENANT}/quotes",
        json={"product_id": active["id"], **FULL_SELECTION, "locale": "ca"},
    )
    assert res.status_code == 201, res.text
    assert res.json()["locale"] == "ca"
    assert Decimal(res.json()["total_amount"]) == Decimal("1105")

    res = client.post(f"{API}/public/tenants/{TENANT}/quotes", json={"product_id": hidden["id"], "variant_index": 0})
    assert res.status_code == 422
    assert res.json()["detail"]["field_errors"] == {"product_id": "incomplete_selection"}

    res = client.post(f"{API}/public/tenants/other/quotes", json={"product_id": active["id"], "variant_index": 0})
    assert res.status_code == 404


def test_customers_and_quote_link(client):
    res = client.post(
        f"{API}/customers",
        json={"name": "Marta Puig", "email": "marta@example.com", "population": "Girona"},
        headers=STAFF_HEADERS,
    )
    assert res.status_code == 201
    customer = res.json()
    assert client.get(f"{API}/customers", headers=STAFF_HEADERS).json()[0]["id"] == customer["id"]
    assert client.get(f"{API}/customers/{customer['id']}", headers={"X-Tenant-ID": "other"}).status_code == 404

    res = client.post(f"{API}/quotes", json={"customer_id": customer["id"]}, headers=STAFF_HEADERS)
    assert res.json()["client_population"] == "Girona"


def test_unknown_quote_is_404(client):
    res = client.get(f"{API}/public/quotes/999")
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "not_found"


def test_staff_pdf(client):
    qid = client.post(
        f"{API}/quotes",
        json={"line_items": [{"description": "Termo 80 L", "quantity": 1, "unit_price": "320"}]},
        headers=STAFF_HEADERS,
    ).json()["id"]
    res = client.get(f"{API}/quotes/{qid}/pdf", headers=dict(STAFF_HEADERS, **{"X-Locale": "ca"}))
    assert res.status_code == 200
    assert res.content.startswith(b"%PDF")
