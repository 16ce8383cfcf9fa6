"""Integration tests for orthodontic contracts"""

import uuid
from fastapi.testclient import TestClient


def contract_body(**overrides):
    body = {
        "patient_id": str(uuid.uuid4()),
        "monthly_amount_cents": 20000,
        "total_months": 24,
        "due_day": 10,
        "start_date": "2024-01-15",
    }
    body.update(overrides)
    return body


def test_create_ortho_contract_schedule(client: TestClient):
    """24 months of R$200.00 starting 2024-01-15, billed on the 10th"""
    response = client.post("/v1/ortho-contracts", json=contract_body())

    assert response.status_code == 201
    data = response.json()
    installments = data["installments"]
    assert data["contract"]["status"] == "active"
    assert data["total_cents"] == 480000
    assert len(installments) == 24
    assert installments[0]["due_date"] == "2024-02-10"
    assert installments[-1]["due_date"] == "2026-01-10"
    assert all(i["amount_cents"] == 20000 for i in installments)
    assert all(i["origin_type"] == "ortho_contract" for i in installments)
    assert all(i["origin_id"] == data["contract"]["id"] for i in installments)
    assert installments[0]["description"] == "Ortodontia - Mês 1/24"


def test_ortho_contract_receivables_listing(client: TestClient):
    contract = client.post("/v1/ortho-contracts", json=contract_body(total_months=6)).json()["contract"]
    client.post("/v1/receivables", json={"amount_cents": 5000, "due_date": "2030-01-10"})

    rows = client.get(f"/v1/ortho-contracts/{contract['id']}/receivables").json()

    assert len(rows) == 6
    assert [r["installment_num"] for r in rows] == list(range(1, 7))
    assert [c["id"] for c in client.get("/v1/ortho-contracts").json()] == [contract["id"]]


def test_ortho_contract_rejects_due_day_outside_range(client: TestClient):
    response = client.post("/v1/ortho-contracts", json=contract_body(due_day=31))

    assert response.status_code == 422
    assert response.json()["error"] == "InvalidDueDay"
    # Nothing is written when the schedule is invalid
    assert client.get("/v1/ortho-contracts").json() == []
    assert client.get("/v1/receivables").json() == []


def test_cancel_ortho_contract_keeps_paid_installments(client: TestClient):
    data = client.post("/v1/ortho-contracts", json=contract_body()).json()
    contract_id = data["contract"]["id"]
    first = data["installments"][0]
    client.post(f"/v1/receivables/{first['id']}/settle", json={"amount_cents": 20000, "version": 1})

    response = client.post(f"/v1/ortho-contracts/{contract_id}/cancel")

    assert response.status_code == 200
    assert response.json()["contract"]["status"] == "cancelled"
    assert response.json()["cancelled_installments"] == 23

    rows = client.get(f"/v1/ortho-contracts/{contract_id}/receivables").json()
    assert rows[0]["status"] == "paid"
    assert all(r["status"] == "renegotiated" for r in rows[1:])

    again = client.post(f"/v1/ortho-contracts/{contract_id}/cancel")
    assert again.status_code == 409


def test_ortho_contract_is_clinic_scoped(client: TestClient, other_client: TestClient):
    contract = client.post("/v1/ortho-contracts", json=contract_body(total_months=3)).json()["contract"]

    assert other_client.get("/v1/ortho-contracts").json() == []
    assert other_client.get(f"/v1/ortho-contracts/{contract['id']}/receivables").status_code == 404
    assert other_client.post(f"/v1/ortho-contracts/{contract['id']}/cancel").status_code == 404
