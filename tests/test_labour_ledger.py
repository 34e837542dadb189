from datetime import datetime
from decimal import Decimal

import pytest

from site_erp.common.exceptions import NotFoundError, ValidationError
from site_erp.models import LabourPayment, PaymentMode
from site_erp.services.labour_ledger_service import LabourLedgerService


@pytest.fixture
def service(db, make_site):
    make_site("S1")
    make_site("S2", site_name="Canal Lining")
    return LabourLedgerService(db)


@pytest.fixture
def contractor(service):
    return service.create_contractor({"name": "  Ramesh Labour Co ", "mobile": ""})


def test_create_contractor(contractor):
    assert contractor.id.startswith("LABC-")
    assert contractor.name == "Ramesh Labour Co"
    assert contractor.mobile is None


def test_contractor_name_is_required(service):
    with pytest.raises(ValidationError, match="name is required"):
        service.create_contractor({"name": "   "})


def test_contract_requires_known_contractor_and_site(service, contractor):
    with pytest.raises(ValidationError, match="contractorId and siteId required"):
        service.create_contract({"contractor_id": contractor.id})
    with pytest.raises(NotFoundError):
        service.create_contract({"contractor_id": "LABC-NOPE", "site_id": "S1"})
    with pytest.raises(NotFoundError):
        service.create_contract({"contractor_id": contractor.id, "site_id": "S9"})


def test_payment_attaches_to_contract_at_same_site(service, contractor):
    contract = service.create_contract({
        "contractor_id": contractor.id, "site_id": "S1", "agreed_amount": "100000",
    })

    at_s1 = service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1",
        "payment_date": "2024-03-02", "amount": 5000,
    })
    at_s2 = service.create_payment({
        "contractor_id": contractor.id, "site_id": "S2",
        "payment_date": "2024-03-02", "amount": 5000, "mode": PaymentMode.UPI,
    })

    assert at_s1.contract_id == contract.id
    assert at_s1.mode == PaymentMode.CASH
    assert at_s2.contract_id is None
    assert at_s2.mode == PaymentMode.UPI


@pytest.mark.parametrize("with_contractor, payload, error", [
    (False, {"site_id": "S1", "payment_date": "2024-03-02", "amount": 10}, "are required"),
    (True, {"site_id": "S1", "payment_date": "bad", "amount": 10}, "are required"),
    (True, {"site_id": "S1", "payment_date": "2024-03-02", "amount": 0}, "amount must be > 0"),
])
def test_payment_validation(service, contractor, with_contractor, payload, error):
    if with_contractor:
        payload = dict(payload, contractor_id=contractor.id)

    with pytest.raises(ValidationError, match=error):
        service.create_payment(payload)


def test_contractor_ledger_summary(service, contractor, db):
    at_s1 = service.create_contract({
        "contractor_id": contractor.id, "site_id": "S1", "agreed_amount": 100000,
    })
    at_s2 = service.create_contract({
        "contractor_id": contractor.id, "site_id": "S2", "agreed_amount": 50000,
    })
    # explicit contract wins over the site of the payment
    service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1", "contract_id": at_s2.id,
        "payment_date": "2024-03-01", "amount": 30000,
    })
    service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1",
        "payment_date": "2024-03-05", "amount": 10000,
    })
    # legacy row without a contract
    db.add(LabourPayment(
        contractor_id=contractor.id, site_id="S1",
        payment_date=datetime(2024, 3, 8), amount=Decimal("20000"),
    ))
    db.commit()

    ledger = service.get_contractor_ledger(contractor.id)

    assert ledger["summary"] == {
        "contractor_id": contractor.id,
        "total_agreed": 150000.0,
        "total_paid": 60000.0,
        "total_balance": 90000.0,
    }
    by_contract = {row["contract_id"]: row for row in ledger["contracts"]}
    assert by_contract[at_s1.id]["paid_amount"] == 30000.0
    assert by_contract[at_s1.id]["balance_amount"] == 70000.0
    assert by_contract[at_s1.id]["site_name"] == "Ring Road Package 1"
    assert by_contract[at_s2.id]["paid_amount"] == 30000.0
    assert by_contract[at_s2.id]["balance_amount"] == 20000.0
    assert [p.payment_date.day for p in ledger["payments"]] == [8, 5, 1]

    site_only = service.get_contractor_ledger(contractor.id, site_id="S2")
    assert [row["contract_id"] for row in site_only["contracts"]] == [at_s2.id]
    assert site_only["summary"]["total_paid"] == 0.0


def test_deletes_are_refused_while_dependents_exist(service, contractor):
    contract = service.create_contract({"contractor_id": contractor.id, "site_id": "S1"})
    payment = service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1",
        "payment_date": "2024-03-02", "amount": 100,
    })

    with pytest.raises(ValidationError, match="payments exist"):
        service.delete_contract(contract.id)
    with pytest.raises(ValidationError, match="contracts/payments exist"):
        service.delete_contractor(contractor.id)

    assert service.delete_payment(payment.id) is True
    assert service.delete_contract(contract.id) is True
    assert service.delete_contractor(contractor.id) is True
    assert service.get_contractor(contractor.id) is None


def test_update_payment(service, contractor):
    payment = service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1",
        "payment_date": "2024-03-02", "amount": 100,
    })

    updated = service.update_payment(payment.id, {"amount": "250", "ref_no": "UTR123", "site_id": "S2"})

    assert updated.amount == Decimal("250.00")
    assert updated.ref_no == "UTR123"
    assert updated.site_id == "S2"
    with pytest.raises(NotFoundError):
        service.update_payment("LABP-NOPE", {"amount": 1})


def test_update_payment_checks_contract(service, contractor):
    contract = service.create_contract({"contractor_id": contractor.id, "site_id": "S1"})
    payment = service.create_payment({
        "contractor_id": contractor.id, "site_id": "S1",
        "payment_date": "2024-03-02", "amount": 100,
    })

    with pytest.raises(NotFoundError, match="Contract not found"):
        service.update_payment(payment.id, {"contract_id": "LABK-NOPE"})

    service.db.rollback()
    assert service.get_payment(payment.id).contract_id == contract.id
    assert service.update_payment(payment.id, {"contract_id": ""}).contract_id is None


def test_update_payment_with_unknown_contract_is_404(client, make_site):
    make_site("S1")
    base = "/api/labour-contractor-ledger"
    contractor_id = client.post(f"{base}/contractors", json={"name": "Suresh Gang"}).json()["data"]["id"]
    payment_id = client.post(f"{base}/payments", json={
        "contractorId": contractor_id, "siteId": "S1", "paymentDate": "2024-03-09", "amount": 100,
    }).json()["data"]["id"]

    response = client.put(f"{base}/payments/{payment_id}", json={"contractId": "LABK-NOPE"})

    assert response.status_code == 404
    assert response.json()["message"] == "Contract not found"


# ---------------------------------------------------------------------------
# HTTP surface
# ---------------------------------------------------------------------------


def test_labour_ledger_endpoints(client, make_site):
    make_site("S1")
    base = "/api/labour-contractor-ledger"

    created = client.post(f"{base}/contractors", json={"name": "Suresh Gang"})
    assert created.status_code == 201
    contractor_id = created.json()["data"]["id"]

    contract = client.post(f"{base}/contracts", json={
        "contractorId": contractor_id, "siteId": "S1", "agreedAmount": 80000,
    })
    assert contract.status_code == 201
    contract_id = contract.json()["data"]["id"]

    payment = client.post(f"{base}/payments", json={
        "contractorId": contractor_id, "siteId": "S1", "paymentDate": "2024-03-09",
        "amount": 12500, "mode": "BANK",
    })
    assert payment.status_code == 201
    assert payment.json()["data"]["contractId"] == contract_id
    assert payment.json()["data"]["mode"] == "BANK"

    ledger = client.get(f"{base}/ledger/{contractor_id}").json()["data"]
    assert ledger["summary"]["totalPaid"] == 12500
    assert ledger["summary"]["totalBalance"] == 67500
    assert ledger["contracts"][0]["siteName"] == "Ring Road Package 1"
    assert ledger["payments"][0]["contractor"]["name"] == "Suresh Gang"

    payments = client.get(f"{base}/payments", params={"siteId": "S1", "from": "2024-03-09", "to": "2024-03-09"})
    assert payments.json()["count"] == 1

    refused = client.delete(f"{base}/contractors/{contractor_id}")
    assert refused.status_code == 400
    assert refused.json()["message"] == "Cannot delete contractor: contracts/payments exist"

    assert client.post(f"{base}/payments", json={
        "contractorId": contractor_id, "siteId": "S1", "paymentDate": "2024-03-09", "amount": 0,
    }).status_code == 400
    assert client.get(f"{base}/ledger/LABC-NOPE").status_code == 404


def test_labour_payments_show_up_as_site_expenses(client, make_site):
    make_site("S1")
    base = "/api/labour-contractor-ledger"
    contractor_id = client.post(f"{base}/contractors", json={"name": "Suresh Gang"}).json()["data"]["id"]
    for day, amount in (("2024-03-01", 4000), ("2024-03-07", 6000)):
        client.post(f"{base}/payments", json={
            "contractorId": contractor_id, "siteId": "S1", "paymentDate": day, "amount": amount,
        })

    rows = client.get("/api/site-exp/site/S1").json()["data"]

    assert len(rows) == 1
    assert rows[0]["id"] == f"AUTO_LAB_S1_{contractor_id}"
    assert rows[0]["amount"] == 10000
    assert rows[0]["source"] == "LABOUR_CONTRACTOR_LEDGER"
    assert rows[0]["isAuto"] is True
