from datetime import datetime

from site_erp.models import AuditLog, SiteTransaction, TxnSource


def create_expense(client, **overrides):
    payload = {"siteId": "S1", "expenseDate": "2024-03-01", "amount": 500}
    payload.update(overrides)
    return client.post("/api/site-exp", json=payload, headers={"X-User-Id": "U7"})


def test_created_expense_is_listed_for_its_site(client, make_site):
    make_site("S1")

    response = create_expense(client, expenseTitle="Diesel")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["amount"] == 500
    assert body["data"]["siteId"] == "S1"
    expense_id = body["data"]["id"]

    listed = client.get("/api/site-exp/site/S1").json()
    assert listed["count"] == 1
    row = listed["data"][0]
    assert row["id"] == expense_id
    assert row["isAuto"] is False
    assert row["source"] == "MANUAL"
    assert row["expenseTitle"] == "Diesel"
    assert row["site"] == {"id": "S1", "siteName": "Ring Road Package 1"}


def test_create_records_mirror_and_acting_user(client, db, make_site):
    make_site("S1")

    expense_id = create_expense(client).json()["data"]["id"]

    txn = db.query(SiteTransaction).filter(SiteTransaction.source_id == expense_id).one()
    assert txn.source == TxnSource.SITE_EXPENSE
    assert db.query(AuditLog).filter(AuditLog.record_id == expense_id).one().user_id == "U7"


def test_create_validation_errors(client, make_site):
    make_site("S1")

    zero = create_expense(client, amount=0)
    assert zero.status_code == 400
    assert zero.json() == {"success": False, "message": "Invalid amount"}

    bad_date = create_expense(client, expenseDate="01/03/2024")
    assert bad_date.status_code == 400
    assert bad_date.json()["message"] == "Invalid expenseDate"

    missing_site = client.post("/api/site-exp", json={"expenseDate": "2024-03-01", "amount": 10})
    assert missing_site.status_code == 400
    assert missing_site.json()["success"] is False

    unknown_site = create_expense(client, siteId="NOPE")
    assert unknown_site.status_code == 404


def test_oversized_amounts_are_rejected(client, make_site):
    make_site("S1")

    for amount in (1e30, 10000000000000):
        response = create_expense(client, amount=amount)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid amount"

    expense_id = create_expense(client).json()["data"]["id"]
    assert client.put(f"/api/site-exp/{expense_id}", json={"amount": 1e30}).status_code == 400

    txn = client.post("/api/site-transactions", json={
        "siteId": "S1", "txnDate": "2024-03-01", "source": "VOUCHER",
        "sourceId": "V-BIG", "nature": "DEBIT", "amount": 1e30,
    })
    assert txn.status_code == 400
    assert txn.json()["message"] == "Invalid amount"


def test_merged_listing_includes_auto_material_rows(client, make_site, make_supplier, make_material_row):
    make_site("S1")
    supplier = make_supplier("Alpha Traders")
    make_material_row(supplier, material="Steel TMT", total_amt="12000", entry_date=datetime(2024, 4, 1))
    create_expense(client, expenseDate="2024-03-01")

    rows = client.get("/api/site-exp").json()["data"]

    assert [r["isAuto"] for r in rows] == [True, False]
    auto = rows[0]
    assert auto["id"] == "AUTO_MSL_S1_steel_tmt"
    assert auto["amount"] == 12000
    assert auto["source"] == "MATERIAL_LEDGER"
    assert auto["paymentDetails"] == "Alpha Traders"
    assert auto["summary"] == "Material Purchase (Auto)"


def test_update_soft_delete_restore_and_hard_delete(client, db, make_site):
    make_site("S1")
    expense_id = create_expense(client).json()["data"]["id"]

    updated = client.put(f"/api/site-exp/{expense_id}", json={"amount": 650, "paymentDetails": "UPI"})
    assert updated.status_code == 200
    assert updated.json()["data"]["amount"] == 650
    assert updated.json()["data"]["paymentDetails"] == "UPI"

    deleted = client.delete(f"/api/site-exp/{expense_id}")
    assert deleted.status_code == 200
    assert deleted.json()["data"]["isDeleted"] is True
    assert client.get("/api/site-exp/site/S1").json()["data"] == []
    deleted_list = client.get("/api/site-exp/deleted", params={"siteId": "S1"}).json()
    assert [e["id"] for e in deleted_list["data"]] == [expense_id]

    restored = client.patch(f"/api/site-exp/{expense_id}/restore")
    assert restored.status_code == 200
    assert restored.json()["data"]["isDeleted"] is False

    gone = client.delete(f"/api/site-exp/{expense_id}/hard")
    assert gone.status_code == 200
    assert gone.json()["data"] == {"id": expense_id}
    assert db.query(SiteTransaction).count() == 0


def test_unknown_expense_returns_404(client):
    assert client.put("/api/site-exp/SEXP-NOPE", json={"amount": 1}).status_code == 404
    assert client.delete("/api/site-exp/SEXP-NOPE").status_code == 404
    assert client.patch("/api/site-exp/SEXP-NOPE/restore").status_code == 404
    assert client.delete("/api/site-exp/SEXP-NOPE/hard").status_code == 404
