def test_site_crud(client):
    created = client.post("/api/sites", json={
        "siteName": " Ring Road Package 1 ", "tenderNo": "TND/2024/101",
        "sdAmount": 150000, "department": "PWD",
    }, headers={"X-User-Id": "admin"})
    assert created.status_code == 201
    site = created.json()["data"]
    assert site["id"].startswith("SITE-")
    assert site["siteName"] == "Ring Road Package 1"
    assert site["status"] == "ACTIVE"
    assert site["sdAmount"] == 150000

    client.post("/api/sites", json={"siteName": "Canal Lining", "status": "ON_HOLD"})

    listed = client.get("/api/sites").json()
    assert [s["siteName"] for s in listed["data"]] == ["Canal Lining", "Ring Road Package 1"]
    assert client.get("/api/sites", params={"search": "tnd/2024"}).json()["count"] == 1
    assert client.get("/api/sites", params={"status": "ON_HOLD"}).json()["data"][0]["siteName"] == "Canal Lining"

    updated = client.put(f"/api/sites/{site['id']}", json={"status": "COMPLETED", "siteName": None})
    assert updated.status_code == 200
    assert updated.json()["data"]["status"] == "COMPLETED"
    assert updated.json()["data"]["siteName"] == "Ring Road Package 1"

    deleted = client.delete(f"/api/sites/{site['id']}")
    assert deleted.json()["data"]["isDeleted"] is True
    assert client.get("/api/sites").json()["count"] == 1
    assert client.get("/api/sites/SITE-NOPE").status_code == 404
    assert client.post("/api/sites", json={"siteName": ""}).status_code == 400


def test_ledger_crud(client, make_site):
    make_site("S1")

    created = client.post("/api/ledgers", json={
        "name": "Alpha Traders", "ledgerType": "MATERIAL_SUPPLIER", "siteId": "S1", "mobile": "9876543210",
    })
    assert created.status_code == 201
    ledger_id = created.json()["data"]["id"]
    assert created.json()["data"]["openingBalance"] == 0
    assert created.json()["data"]["site"]["siteName"] == "Ring Road Package 1"

    client.post("/api/ledgers", json={"name": "HP Fuel Point", "ledgerType": "FUEL_STATION"})

    suppliers = client.get("/api/ledgers", params={"ledgerType": "MATERIAL_SUPPLIER"}).json()
    assert [l["id"] for l in suppliers["data"]] == [ledger_id]
    assert client.get("/api/ledgers", params={"search": "98765"}).json()["count"] == 1

    updated = client.put(f"/api/ledgers/{ledger_id}", json={"address": "Indore"})
    assert updated.json()["data"]["address"] == "Indore"
    assert client.put(f"/api/ledgers/{ledger_id}", json={"siteId": "S9"}).status_code == 404

    assert client.delete(f"/api/ledgers/{ledger_id}").status_code == 200
    assert client.get("/api/ledgers").json()["count"] == 1
    assert client.post("/api/ledgers", json={"name": "X", "ledgerType": "NOPE"}).status_code == 400


def test_audit_log_listing(client, make_site):
    make_site("S1")
    expense_id = client.post(
        "/api/site-exp",
        json={"siteId": "S1", "expenseDate": "2024-03-01", "amount": 100},
        headers={"X-User-Id": "clerk", "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
    ).json()["data"]["id"]
    client.delete(f"/api/site-exp/{expense_id}", headers={"X-User-Id": "clerk"})
    client.post("/api/sites", json={"siteName": "Canal Lining"})

    response = client.get("/api/audit-log", params={"module": "SiteExpense", "recordId": expense_id})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert {e["action"] for e in body["data"]} == {"CREATE", "DELETE"}
    create = next(e for e in body["data"] if e["action"] == "CREATE")
    assert create["userId"] == "clerk"
    assert create["ip"] == "203.0.113.9"
    assert create["newData"]["site_id"] == "S1"

    site_entries = client.get("/api/audit-log", params={"module": "Site"}).json()
    assert site_entries["data"][0]["userId"] == "SYSTEM"

    paged = client.get("/api/audit-log", params={"limit": 1}).json()
    assert paged["count"] == 3
    assert len(paged["data"]) == 1


def test_root(client):
    assert client.get("/").json() == {"message": "Welcome to the Site ERP APIs!"}
