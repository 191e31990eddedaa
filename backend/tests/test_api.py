"""End-to-end tests through the FastAPI routes."""
from conftest import HEADERS


def _ledger(client, name, account_type, opening_balance="0.00"):
    response = client.post("/ledgers/", headers=HEADERS, json={
        "name": name, "account_type": account_type, "opening_balance": opening_balance,
    })
    assert response.status_code == 201, response.text
    return response.json()


def _receipt(client, payer_id, amount, voucher_date="2024-04-01"):
    return client.post("/vouchers/", headers=HEADERS, json={
        "voucher_type": "Receipt",
        "voucher_date": voucher_date,
        "amount": amount,
        "credit_ledger_id": payer_id,
        "narration": "Milk sale",
    })


def test_receipt_round_trip(client):
    cash = _ledger(client, "Cash", "Cash")
    sales = _ledger(client, "Sales A/c", "Sales A/c")
    assert cash["current_balance_side"] == "Dr"
    assert sales["current_balance_side"] == "Cr"

    response = _receipt(client, sales["id"], "500.00")
    assert response.status_code == 201, response.text
    voucher = response.json()
    assert voucher["voucher_number"].startswith("RV")
    assert voucher["total_debit"] == voucher["total_credit"] == "500.00"
    assert voucher["amount_in_words"] == "Rupees Five Hundred Only"
    assert voucher["status"] == "Posted"
    assert [e["ledger_name_snapshot"] for e in voucher["entries"]] == ["Cash", "Sales A/c"]

    cash = client.get(f"/ledgers/{cash['id']}", headers=HEADERS).json()
    sales = client.get(f"/ledgers/{sales['id']}", headers=HEADERS).json()
    assert (cash["current_balance"], cash["current_balance_side"]) == ("500.00", "Dr")
    assert (sales["current_balance"], sales["current_balance_side"]) == ("500.00", "Cr")


def test_errors_are_structured(client):
    cash = _ledger(client, "Cash", "Cash")

    response = client.post("/vouchers/", headers=HEADERS, json={
        "voucher_type": "Journal",
        "voucher_date": "2024-04-01",
        "amount": "10.00",
        "debit_ledger_id": cash["id"],
        "credit_ledger_id": cash["id"],
    })
    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "ERR_SAME_LEDGER"
    assert body["details"] == {"ledger_id": cash["id"]}

    response = client.get("/ledgers/999", headers=HEADERS)
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND"


def test_unbalanced_entries_over_http(client):
    cash = _ledger(client, "Cash", "Cash")
    sales = _ledger(client, "Sales A/c", "Sales A/c")
    response = client.post("/vouchers/", headers=HEADERS, json={
        "voucher_type": "Journal",
        "voucher_date": "2024-04-01",
        "entries": [
            {"ledger_id": cash["id"], "debit_amount": "300.00"},
            {"ledger_id": sales["id"], "credit_amount": "300.01"},
        ],
    })
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_UNBALANCED_VOUCHER"


def test_tenant_header_is_required(client):
    response = client.get("/ledgers/")
    assert response.status_code == 422


def test_tenants_do_not_see_each_other(client):
    _ledger(client, "Cash", "Cash")
    response = client.get("/ledgers/", headers={"X-Tenant-ID": "society-2"})
    assert response.status_code == 200
    assert response.json() == []


def test_deactivate_needs_force_when_balance_remains(client):
    bank = _ledger(client, "Union Bank A/c", "Bank", opening_balance="10.00")

    response = client.post(f"/ledgers/{bank['id']}/deactivate", headers=HEADERS, json={})
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CONFLICT"

    response = client.post(f"/ledgers/{bank['id']}/deactivate", headers=HEADERS, json={"force": True, "reason": "Closed"})
    assert response.status_code == 200
    assert response.json()["status"] == "Inactive"

    response = client.post(f"/ledgers/{bank['id']}/reactivate", headers=HEADERS)
    assert response.json()["status"] == "Active"


def test_statement_and_void(client):
    _ledger(client, "Cash", "Cash")
    sales = _ledger(client, "Sales A/c", "Sales A/c")
    first = _receipt(client, sales["id"], "500.00", "2024-04-01").json()
    _receipt(client, sales["id"], "20.00", "2024-04-03")

    statement = client.get(
        f"/ledgers/{sales['id']}/statement", headers=HEADERS, params={"from_date": "2024-04-02"}
    ).json()
    assert statement["opening_balance"] == "500.00"
    assert [row["running_balance"] for row in statement["entries"]] == ["520.00"]
    assert statement["entries"][0]["particulars"] == "Cash"

    response = client.delete(f"/vouchers/{first['id']}", headers=HEADERS, params={"reason": "Duplicate"})
    assert response.status_code == 200
    assert response.json()["status"] == "Void"
    assert response.json()["void_reason"] == "Duplicate"

    statement = client.get(f"/ledgers/{sales['id']}/statement", headers=HEADERS).json()
    assert statement["closing_balance"] == "20.00"

    response = client.post(f"/vouchers/{first['id']}/void", headers=HEADERS, json={"reason": "Again"})
    assert response.status_code == 409


def test_batch_and_listing(client):
    _ledger(client, "Cash", "Cash")
    sales = _ledger(client, "Sales A/c", "Sales A/c")
    response = client.post("/vouchers/batch", headers=HEADERS, json={"vouchers": [
        {"voucher_type": "Receipt", "voucher_date": "2024-04-01", "amount": "10.00", "credit_ledger_id": sales["id"]},
        {"voucher_type": "Receipt", "voucher_date": "2024-04-02", "amount": "10.00", "credit_ledger_id": 999},
    ]})
    assert response.status_code == 200
    result = response.json()
    assert (result["success_count"], result["failure_count"]) == (1, 1)
    assert result["results"][1]["error_code"] == "ERR_NOT_FOUND"

    vouchers = client.get("/vouchers/", headers=HEADERS, params={"voucher_type": "Receipt"}).json()
    assert len(vouchers) == 1


def test_reports(client):
    cash = _ledger(client, "Cash", "Cash")
    sales = _ledger(client, "Sales A/c", "Sales A/c")
    _receipt(client, sales["id"], "500.00")

    sheet = client.get("/financial-reports/balance-sheet", headers=HEADERS).json()
    assert sheet["is_balanced"] is True
    assert sheet["net_profit"] == "500.00"
    assert sheet["assets"]["groups"][0]["group_name"] == "Cash"

    sheet = client.post("/financial-reports/balance-sheet", headers=HEADERS, json={
        "as_on_date": "2024-03-31",
        "config": {"liability_groups": [], "asset_groups": [{"group_name": "Bank Accounts", "keywords": ["bank"]}]},
    }).json()
    assert sheet["total_assets_side"] == "0.00"

    trial = client.get("/financial-reports/trial-balance", headers=HEADERS).json()
    assert trial["total_debit"] == trial["total_credit"] == "500.00"

    pnl = client.get("/financial-reports/profit-and-loss", headers=HEADERS).json()
    assert pnl["net_profit"] == "500.00"
    assert cash["id"] != sales["id"]


def test_balance_sheet_group_config_endpoints(client):
    default = client.get("/configurations/balance-sheet-groups", headers=HEADERS).json()
    assert default["asset_groups"][0]["group_name"] == "Cash"

    table = {"liability_groups": [], "asset_groups": [{"group_name": "Bank Accounts", "keywords": ["bank"]}]}
    response = client.put("/configurations/balance-sheet-groups", headers=HEADERS, json=table)
    assert response.status_code == 200
    assert client.get("/configurations/balance-sheet-groups", headers=HEADERS).json() == table


def test_initialize_default_ledgers(client):
    response = client.post("/tenants/initialize-ledgers", headers=HEADERS)
    assert response.status_code == 201
    assert len(response.json()) == 5
    assert client.get("/tenants/ledgers-initialized", headers=HEADERS).json() == {"ledgers_initialized": True}
    assert client.post("/tenants/initialize-ledgers", headers=HEADERS).json() == []


def test_group_table_with_repeated_names_is_rejected(client):
    response = client.post("/financial-reports/balance-sheet", headers=HEADERS, json={
        "config": {"liability_groups": [], "asset_groups": [
            {"group_name": "Bank", "keywords": ["bank"]},
            {"group_name": "Bank", "keywords": ["sbi"]},
        ]},
    })
    assert response.status_code == 422
