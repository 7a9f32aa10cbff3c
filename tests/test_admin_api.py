from decimal import Decimal

import pytest
from conftest import api_client, seed_wallet, T0

from zerthyx.core.security import create_access_token


def _auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role.value)}"}


@pytest.fixture
def client(session_factory):
    with api_client(session_factory) as test_client:
        yield test_client


def test_admin_routes_require_admin_role(client, investor):
    for method, path in [
        ("get", "/api/v1/admin/deposits"),
        ("post", "/api/v1/admin/deposits/1/approve"),
        ("post", "/api/v1/admin/withdrawals/1/approve"),
        ("post", "/api/v1/admin/earnings/transfer"),
        ("get", "/api/v1/admin/stats"),
    ]:
        res = getattr(client, method)(path, headers=_auth_headers(investor))
        assert res.status_code == 403, path
        assert res.json() == {"detail": "Admin access required"}


def test_requests_without_token_are_unauthorized(client):
    res = client.get("/api/v1/wallet/me")
    assert res.status_code == 401
    res = client.get("/api/v1/wallet/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json() == {"detail": "Invalid token"}


def test_deposit_approval_flow(client, investor, admin_user):
    res = client.put(
        "/api/v1/admin/settings",
        json={"settings": {"deposit_address_trc20": "TAdminAddr"}},
        headers=_auth_headers(admin_user),
    )
    assert res.status_code == 200
    assert res.json()["settings"] == {"deposit_address_trc20": "TAdminAddr"}

    res = client.get("/api/v1/deposits/addresses", headers=_auth_headers(investor))
    assert res.json() == {"addresses": {"TRC20": "TAdminAddr"}}

    res = client.post(
        "/api/v1/deposits",
        json={"amount": "500", "blockchain": "TRC20", "transaction_hash": "0xfeed"},
        headers=_auth_headers(investor),
    )
    assert res.status_code == 200
    deposit = res.json()
    assert deposit["status"] == "pending"
    assert deposit["deposit_address"] == "TAdminAddr"

    res = client.get("/api/v1/admin/deposits?status=pending", headers=_auth_headers(admin_user))
    assert [row["id"] for row in res.json()] == [deposit["id"]]

    res = client.post(f"/api/v1/admin/deposits/{deposit['id']}/approve", headers=_auth_headers(admin_user))
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["batch"]["batch_number"] == 1

    res = client.post(f"/api/v1/admin/deposits/{deposit['id']}/approve", headers=_auth_headers(admin_user))
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "INVALID_TRANSITION"

    res = client.get("/api/v1/wallet/me", headers=_auth_headers(investor))
    state = res.json()
    assert Decimal(state["total_deposit"]) == Decimal("500")
    assert state["is_active"] is True
    assert state["deposit_batch_count"] == 1

    res = client.get("/api/v1/wallet/nft-summary", headers=_auth_headers(investor))
    assert Decimal(res.json()["pending_amount"]) == Decimal("500")

    res = client.get("/api/v1/admin/stats", headers=_auth_headers(admin_user))
    stats = res.json()
    assert stats["active_investors"] == 1
    assert stats["pending_deposits"] == 0
    assert Decimal(stats["approved_deposit_total"]) == Decimal("500")


def test_withdrawal_errors_use_the_ledger_envelope(client, db, investor):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0, is_active=False)

    res = client.post(
        "/api/v1/withdrawals",
        json={"amount": "9", "wallet_address": "TAddr"},
        headers=_auth_headers(investor),
    )
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["code"] == "INVALID_AMOUNT"
    assert detail["message"]
    assert detail["hint"]

    res = client.post(
        "/api/v1/withdrawals",
        json={"amount": "40", "wallet_address": "TAddr"},
        headers=_auth_headers(investor),
    )
    assert res.status_code == 200
    assert res.json()["status"] == "pending"

    res = client.post(
        "/api/v1/withdrawals",
        json={"amount": "40", "wallet_address": "TAddr"},
        headers=_auth_headers(investor),
    )
    assert res.status_code == 429
    assert res.json()["detail"]["code"] == "DAILY_LIMIT_EXCEEDED"


def test_admin_settles_withdrawal(client, db, investor, admin_user):
    seed_wallet(db, investor.id, total_profit="100", checkpoint=T0, is_active=False)
    res = client.post(
        "/api/v1/withdrawals",
        json={"amount": "60", "wallet_address": "TAddr", "blockchain": "BEP20"},
        headers=_auth_headers(investor),
    )
    withdrawal_id = res.json()["id"]

    res = client.post(f"/api/v1/admin/withdrawals/{withdrawal_id}/approve", headers=_auth_headers(admin_user))
    assert res.status_code == 200
    assert res.json() == {"success": True}

    res = client.get("/api/v1/wallet/me", headers=_auth_headers(investor))
    assert Decimal(res.json()["total_profit"]) == Decimal("40")

    res = client.get("/api/v1/wallet/ledger", headers=_auth_headers(investor))
    assert [row["category"] for row in res.json()] == ["withdrawal"]

    res = client.post("/api/v1/admin/withdrawals/999/reject", headers=_auth_headers(admin_user))
    assert res.status_code == 404


def test_sweeps_via_admin_endpoints(client, db, investor, admin_user):
    seed_wallet(db, investor.id, daily_earnings="7", checkpoint=T0, is_active=False)

    res = client.post(
        "/api/v1/admin/earnings/transfer",
        json={"user_ids": [investor.id]},
        headers=_auth_headers(admin_user),
    )
    assert res.status_code == 200
    body = res.json()
    assert body["processed"] == 1
    assert body["failed"] == []
    assert Decimal(body["total_amount"]) == Decimal("7")

    res = client.post("/api/v1/admin/maturity/sweep", headers=_auth_headers(admin_user))
    assert res.status_code == 200
    assert res.json()["matured_batches"] == 0

    res = client.get("/api/v1/admin/profits", headers=_auth_headers(admin_user))
    assert res.json()["active_users"] == 0


def test_health_endpoints(client):
    assert client.get("/").json() == {"status": "ok"}
    assert client.get("/healthz").json()["status"] == "ok"
