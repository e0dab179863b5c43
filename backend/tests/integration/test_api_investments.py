"""Integration tests for investment account API endpoints."""

from decimal import Decimal

import pytest

from tests.fixtures import OTHER_USER_ID, make_account


def _buy(client, account_id, quantity, price, date, symbol="AAPL"):
    return client.post(
        f"/api/investments/{account_id}/holdings",
        json={"symbol": symbol, "quantity": quantity, "price": price, "date": date},
    )


@pytest.fixture
def two_lots(client, brokerage):
    """AAPL bought as 3 @ 100 on Jan 1 and 5 @ 110 on Feb 1."""
    _buy(client, brokerage.id, "3", "100", "2025-01-01")
    _buy(client, brokerage.id, "5", "110", "2025-02-01")
    return brokerage


class TestBuy:
    def test_first_buy_creates_holding(self, client, brokerage):
        response = _buy(client, brokerage.id, "2", "150", "2025-03-01", symbol="aapl")
        assert response.status_code == 201
        holding = response.json()
        assert holding["symbol"] == "AAPL"
        assert Decimal(holding["total_quantity"]) == Decimal("2")
        assert Decimal(holding["total_cost_basis"]) == Decimal("300")

    def test_second_buy_appends_lot(self, client, two_lots):
        account = client.get(f"/api/investments/{two_lots.id}").json()
        assert len(account["holdings"]) == 1
        lots = account["holdings"][0]["lots"]
        assert [Decimal(lot["quantity"]) for lot in lots] == [Decimal("3"), Decimal("5")]
        assert Decimal(account["holdings"][0]["average_cost"]) == Decimal("106.25")

    def test_buy_does_not_move_cash(self, client, two_lots):
        account = client.get(f"/api/investments/{two_lots.id}").json()
        assert Decimal(account["cash"]) == Decimal("500")

    def test_buy_on_checking_is_400(self, client, checking):
        response = _buy(client, checking.id, "1", "10", "2025-01-01")
        assert response.status_code == 400
        assert "not an investment account" in response.json()["detail"]

    def test_zero_quantity_is_422(self, client, brokerage):
        assert _buy(client, brokerage.id, "0", "10", "2025-01-01").status_code == 422


class TestSell:
    def test_fifo_sell(self, client, two_lots):
        response = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/sell",
            json={"quantity": "4", "price": "120"},
        )
        assert response.status_code == 200
        data = response.json()

        lots = data["holding"]["lots"]
        assert len(lots) == 1
        assert Decimal(lots[0]["quantity"]) == Decimal("4")
        assert Decimal(lots[0]["unit_price"]) == Decimal("110")
        assert [Decimal(c["quantity"]) for c in data["consumed"]] == [Decimal("3"), Decimal("1")]
        assert Decimal(data["cash"]) == Decimal("980")
        assert data["transaction"]["type"] == "sell"

    def test_sell_everything_removes_holding(self, client, two_lots):
        data = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/sell",
            json={"quantity": "8", "price": "100"},
        ).json()
        assert data["holding"] is None
        assert client.get(f"/api/investments/{two_lots.id}").json()["holdings"] == []

    def test_oversell_is_400_and_changes_nothing(self, client, two_lots):
        response = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/sell",
            json={"quantity": "9", "price": "100"},
        )
        assert response.status_code == 400

        account = client.get(f"/api/investments/{two_lots.id}").json()
        assert Decimal(account["holdings"][0]["total_quantity"]) == Decimal("8")
        assert Decimal(account["cash"]) == Decimal("500")

    def test_unknown_holding_is_404(self, client, brokerage):
        response = client.post(
            f"/api/investments/{brokerage.id}/holdings/MSFT/sell",
            json={"quantity": "1", "price": "1"},
        )
        assert response.status_code == 404

    def test_foreign_account_is_404(self, client, db):
        theirs = make_account(db, "investment", user_id=OTHER_USER_ID)
        response = client.post(
            f"/api/investments/{theirs.id}/holdings/AAPL/sell",
            json={"quantity": "1", "price": "1"},
        )
        assert response.status_code == 404


class TestRemove:
    def test_remove_whole_holding(self, client, two_lots):
        data = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/remove", json={}
        ).json()
        assert data["holding"] is None
        assert Decimal(data["cash"]) == Decimal("500")
        assert data["transaction"]["notes"] == "Removed from portfolio"

    def test_partial_remove_is_fifo(self, client, two_lots):
        data = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/remove",
            json={"quantity": "3", "reason": "Gifted"},
        ).json()
        lots = data["holding"]["lots"]
        assert [Decimal(lot["unit_price"]) for lot in lots] == [Decimal("110")]


class TestLots:
    def test_add_update_delete_lot(self, client, two_lots):
        created = client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/lots",
            json={"quantity": "1", "price": "90", "date": "2025-03-01"},
        )
        assert created.status_code == 201
        lot_id = created.json()["id"]

        updated = client.put(
            f"/api/investments/{two_lots.id}/holdings/AAPL/lots/{lot_id}",
            json={"quantity": "2"},
        )
        assert Decimal(updated.json()["cost_basis"]) == Decimal("180")

        deleted = client.delete(f"/api/investments/{two_lots.id}/holdings/AAPL/lots/{lot_id}")
        assert deleted.status_code == 204
        holding = client.get(f"/api/investments/{two_lots.id}").json()["holdings"][0]
        assert len(holding["lots"]) == 2


class TestCashAndActivity:
    def test_set_cash(self, client, brokerage):
        response = client.put(f"/api/investments/{brokerage.id}/cash", json={"cash": "750"})
        assert Decimal(response.json()["cash"]) == Decimal("750")

    def test_deposit_then_delete_reverses(self, client, brokerage):
        txn = client.post(
            f"/api/investments/{brokerage.id}/transactions",
            json={"type": "deposit", "amount": "250"},
        )
        assert txn.status_code == 201
        assert Decimal(client.get(f"/api/investments/{brokerage.id}").json()["cash"]) == Decimal("750")

        deleted = client.delete(f"/api/investments/{brokerage.id}/transactions/{txn.json()['id']}")
        assert deleted.status_code == 204
        assert Decimal(client.get(f"/api/investments/{brokerage.id}").json()["cash"]) == Decimal("500")

    def test_overdrawn_withdrawal_is_400(self, client, brokerage):
        response = client.post(
            f"/api/investments/{brokerage.id}/transactions",
            json={"type": "withdrawal", "amount": "501"},
        )
        assert response.status_code == 400
        assert "exceeds" in response.json()["detail"]

    def test_activity_log_lists_buys_and_sales(self, client, two_lots):
        client.post(
            f"/api/investments/{two_lots.id}/holdings/AAPL/sell",
            json={"quantity": "1", "price": "120"},
        )
        types = {t["type"] for t in client.get(f"/api/investments/{two_lots.id}/transactions").json()}
        assert types == {"buy", "sell"}


class TestPriceRefresh:
    def test_refresh_all(self, client, two_lots, stock_provider):
        data = client.post(f"/api/investments/{two_lots.id}/prices/refresh").json()
        holding = data["holdings"][0]
        assert Decimal(holding["current_price"]) == Decimal("190.00")
        assert Decimal(holding["market_value"]) == Decimal("1520")
        assert stock_provider.quote_calls == ["AAPL"]

    def test_refresh_one_uses_fallback_when_down(self, client, two_lots, stock_provider):
        stock_provider._always_fail = True
        response = client.post(f"/api/investments/{two_lots.id}/holdings/AAPL/price")
        assert response.status_code == 200
        assert Decimal(response.json()["current_price"]) == Decimal("202.38")
