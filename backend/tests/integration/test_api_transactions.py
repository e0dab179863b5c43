"""Integration tests for transaction API endpoints."""

from decimal import Decimal

from tests.fixtures import make_account


def _balance(client, account_id) -> Decimal:
    return Decimal(client.get(f"/api/accounts/{account_id}").json()["balance"])


class TestCreate:
    def test_expense_on_credit_card(self, client, credit_card):
        response = client.post(
            "/api/transactions",
            json={"account_id": credit_card.id, "type": "expense", "amount": "50", "category": "food"},
        )
        assert response.status_code == 201
        assert response.json()["category"] == "food"
        assert _balance(client, credit_card.id) == Decimal("250")

    def test_payment(self, client, checking, credit_card):
        response = client.post(
            "/api/transactions",
            json={
                "account_id": checking.id,
                "target_account_id": credit_card.id,
                "type": "payment",
                "amount": "200",
            },
        )
        assert response.status_code == 201
        assert _balance(client, checking.id) == Decimal("800")
        assert _balance(client, credit_card.id) == Decimal("0")

    def test_payment_without_target_is_400(self, client, checking):
        response = client.post(
            "/api/transactions", json={"account_id": checking.id, "type": "payment", "amount": "5"}
        )
        assert response.status_code == 400
        assert "target" in response.json()["detail"]

    def test_zero_amount_is_422(self, client, checking):
        response = client.post(
            "/api/transactions", json={"account_id": checking.id, "type": "income", "amount": "0"}
        )
        assert response.status_code == 422

    def test_sub_cent_amount_is_422(self, client, checking, budget):
        response = client.post(
            "/api/transactions",
            json={
                "account_id": checking.id, "type": "expense",
                "amount": "0.004", "budget_id": budget.id,
            },
        )
        assert response.status_code == 422
        assert _balance(client, checking.id) == Decimal("1000")

    def test_unknown_account_is_404(self, client):
        response = client.post(
            "/api/transactions", json={"account_id": "missing", "type": "income", "amount": "5"}
        )
        assert response.status_code == 404


class TestListing:
    def test_pagination_envelope(self, client, checking):
        for day in range(1, 4):
            client.post(
                "/api/transactions",
                json={
                    "account_id": checking.id, "type": "income", "amount": str(day),
                    "date": f"2025-01-0{day}T12:00:00",
                },
            )
        response = client.get("/api/transactions", params={"limit": 2})
        data = response.json()

        assert data["pagination"] == {"total": 3, "limit": 2, "skip": 0, "has_more": True}
        assert [Decimal(t["amount"]) for t in data["transactions"]] == [Decimal("3"), Decimal("2")]

        last_page = client.get("/api/transactions", params={"limit": 2, "skip": 2}).json()
        assert last_page["pagination"]["has_more"] is False

    def test_type_and_category_filters(self, client, checking):
        client.post("/api/transactions", json={"account_id": checking.id, "type": "income", "amount": "1"})
        client.post(
            "/api/transactions",
            json={"account_id": checking.id, "type": "expense", "amount": "2", "category": "food"},
        )
        by_type = client.get("/api/transactions", params={"type": "expense"}).json()
        by_category = client.get("/api/transactions", params={"category": "food"}).json()

        assert by_type["pagination"]["total"] == 1
        assert by_category["transactions"][0]["type"] == "expense"


class TestUpdateDelete:
    def test_update_reapplies_balance(self, client, checking):
        txn = client.post(
            "/api/transactions", json={"account_id": checking.id, "type": "expense", "amount": "100"}
        ).json()
        response = client.put(f"/api/transactions/{txn['id']}", json={"amount": "40"})

        assert response.status_code == 200
        assert _balance(client, checking.id) == Decimal("960")

    def test_delete_reverses_transfer(self, client, db, checking):
        savings = make_account(db, "savings", Decimal("0"))
        txn = client.post(
            "/api/transactions",
            json={
                "account_id": checking.id,
                "target_account_id": savings.id,
                "type": "transfer",
                "amount": "250",
            },
        ).json()

        assert client.delete(f"/api/transactions/{txn['id']}").status_code == 204
        assert _balance(client, checking.id) == Decimal("1000")
        assert _balance(client, savings.id) == Decimal("0")
        assert client.get(f"/api/transactions/{txn['id']}").status_code == 404
