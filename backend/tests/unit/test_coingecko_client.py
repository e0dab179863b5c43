"""Unit tests for CoinGeckoClient (mocked httpx)."""

from decimal import Decimal
from unittest.mock import patch

import httpx
import pytest

from integrations.coingecko_client import BASE_URL, CoinGeckoClient, _KNOWN_COIN_IDS
from integrations.exceptions import (
    MarketDataAPIError,
    MarketDataConnectionError,
    MarketDataParseError,
)


@pytest.fixture
def client():
    return CoinGeckoClient()


def _response(status_code: int = 200, json=None, content: bytes | None = None) -> httpx.Response:
    request = httpx.Request("GET", f"{BASE_URL}/simple/price")
    if content is not None:
        return httpx.Response(status_code, content=content, request=request)
    return httpx.Response(status_code, json=json if json is not None else {}, request=request)


class TestProviderName:
    def test_provider_name(self, client):
        assert client.provider_name == "coingecko"


class TestApiKey:
    def test_demo_key_sent_as_header(self):
        keyed = CoinGeckoClient(api_key="test-api-key")
        assert keyed._client.headers["x-cg-demo-api-key"] == "test-api-key"

    def test_keyless_by_default(self, client):
        assert "x-cg-demo-api-key" not in client._client.headers


class TestSymbolResolution:
    def test_known_symbol_resolved_without_api(self, client):
        with patch.object(client._client, "get") as mock_get:
            assert client._resolve_coin_id("btc") == "bitcoin"
        mock_get.assert_not_called()

    def test_common_coins_in_mapping(self):
        assert _KNOWN_COIN_IDS["ETH"] == "ethereum"
        assert _KNOWN_COIN_IDS["DOGE"] == "dogecoin"

    def test_unknown_symbol_uses_search_and_best_rank(self, client):
        search = {
            "coins": [
                {"id": "pepe-knockoff", "symbol": "pepe", "market_cap_rank": 900},
                {"id": "pepe", "symbol": "PEPE", "market_cap_rank": 40},
                {"id": "other", "symbol": "PEPEX", "market_cap_rank": 1},
            ]
        }
        with patch.object(client._client, "get", return_value=_response(json=search)) as mock_get:
            assert client._resolve_coin_id("PEPE") == "pepe"
            # Second lookup is served from the resolved-id cache
            assert client._resolve_coin_id("PEPE") == "pepe"
        assert mock_get.call_count == 1

    def test_no_match_raises_parse_error(self, client):
        with patch.object(client._client, "get", return_value=_response(json={"coins": []})):
            with pytest.raises(MarketDataParseError):
                client._resolve_coin_id("NOPE")


class TestGetQuote:
    def test_returns_usd_price(self, client):
        payload = {"bitcoin": {"usd": 64250.5}}
        with patch.object(client._client, "get", return_value=_response(json=payload)) as mock_get:
            quote = client.get_quote("BTC")

        assert quote.symbol == "BTC"
        assert quote.price == Decimal("64250.5")
        assert quote.source == "coingecko"
        mock_get.assert_called_once_with(
            "/simple/price", params={"ids": "bitcoin", "vs_currencies": "usd"}
        )

    def test_missing_price_raises_parse_error(self, client):
        with patch.object(client._client, "get", return_value=_response(json={})):
            with pytest.raises(MarketDataParseError):
                client.get_quote("ETH")

    def test_server_error_is_retriable(self, client):
        with patch.object(client._client, "get", return_value=_response(503)):
            with pytest.raises(MarketDataAPIError) as exc_info:
                client.get_quote("ETH")
        assert exc_info.value.status_code == 503
        assert exc_info.value.retriable

    def test_client_error_is_not_retriable(self, client):
        with patch.object(client._client, "get", return_value=_response(404)):
            with pytest.raises(MarketDataAPIError) as exc_info:
                client.get_quote("ETH")
        assert not exc_info.value.retriable

    def test_timeout_maps_to_connection_error(self, client):
        with patch.object(client._client, "get", side_effect=httpx.ConnectTimeout("timed out")):
            with pytest.raises(MarketDataConnectionError) as exc_info:
                client.get_quote("ETH")
        assert exc_info.value.retriable
        assert exc_info.value.provider_name == "coingecko"

    def test_invalid_json_maps_to_parse_error(self, client):
        with patch.object(client._client, "get", return_value=_response(content=b"<html>")):
            with pytest.raises(MarketDataParseError):
                client.get_quote("ETH")

    @pytest.mark.parametrize(
        "payload",
        [
            ["ethereum", 3200],
            {"ethereum": 3200},
            {"ethereum": {"usd": "n/a"}},
            {"ethereum": {"usd": "NaN"}},
        ],
    )
    def test_malformed_body_maps_to_parse_error(self, client, payload):
        with patch.object(client._client, "get", return_value=_response(json=payload)):
            with pytest.raises(MarketDataParseError):
                client.get_quote("ETH")


class TestSearch:
    def test_maps_coins_to_symbol_matches(self, client):
        payload = {
            "coins": [
                {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "thumb": "https://img/btc.png"},
                {"id": "broken", "name": "No Symbol"},
            ]
        }
        with patch.object(client._client, "get", return_value=_response(json=payload)):
            results = client.search("bit")

        assert len(results) == 1
        assert results[0].symbol == "BTC"
        assert results[0].name == "Bitcoin"
        assert results[0].image == "https://img/btc.png"
