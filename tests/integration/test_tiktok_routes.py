"""
Integration tests for the TikTok Shop OAuth flow and order webhook
"""
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi import status

from shoplabel.marketplaces import TikTokShopClient, TikTokTokens
from shoplabel.utils.exceptions import PacklinkAPIError, StripeAPIError, TikTokAPIError


class TestTikTokOAuth:

    @pytest.fixture
    def mock_tiktok(self, settings):
        """Real URL building, mocked token exchange"""
        real = TikTokShopClient(
            settings.TIKTOK_CLIENT_KEY,
            settings.TIKTOK_CLIENT_SECRET,
            auth_base_url="https://auth.tiktok.test",
        )
        client = MagicMock(spec=TikTokShopClient)
        client.build_authorization_url.side_effect = real.build_authorization_url
        client.exchange_code.return_value = TikTokTokens("tt-access", "tt-refresh")
        return client

    def _authorize(self, client, auth_headers) -> str:
        response = client.get("/api/auth/tiktok", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        return parse_qs(urlparse(response.json()["url"]).query)["state"][0]

    def test_authorize_url(self, client, seller, auth_headers, settings):
        response = client.get("/api/auth/tiktok", headers=auth_headers)

        query = parse_qs(urlparse(response.json()["url"]).query)
        assert query["app_key"] == [settings.TIKTOK_CLIENT_KEY]
        assert query["redirect_uri"] == [settings.TIKTOK_REDIRECT_URI]
        assert query["state"][0] != str(seller.id)

    def test_authorize_requires_auth(self, client):
        assert client.get("/api/auth/tiktok").status_code == status.HTTP_401_UNAUTHORIZED

    def test_callback_connects_seller(self, client, store, seller, auth_headers):
        state = self._authorize(client, auth_headers)

        response = client.get("/api/auth/tiktok/callback", params={"code": "auth-code", "state": state})

        assert response.status_code == status.HTTP_200_OK
        assert response.text == "TikTok connected. You can close this window."
        assert store.find_by_id(seller.id).tiktok_access_token == "tt-access"

        status_response = client.get("/api/setup/status", headers=auth_headers)
        assert status_response.json()["tiktok_connected"] is True

    def test_callback_missing_code(self, client, seller, auth_headers):
        state = self._authorize(client, auth_headers)

        response = client.get("/api/auth/tiktok/callback", params={"state": state})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Missing code"}

    def test_callback_with_seller_id_as_state(self, client, mock_tiktok, store, seller):
        response = client.get(
            "/api/auth/tiktok/callback", params={"code": "auth-code", "state": str(seller.id)}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_tiktok.exchange_code.assert_not_called()
        assert store.find_by_id(seller.id).tiktok_access_token is None

    def test_callback_exchange_failure(self, client, mock_tiktok, seller, auth_headers):
        mock_tiktok.exchange_code.side_effect = TikTokAPIError("HTTP 500", status_code=500)
        state = self._authorize(client, auth_headers)

        response = client.get("/api/auth/tiktok/callback", params={"code": "auth-code", "state": state})

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Failed to exchange code"}


class TestOrderWebhook:

    def test_label_generated(self, client, ready_seller, mock_packlink, mock_tiktok, mock_stripe):
        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": ready_seller.email},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "Label generated", "tracking": "PL123456"}
        mock_tiktok.ship_order.assert_called_once()
        mock_stripe.report_usage.assert_called_once()

    def test_automation_disabled(self, client, store, ready_seller, mock_packlink):
        store.update(ready_seller.id, automation_enabled=False)

        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": ready_seller.email},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "Automation disabled"}
        mock_packlink.create_shipment.assert_not_called()

    def test_missing_seller_info(self, client):
        response = client.post("/api/webhooks/tiktok", json={"order_id": "ORDER-1"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Missing seller info"}

    def test_non_string_seller_email(self, client, mock_packlink):
        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": {"a": 1}},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Missing seller info"}
        mock_packlink.create_shipment.assert_not_called()

    def test_unknown_seller(self, client):
        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": "nobody@example.com"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Seller not found"}

    def test_carrier_failure(self, client, ready_seller, mock_packlink, mock_tiktok):
        mock_packlink.create_shipment.side_effect = PacklinkAPIError("HTTP 500", status_code=500)

        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": ready_seller.email},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"error": "Failed to process webhook"}
        mock_tiktok.ship_order.assert_not_called()

    def test_marketplace_not_connected(self, client, store, ready_seller, mock_packlink):
        store.update(ready_seller.id, tiktok_access_token=None)

        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": ready_seller.email},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        mock_packlink.create_shipment.assert_not_called()

    def test_usage_failure_still_succeeds(self, client, ready_seller, mock_stripe):
        mock_stripe.report_usage.side_effect = StripeAPIError("rate limited")

        response = client.post(
            "/api/webhooks/tiktok",
            json={"order_id": "ORDER-1", "seller_email": ready_seller.email},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "Label generated"

    def test_replayed_event_is_processed_twice(self, client, ready_seller, mock_packlink):
        event = {"order_id": "ORDER-1", "seller_email": ready_seller.email}

        client.post("/api/webhooks/tiktok", json=event)
        client.post("/api/webhooks/tiktok", json=event)

        assert mock_packlink.create_shipment.call_count == 2
