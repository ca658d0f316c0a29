"""
TikTok Shop API client.

Covers the three calls the service needs:
- building the seller authorization URL
- exchanging an authorization code for access/refresh tokens
- marking an order as shipped with a tracking number
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode, urljoin

import requests

from shoplabel.utils.exceptions import TikTokAPIError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

AUTHORIZE_ENDPOINT = "/api/authorize"
TOKEN_ENDPOINT = "/api/token"
SHIP_ENDPOINT = "/api/logistics/ship"


@dataclass
class TikTokTokens:
    """OAuth token pair issued by TikTok Shop."""
    access_token: str
    refresh_token: Optional[str] = None


class TikTokShopClient:
    """
    TikTok Shop Open API client for one app (app key + secret).

    Seller-specific calls take the seller's access token as an argument.
    No call is retried.
    """

    def __init__(
        self,
        app_key: str,
        app_secret: str,
        auth_base_url: str = "https://auth.tiktok-shops.com",
        api_base_url: str = "https://open-api.tiktokglobalshop.com",
        timeout: Optional[float] = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.app_key = app_key
        self.app_secret = app_secret
        self.auth_base_url = auth_base_url
        self.api_base_url = api_base_url
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": "ShopLabel/1.0",
        })

    def _post_json(self, url: str, body: Dict[str, Any],
                   headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        POST a JSON body and decode the JSON answer.

        TikTok Shop reports business errors as HTTP 200 with a non-zero
        ``code``; both that and non-2xx statuses raise ``TikTokAPIError``.
        """
        logger.debug(f"Making POST request to {url}")

        try:
            response = self.session.post(url, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout:
            raise TikTokAPIError(f"Request timeout after {self.timeout}s", endpoint=url)
        except requests.exceptions.ConnectionError:
            raise TikTokAPIError(f"Connection failed to {url}", endpoint=url)
        except requests.exceptions.RequestException as e:
            raise TikTokAPIError(f"Request failed: {e}", endpoint=url)

        if not response.ok:
            raise TikTokAPIError(
                f"TikTok Shop returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_data=response.text[:500],
                endpoint=url,
            )

        try:
            data = response.json()
        except ValueError:
            raise TikTokAPIError("TikTok Shop returned a non-JSON body", endpoint=url,
                                 status_code=response.status_code)

        if not isinstance(data, dict):
            raise TikTokAPIError("Unexpected TikTok Shop response shape", endpoint=url,
                                 response_data=data)

        code = data.get("code", 0)
        if code not in (0, "0", None):
            raise TikTokAPIError(
                f"TikTok Shop error {code}: {data.get('message', 'unknown error')}",
                status_code=response.status_code,
                response_data=data,
                endpoint=url,
            )

        return data

    def build_authorization_url(self, redirect_uri: str, state: str, scope: str) -> str:
        """URL the seller opens to grant the app access to their shop."""
        query = urlencode({
            "app_key": self.app_key,
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": scope,
            "response_type": "code",
        })
        return f"{urljoin(self.auth_base_url, AUTHORIZE_ENDPOINT)}?{query}"

    def exchange_code(self, code: str) -> TikTokTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            TikTokAPIError: If the call fails or no access token is returned
        """
        url = urljoin(self.auth_base_url, TOKEN_ENDPOINT)
        data = self._post_json(url, {
            "app_key": self.app_key,
            "app_secret": self.app_secret,
            "auth_code": code,
            "grant_type": "authorized_code",
        })

        # Tokens arrive either at top level or wrapped in "data"
        tokens = data.get("data") if isinstance(data.get("data"), dict) else data
        access_token = tokens.get("access_token")
        if not access_token:
            raise TikTokAPIError("Token response has no access_token", endpoint=url)

        logger.info("Exchanged TikTok Shop authorization code")
        return TikTokTokens(
            access_token=access_token,
            refresh_token=tokens.get("refresh_token"),
        )

    def ship_order(
        self,
        access_token: str,
        order_id: Optional[str],
        tracking_number: str,
        carrier_code: str = "Packlink",
        service: str = "standard",
    ) -> Dict[str, Any]:
        """
        Report an order as shipped.

        Raises:
            TikTokAPIError: If the call fails
        """
        url = urljoin(self.api_base_url, SHIP_ENDPOINT)
        data = self._post_json(
            url,
            {
                "order_id": order_id,
                "tracking_number": tracking_number,
                "carrier_code": carrier_code,
                "service": service,
            },
            headers={"Access-Token": access_token},
        )
        logger.info(f"Notified TikTok Shop of shipment for order {order_id}")
        return data
