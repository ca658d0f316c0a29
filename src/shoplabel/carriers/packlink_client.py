"""
Packlink API client.

Only shipment creation is used: the fulfillment pipeline posts one shipment
per order and reads the tracking number back.
"""

from typing import Any, Dict, Optional
from urllib.parse import urljoin

import requests

from shoplabel.utils.exceptions import PacklinkAPIError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

SHIPMENTS_ENDPOINT = "/v1/shipments"


class PacklinkClient:
    """
    Packlink Pro API client authenticated with a seller's API key.

    Requests are not retried: a failed shipment creation surfaces immediately
    as ``PacklinkAPIError``.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.packlink.com",
                 timeout: Optional[float] = 30.0,
                 session: Optional[requests.Session] = None):
        """
        Initialize Packlink client.

        Args:
            api_key: Seller's Packlink API key
            base_url: Packlink API base URL
            timeout: Request timeout in seconds
            session: Optional pre-configured requests session
        """
        self.base_url = base_url
        self.timeout = timeout

        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "User-Agent": "ShopLabel/1.0",
        })

    def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "PacklinkClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _make_request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Make HTTP request with error handling.

        Raises:
            PacklinkAPIError: If the request fails or returns a non-2xx status
        """
        kwargs.setdefault("timeout", self.timeout)
        logger.debug(f"Making {method} request to {url}")

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.Timeout:
            raise PacklinkAPIError(f"Request timeout after {self.timeout}s", endpoint=url)
        except requests.exceptions.ConnectionError:
            raise PacklinkAPIError(f"Connection failed to {url}", endpoint=url)
        except requests.exceptions.RequestException as e:
            raise PacklinkAPIError(f"Request failed: {e}", endpoint=url)

        if not response.ok:
            raise PacklinkAPIError(
                f"Packlink returned HTTP {response.status_code}",
                status_code=response.status_code,
                response_data=response.text[:500],
                endpoint=url,
            )

        return response

    def create_shipment(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a shipment.

        Args:
            payload: Shipment request body

        Returns:
            Decoded Packlink response

        Raises:
            PacklinkAPIError: If the call fails or the body is not JSON
        """
        url = urljoin(self.base_url, SHIPMENTS_ENDPOINT)
        response = self._make_request("POST", url, json=payload)

        try:
            data = response.json()
        except ValueError:
            raise PacklinkAPIError("Packlink returned a non-JSON body", endpoint=url,
                                   status_code=response.status_code)

        if not isinstance(data, dict):
            raise PacklinkAPIError("Unexpected Packlink response shape", endpoint=url,
                                   response_data=data)

        logger.info(f"Packlink shipment created (reference={data.get('reference')})")
        return data
