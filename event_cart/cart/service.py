from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from event_cart.cart.errors import (
    UnknownCartError,
    classify_response,
    classify_transport_error,
)
from event_cart.config import settings

logger = logging.getLogger(__name__)


class CartServiceClient:
    """Thin async wrapper over the Cart Service REST endpoints.

    Every failure leaves as a ``CartServiceError`` subclass, including
    timeouts and 2xx bodies carrying ``success: false``.
    """

    def __init__(
        self,
        base_url: str = settings.api_base_url,
        token: str | None = None,
        timeout: float = settings.request_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> CartServiceClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        json: Mapping[str, Any] | None = None,
        not_found_message: str | None = None,
    ) -> dict[str, Any]:
        try:
            response = await self._http.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise classify_transport_error(exc) from exc

        if response.is_error:
            error = classify_response(response, not_found_message)
            logger.info("%s %s failed with %s: %s", method, url, response.status_code, error.message)
            raise error

        try:
            body = response.json()
        except ValueError as exc:
            raise UnknownCartError("Malformed response from cart service", response.status_code) from exc
        if not isinstance(body, dict) or not body.get("success", False):
            message = body.get("message") if isinstance(body, dict) else None
            raise UnknownCartError(message, response.status_code)
        return body

    @staticmethod
    def _data(body: Mapping[str, Any]) -> dict[str, Any]:
        data = body.get("data")
        return data if isinstance(data, dict) else {}

    async def get_cart(self) -> dict[str, Any]:
        return self._data(await self._request("GET", "/cart"))

    async def add_item(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        body = await self._request("POST", "/cart", json=payload, not_found_message="Product not found")
        return self._data(body)

    async def update_item(self, item_id: str, updates: Mapping[str, Any]) -> dict[str, Any]:
        body = await self._request(
            "PUT", f"/cart/{item_id}", json=updates, not_found_message="Cart item not found"
        )
        return self._data(body)

    async def remove_item(self, item_id: str) -> None:
        await self._request("DELETE", f"/cart/{item_id}", not_found_message="Cart item not found")

    async def clear(self) -> None:
        await self._request("DELETE", "/cart")

