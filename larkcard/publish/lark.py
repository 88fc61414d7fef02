"""
Feishu/Lark Open API card client for larkcard.
"""
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from larkcard.config import LarkConfig
from larkcard.errors import CardPublishError
from larkcard.publish.base import CardClient


logger = logging.getLogger(__name__)


class LarkCardClient(CardClient):
    """
    Sends and edits interactive card messages through the IM v1 API.

    Authentication uses a tenant access token supplied by configuration;
    obtaining and refreshing that token is left to the host.
    """

    def __init__(
        self,
        config: Optional[LarkConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Lark API configuration
            client: Optional shared httpx client (owned by the caller)
        """
        self._config = config or LarkConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def name(self) -> str:
        return "lark"

    def _build_headers(self) -> Dict[str, str]:
        """Build request headers with authentication."""
        headers = {
            "Content-Type": "application/json; charset=utf-8",
        }
        if self._config.tenant_access_token:
            headers["Authorization"] = f"Bearer {self._config.tenant_access_token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        body: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._config.base_url.rstrip('/')}{path}"
        start_time = time.perf_counter()

        try:
            response = await self._get_client().request(
                method,
                url,
                headers=self._build_headers(),
                params=params,
                json=body,
            )
        except httpx.TimeoutException as e:
            raise CardPublishError(f"{method} {path} timed out") from e
        except httpx.RequestError as e:
            raise CardPublishError(f"{method} {path} failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("%s %s -> %s in %.0fms", method, path, response.status_code, latency_ms)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if response.status_code >= 400:
            raise CardPublishError(
                data.get("msg") or f"{method} {path} returned HTTP {response.status_code}",
                code=data.get("code"),
                status_code=response.status_code,
            )

        code = data.get("code", 0)
        if code != 0:
            raise CardPublishError(
                data.get("msg") or f"{method} {path} was rejected",
                code=code,
                status_code=response.status_code,
            )

        return data.get("data") or {}

    async def create_message(
        self,
        target: str,
        card: Dict[str, Any],
        reply_to_message_id: Optional[str] = None,
    ) -> str:
        """Send a card to a chat, or as a reply when a message id is given."""
        content = json.dumps(card, ensure_ascii=False)

        if reply_to_message_id:
            data = await self._request(
                "POST",
                f"/im/v1/messages/{reply_to_message_id}/reply",
                {"msg_type": "interactive", "content": content},
            )
        else:
            data = await self._request(
                "POST",
                "/im/v1/messages",
                {"receive_id": target, "msg_type": "interactive", "content": content},
                params={"receive_id_type": self._config.receive_id_type},
            )

        message_id = data.get("message_id")
        if not message_id:
            raise CardPublishError("Create message response did not include a message_id")
        return message_id

    async def edit_message(self, message_id: str, card: Dict[str, Any]) -> None:
        """Replace the card content of a sent message."""
        await self._request(
            "PATCH",
            f"/im/v1/messages/{message_id}",
            {"content": json.dumps(card, ensure_ascii=False)},
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
