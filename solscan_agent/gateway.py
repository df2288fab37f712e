from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger

from .errors import MalformedResponseError, NetworkError, UpstreamApiError

GENERIC_FAILURE_MESSAGE = "API request failed"

logger = get_logger(__name__)


def build_query(params: Optional[Dict[str, Any]]) -> str:
    """Encodes ``params`` in insertion order, skipping None values."""
    if not params:
        return ""
    parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f"{quote(str(key), safe='')}={quote(str(value), safe='')}")
    return "&".join(parts)


def extract_error_message(body: Any) -> Optional[str]:
    """Pulls the embedded message out of an upstream failure body, if any."""
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if isinstance(errors, dict) and errors.get("message"):
        return str(errors["message"])
    for key in ("error", "message"):
        if isinstance(body.get(key), str) and body[key]:
            return body[key]
    return None


class HttpGateway:
    """Shared plumbing for the upstream HTTP services.

    Every request is a single attempt; failures are raised as typed
    ``AgentError`` subclasses for the caller to fold into an ``ApiResult``.
    """

    name = "upstream"
    timeout_s = 15

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self._client = http_client
        self._owns_client = http_client is None

    def _build_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        client = self._get_client()
        headers = self._build_headers()
        headers.update(kwargs.pop("headers", {}) or {})
        logger.debug(f"{self.name}: {method} {url}")
        try:
            response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.name}: request to {url} failed: {e}")
            raise NetworkError(f"{self.name} request failed: {e}", url=url) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            message = extract_error_message(body) or f"{self.name} HTTP {response.status_code}"
            logger.warning(f"{self.name}: {url} answered {response.status_code}: {message}")
            raise UpstreamApiError(message, status_code=response.status_code, url=url)

        if body is None:
            raise MalformedResponseError(f"{self.name} returned a non-JSON body", url=url)

        if isinstance(body, dict) and body.get("success") is False:
            message = extract_error_message(body) or GENERIC_FAILURE_MESSAGE
            logger.warning(f"{self.name}: {url} reported failure: {message}")
            raise UpstreamApiError(message, status_code=response.status_code, url=url)

        return body
