"""
Solscan Pro API (v2.0) gateway.

Wraps the account/token endpoints used by the agent. Successful responses are
cached by full request URL for the lifetime of the process (see ``ResponseCache``);
failures are never cached.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger

from .cache import ResponseCache
from .errors import AgentError, MalformedResponseError
from .gateway import HttpGateway, build_query
from .result import ApiResult
from .schemas import (
    AccountDetail,
    ChainInfo,
    DefiActivity,
    Portfolio,
    TokenHolder,
    TokenMeta,
    TransactionSummary,
    Transfer,
    TrendingToken,
    decode,
)

SOLSCAN_API_BASE = "https://pro-api.solscan.io/v2.0"
SOLSCAN_CHAIN_INFO_URL = "https://public-api.solscan.io/chaininfo"

T = TypeVar("T")

logger = get_logger(__name__)


class SolscanClient(HttpGateway):
    name = "Solscan"

    def __init__(
        self,
        api_key: str,
        cache: ResponseCache,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = SOLSCAN_API_BASE,
        chain_info_url: str = SOLSCAN_CHAIN_INFO_URL,
    ):
        super().__init__(http_client)
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.chain_info_url = chain_info_url

    def _build_headers(self) -> Dict[str, str]:
        headers = super()._build_headers()
        if self.api_key:
            headers["token"] = self.api_key
            headers["Authorization"] = self.api_key
        return headers

    def build_url(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        query = build_query(params)
        return f"{self.base_url}{endpoint}{'?' + query if query else ''}"

    async def fetch(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> ApiResult[Dict[str, Any]]:
        """GETs ``endpoint`` with ``params``, serving from the cache within the TTL."""
        url = self.build_url(endpoint, params)
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug(f"Cache hit for {url}")
            return ApiResult.ok(cached)

        try:
            body = await self._request_json("GET", url)
        except AgentError as e:
            return ApiResult.fail(e)

        self.cache.set(url, body)
        return ApiResult.ok(body)

    async def fetch_data(
        self, endpoint: str, params: Optional[Dict[str, Any]], model_type: Type[T]
    ) -> ApiResult[T]:
        """Like ``fetch`` but decodes the envelope's ``data`` field as ``model_type``."""
        result = await self.fetch(endpoint, params)
        if not result.success:
            return result  # type: ignore[return-value]
        body = result.data
        if not isinstance(body, dict) or "data" not in body:
            return ApiResult.fail(MalformedResponseError(f"{self.name} response has no data field", endpoint=endpoint))
        try:
            return ApiResult.ok(decode(model_type, body["data"], source=f"{self.name} {endpoint}"))
        except MalformedResponseError as e:
            logger.warning(f"{e} ({endpoint})")
            return ApiResult.fail(e)

    # --- Endpoints ---

    async def account_detail(self, address: str) -> ApiResult[AccountDetail]:
        return await self.fetch_data("/account/detail", {"address": address}, AccountDetail)

    async def token_meta(self, address: str) -> ApiResult[TokenMeta]:
        return await self.fetch_data("/token/meta", {"address": address}, TokenMeta)

    async def account_transactions(self, address: str, limit: int = 10) -> ApiResult[List[TransactionSummary]]:
        return await self.fetch_data(
            "/account/transactions", {"account": address, "limit": limit}, List[TransactionSummary]
        )

    async def account_portfolio(self, address: str) -> ApiResult[Portfolio]:
        return await self.fetch_data("/account/portfolio", {"address": address}, Portfolio)

    async def transfers(self, address: str, is_token: bool = False, limit: int = 20) -> ApiResult[List[Transfer]]:
        if is_token:
            return await self.fetch_data("/token/transfer", {"limit": limit, "token": address}, List[Transfer])
        return await self.fetch_data("/account/transfer", {"limit": limit, "address": address}, List[Transfer])

    async def token_holders(self, address: str, limit: int = 20) -> ApiResult[List[TokenHolder]]:
        return await self.fetch_data("/token/holders", {"address": address, "limit": limit}, List[TokenHolder])

    async def trending_tokens(self, limit: int = 10) -> ApiResult[List[TrendingToken]]:
        return await self.fetch_data("/token/trending", {"limit": limit}, List[TrendingToken])

    async def defi_activities(self, address: str, limit: int = 20) -> ApiResult[List[DefiActivity]]:
        return await self.fetch_data(
            "/account/defi/activities", {"address": address, "limit": limit}, List[DefiActivity]
        )

    async def chain_info_raw(self) -> ApiResult[Any]:
        """Public chain statistics; not cached and no API key needed."""
        try:
            return ApiResult.ok(await self._request_json("GET", self.chain_info_url))
        except AgentError as e:
            return ApiResult.fail(e)

    async def chain_info(self) -> ApiResult[ChainInfo]:
        result = await self.chain_info_raw()
        if not result.success:
            return result  # type: ignore[return-value]
        body = result.data
        # The public endpoint has answered both with and without an envelope
        payload = body.get("data", body) if isinstance(body, dict) else body
        try:
            return ApiResult.ok(decode(ChainInfo, payload, source="Solscan chaininfo"))
        except MalformedResponseError as e:
            return ApiResult.fail(e)
