"""
Jupiter Swap API gateway.

Quotes are never cached: they go stale within a slot or two.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger

from .errors import AgentError, MalformedResponseError, ValidationError
from .gateway import HttpGateway
from .metrics import RouteHop, format_route
from .result import ApiResult
from .schemas import Quote, decode

JUPITER_API_BASE = "https://api.jup.ag"
JUPITER_LITE_API_BASE = "https://lite-api.jup.ag"
QUOTE_PATH = "/swap/v1/quote"

DEFAULT_SLIPPAGE_BPS = 50
SWAP_MODES = ("ExactIn", "ExactOut")

logger = get_logger(__name__)


@dataclass
class PopularToken:
    symbol: str
    name: str
    mint: str


POPULAR_TOKENS: List[PopularToken] = [
    PopularToken("SOL", "Solana", "So11111111111111111111111111111111111111112"),
    PopularToken("USDC", "USD Coin", "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"),
    PopularToken("USDT", "Tether USD", "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"),
    PopularToken("BONK", "Bonk", "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"),
    PopularToken("JUP", "Jupiter", "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"),
]


def list_popular_tokens() -> List[PopularToken]:
    return list(POPULAR_TOKENS)


def find_popular_token(mint: str) -> Optional[PopularToken]:
    return next((t for t in POPULAR_TOKENS if t.mint == mint), None)


@dataclass
class RouteSummary:
    routes: List[RouteHop] = field(default_factory=list)
    out_amount: Optional[str] = None
    other_amount_threshold: Optional[str] = None
    price_impact_pct: Optional[str] = None


class JupiterClient(HttpGateway):
    name = "Jupiter"

    def __init__(
        self,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(http_client)
        self.api_key = api_key
        # The keyless tier lives on a separate host
        self.base_url = (base_url or (JUPITER_API_BASE if api_key else JUPITER_LITE_API_BASE)).rstrip("/")

    def _build_headers(self) -> Dict[str, str]:
        headers = super()._build_headers()
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def get_swap_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: str,
        slippage_bps: int = DEFAULT_SLIPPAGE_BPS,
        swap_mode: str = "ExactIn",
    ) -> ApiResult[Quote]:
        """Requests a quote; ``amount`` is forwarded as-is in base units."""
        if swap_mode not in SWAP_MODES:
            return ApiResult.fail(ValidationError(f"Unsupported swap mode: {swap_mode}", swap_mode=swap_mode))
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": amount,
            "slippageBps": slippage_bps,
            "swapMode": swap_mode,
            "restrictIntermediateTokens": "true",
        }
        try:
            body = await self._request_json("GET", f"{self.base_url}{QUOTE_PATH}", params=params)
            quote = decode(Quote, body, source="Jupiter quote")
        except AgentError as e:
            logger.error(f"Error getting swap quote {input_mint} -> {output_mint}: {e}")
            return ApiResult.fail(e)
        return ApiResult.ok(quote)

    async def get_best_route(self, input_mint: str, output_mint: str, amount: str) -> ApiResult[RouteSummary]:
        result = await self.get_swap_quote(input_mint, output_mint, amount)
        if not result.success:
            return result  # type: ignore[return-value]
        quote = result.data
        if quote is None:
            return ApiResult.fail(MalformedResponseError("Unable to get quote information"))
        return ApiResult.ok(
            RouteSummary(
                routes=format_route(quote),
                out_amount=quote.out_amount,
                other_amount_threshold=quote.other_amount_threshold,
                price_impact_pct=None if quote.price_impact_pct is None else str(quote.price_impact_pct),
            )
        )
