"""
Typed views of the upstream payloads.

Solscan payloads are decoded permissively (unknown fields kept, most fields
optional) since the API adds fields freely; a payload that does not fit at all
raises ``MalformedResponseError`` instead of yielding missing attributes later.
"""

from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import MalformedResponseError

Number = Union[float, str]

M = TypeVar("M")


class UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# --- Solscan ---

class AccountDetail(UpstreamModel):
    account: Optional[str] = None
    lamports: int = 0
    type: Optional[str] = None
    owner_program: Optional[str] = None
    executable: bool = False
    rent_epoch: Optional[int] = None


class TokenMeta(UpstreamModel):
    address: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    supply: Optional[Number] = None
    price: Optional[Number] = None
    volume_24h: Optional[Number] = None
    created_at: Optional[float] = Field(None, validation_alias=AliasChoices("created_at", "created_time"))


class TransactionSummary(UpstreamModel):
    tx_hash: Optional[str] = Field(None, validation_alias=AliasChoices("txHash", "tx_hash"))
    slot: Optional[int] = None
    fee: int = 0
    status: Optional[str] = None
    block_time: Optional[int] = None


class Transfer(UpstreamModel):
    amount: Optional[Number] = None
    flow: Optional[str] = None
    block_time: Optional[int] = None
    token_address: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None


class TokenHolder(UpstreamModel):
    address: Optional[str] = None
    owner: Optional[str] = None
    amount: Optional[Number] = None
    rank: Optional[int] = None


class TrendingToken(UpstreamModel):
    address: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    price: Optional[Number] = None
    price_change_24h: Optional[Number] = Field(
        None, validation_alias=AliasChoices("priceChange24h", "price_change_24h")
    )
    volume_24h: Optional[Number] = Field(None, validation_alias=AliasChoices("volume24h", "volume_24h"))


class DefiActivity(UpstreamModel):
    platform: Optional[str] = None
    activity_type: Optional[str] = None
    usd_amount: Optional[Number] = None
    block_time: Optional[int] = None


class NativeBalance(UpstreamModel):
    balance: Optional[Number] = None
    value: Optional[Number] = None


class PortfolioToken(UpstreamModel):
    token_address: Optional[str] = None
    symbol: Optional[str] = None
    balance: Optional[Number] = None
    value: Optional[Number] = None


class Portfolio(UpstreamModel):
    total_value: Optional[Number] = None
    native_balance: Optional[NativeBalance] = None
    tokens: List[PortfolioToken] = Field(default_factory=list)


class ChainInfo(UpstreamModel):
    absolute_slot: Optional[int] = Field(None, validation_alias=AliasChoices("absoluteSlot", "absolute_slot"))
    current_tps: Optional[float] = Field(None, validation_alias=AliasChoices("currentTPS", "current_tps"))
    transaction_count: Optional[int] = Field(
        None, validation_alias=AliasChoices("transactionCount", "transaction_count")
    )
    current_epoch: Optional[int] = Field(None, validation_alias=AliasChoices("currentEpoch", "current_epoch"))
    max_epoch: Optional[int] = Field(None, validation_alias=AliasChoices("maxEpoch", "max_epoch"))
    sol_price: Optional[float] = Field(None, validation_alias=AliasChoices("solPrice", "sol_price"))
    market_cap: Optional[float] = Field(None, validation_alias=AliasChoices("marketCap", "market_cap"))


# --- Jupiter ---

class SwapInfo(UpstreamModel):
    amm_key: Optional[str] = Field(None, alias="ammKey")
    label: Optional[str] = None
    input_mint: str = Field(..., alias="inputMint")
    output_mint: str = Field(..., alias="outputMint")
    in_amount: str = Field(..., alias="inAmount")
    out_amount: str = Field(..., alias="outAmount")
    fee_amount: Optional[Number] = Field(None, validation_alias=AliasChoices("feeAmount", "fee"))
    fee_mint: Optional[str] = Field(None, alias="feeMint")


class RoutePlanStep(UpstreamModel):
    swap_info: SwapInfo = Field(..., alias="swapInfo")
    percent: Optional[float] = None


class Quote(UpstreamModel):
    input_mint: str = Field(..., alias="inputMint")
    in_amount: str = Field(..., alias="inAmount")
    output_mint: str = Field(..., alias="outputMint")
    out_amount: str = Field(..., alias="outAmount")
    other_amount_threshold: str = Field(..., alias="otherAmountThreshold")
    swap_mode: str = Field("ExactIn", alias="swapMode")
    slippage_bps: int = Field(0, alias="slippageBps")
    price_impact_pct: Optional[Number] = Field(None, alias="priceImpactPct")
    route_plan: List[RoutePlanStep] = Field(default_factory=list, alias="routePlan")


def decode(model_type: Type[M], payload: Any, source: str = "upstream") -> M:
    """Validates ``payload`` as ``model_type`` (a model or e.g. ``List[Model]``)."""
    try:
        return TypeAdapter(model_type).validate_python(payload)
    except PydanticValidationError as e:
        raise MalformedResponseError(
            f"Malformed response from {source}: {e.error_count()} validation error(s)",
            source=source,
            errors=e.errors(include_url=False),
        ) from e
