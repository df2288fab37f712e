"""
Derived metrics computed from already-fetched upstream payloads.

Everything here is pure: no I/O, no clock reads unless ``now`` is omitted.
The risk weights and thresholds are shared with existing callers and must not
drift.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .schemas import DefiActivity, Quote, TokenHolder, TokenMeta, Transfer

SECONDS_PER_DAY = 60 * 60 * 24
DAYS_PER_YEAR = 365
VOLUME_UNIT = 1_000_000
LIQUIDITY_FALLBACK_SCORE = 80.0

CONCENTRATION_WEIGHT = 0.4
AGE_WEIGHT = 0.3
LIQUIDITY_WEIGHT = 0.3

LOW_RISK_THRESHOLD = 30
MEDIUM_RISK_THRESHOLD = 60


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


# --- Transfers ---

@dataclass
class FlowPoint:
    date: str
    net_value: float


@dataclass
class TransferFlow:
    total_inflow: float = 0.0
    total_outflow: float = 0.0
    net_flow: float = 0.0
    time_series: List[FlowPoint] = field(default_factory=list)


def analyze_transfer_flow(transfers: Iterable[Transfer]) -> TransferFlow:
    """Splits transfers into inflow/outflow and nets them per UTC day."""
    inflow = 0.0
    outflow = 0.0
    by_day: Dict[str, float] = {}
    for transfer in transfers:
        amount = to_float(transfer.amount)
        day = datetime.fromtimestamp(transfer.block_time or 0, tz=timezone.utc).strftime("%Y-%m-%d")
        if transfer.flow == "in":
            inflow += amount
            by_day[day] = by_day.get(day, 0.0) + amount
        else:
            outflow += amount
            by_day[day] = by_day.get(day, 0.0) - amount

    series = [FlowPoint(date=day, net_value=value) for day, value in sorted(by_day.items())]
    return TransferFlow(total_inflow=inflow, total_outflow=outflow, net_flow=inflow - outflow, time_series=series)


# --- DeFi activity ---

@dataclass
class PlatformActivity:
    platform: str
    activity_count: int = 0
    total_value_usd: float = 0.0


def aggregate_defi_activity(activities: Iterable[DefiActivity]) -> List[PlatformActivity]:
    stats: Dict[str, PlatformActivity] = {}
    for activity in activities:
        platform = activity.platform or "Unknown"
        entry = stats.setdefault(platform, PlatformActivity(platform=platform))
        entry.activity_count += 1
        if activity.usd_amount:
            entry.total_value_usd += to_float(activity.usd_amount)
    return list(stats.values())


# --- Token risk ---

@dataclass
class ConcentrationRisk:
    score: float
    top_three_holders_percent: float


@dataclass
class AgeRisk:
    score: float
    age_in_days: float


@dataclass
class LiquidityRisk:
    score: float
    volume_24h: Optional[float]


@dataclass
class OverallRisk:
    score: float
    risk_level: str


@dataclass
class RiskMetrics:
    concentration_risk: ConcentrationRisk
    age_risk: AgeRisk
    liquidity_risk: LiquidityRisk
    overall_risk: OverallRisk


def risk_level(score: float) -> str:
    if score < LOW_RISK_THRESHOLD:
        return "Low"
    if score < MEDIUM_RISK_THRESHOLD:
        return "Medium"
    return "High"


def concentration_risk(top_holdings: float, total_supply: float) -> float:
    return (top_holdings / total_supply) * 100 if total_supply > 0 else 0.0


def age_risk(age_in_days: float) -> float:
    return clamp(100 - (age_in_days / DAYS_PER_YEAR) * 100)


def liquidity_risk(volume_24h: Optional[float]) -> float:
    if not volume_24h:
        return LIQUIDITY_FALLBACK_SCORE
    return clamp(100 - (volume_24h / VOLUME_UNIT) * 10)


def overall_risk(concentration: float, age: float, liquidity: float) -> float:
    return (concentration * CONCENTRATION_WEIGHT) + (age * AGE_WEIGHT) + (liquidity * LIQUIDITY_WEIGHT)


def compute_token_risk(
    meta: TokenMeta, holders: Sequence[TokenHolder], now: Optional[float] = None
) -> RiskMetrics:
    """Scores a token from its metadata and its largest holders (largest first)."""
    now = time.time() if now is None else now

    total_supply = to_float(meta.supply)
    top_holdings = sum(to_float(holder.amount) for holder in holders[:3])
    concentration = concentration_risk(top_holdings, total_supply)

    created_at = meta.created_at if meta.created_at is not None else now
    age_in_days = (now - created_at) / SECONDS_PER_DAY
    age = age_risk(age_in_days)

    volume = to_float(meta.volume_24h, default=0.0) if meta.volume_24h is not None else None
    liquidity = liquidity_risk(volume)

    overall = overall_risk(concentration, age, liquidity)
    return RiskMetrics(
        concentration_risk=ConcentrationRisk(score=concentration, top_three_holders_percent=concentration),
        age_risk=AgeRisk(score=age, age_in_days=age_in_days),
        liquidity_risk=LiquidityRisk(score=liquidity, volume_24h=volume),
        overall_risk=OverallRisk(score=overall, risk_level=risk_level(overall)),
    )


# --- Swaps ---

@dataclass
class RouteHop:
    step: int
    source: str
    input_mint: str
    output_mint: str
    in_amount: str
    out_amount: str
    fee: Optional[str] = None


def format_route(quote: Quote) -> List[RouteHop]:
    hops = []
    for index, plan_step in enumerate(quote.route_plan):
        info = plan_step.swap_info
        hops.append(
            RouteHop(
                step=index + 1,
                source=info.label or "Unknown",
                input_mint=info.input_mint,
                output_mint=info.output_mint,
                in_amount=info.in_amount,
                out_amount=info.out_amount,
                fee=None if info.fee_amount is None else str(info.fee_amount),
            )
        )
    return hops


def calculate_price_impact(
    input_amount: str,
    input_decimals: int,
    output_amount: str,
    output_decimals: int,
    input_price: float,
    output_price: float,
) -> float:
    """Percentage of USD value lost between input and output, floored at 0."""
    input_value = (to_float(input_amount) / (10 ** input_decimals)) * input_price
    output_value = (to_float(output_amount) / (10 ** output_decimals)) * output_price
    if input_value == 0:
        return 0.0
    return max(0.0, ((input_value - output_value) / input_value) * 100)
