from dataclasses import dataclass, field
from typing import Callable, List, Optional

from mcp.server.fastmcp.utilities.logging import get_logger

from .metrics import (
    PlatformActivity,
    RiskMetrics,
    TransferFlow,
    aggregate_defi_activity,
    analyze_transfer_flow,
    compute_token_risk,
)
from .result import ApiResult
from .schemas import DefiActivity, Transfer
from .solscan import SolscanClient

RISK_HOLDER_SAMPLE = 10

logger = get_logger(__name__)


@dataclass
class TransferHistory:
    transfers: List[Transfer] = field(default_factory=list)
    analysis: TransferFlow = field(default_factory=TransferFlow)


@dataclass
class DefiActivityReport:
    activities: List[DefiActivity] = field(default_factory=list)
    platform_analysis: List[PlatformActivity] = field(default_factory=list)


class Analytics:
    """Combines Solscan lookups with the derived metrics."""

    def __init__(self, solscan: SolscanClient, clock: Optional[Callable[[], float]] = None):
        self.solscan = solscan
        self._clock = clock

    async def transfer_history(self, address: str, is_token: bool = False, limit: int = 20) -> ApiResult[TransferHistory]:
        result = await self.solscan.transfers(address, is_token=is_token, limit=limit)
        if not result.success:
            logger.error(f"Error fetching transfer history for {address}: {result.error}")
            return result  # type: ignore[return-value]
        transfers = result.data or []
        return ApiResult.ok(TransferHistory(transfers=transfers, analysis=analyze_transfer_flow(transfers)))

    async def defi_activities(self, address: str, limit: int = 20) -> ApiResult[DefiActivityReport]:
        result = await self.solscan.defi_activities(address, limit=limit)
        if not result.success:
            logger.error(f"Error fetching DeFi activities for {address}: {result.error}")
            return result  # type: ignore[return-value]
        activities = result.data or []
        return ApiResult.ok(
            DefiActivityReport(activities=activities, platform_analysis=aggregate_defi_activity(activities))
        )

    async def token_risk_metrics(self, token_address: str) -> ApiResult[RiskMetrics]:
        # Metadata first, then holders; kept sequential
        meta = await self.solscan.token_meta(token_address)
        if not meta.success:
            logger.error(f"Error fetching token metadata for {token_address}: {meta.error}")
            return meta  # type: ignore[return-value]
        holders = await self.solscan.token_holders(token_address, limit=RISK_HOLDER_SAMPLE)
        if not holders.success:
            logger.error(f"Error fetching token holders for {token_address}: {holders.error}")
            return holders  # type: ignore[return-value]
        now = self._clock() if self._clock is not None else None
        return ApiResult.ok(compute_token_risk(meta.data, holders.data or [], now=now))
