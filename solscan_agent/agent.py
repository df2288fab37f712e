from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from solders.keypair import Keypair

from .analytics import Analytics
from .cache import ResponseCache
from .config import Config
from .jupiter import JupiterClient
from .solscan import SolscanClient
from .wallet import load_keypair


@dataclass
class AgentContext:
    """Everything a tool call may touch: config, cache, gateways and wallet."""

    config: Config
    cache: ResponseCache
    solscan: SolscanClient
    jupiter: JupiterClient
    analytics: Analytics
    wallet: Optional[Keypair] = None

    @classmethod
    def from_config(
        cls,
        config: Config,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ResponseCache] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> "AgentContext":
        cache = cache or ResponseCache()
        solscan = SolscanClient(config.solscan_key, cache, http_client=http_client)
        jupiter = JupiterClient(config.jupiter_key, http_client=http_client)
        return cls(
            config=config,
            cache=cache,
            solscan=solscan,
            jupiter=jupiter,
            analytics=Analytics(solscan, clock=clock),
            wallet=load_keypair(config.private_key_json),
        )

    @property
    def wallet_address(self) -> Optional[str]:
        return str(self.wallet.pubkey()) if self.wallet is not None else None

    async def close(self) -> None:
        await self.solscan.close()
        await self.jupiter.close()
