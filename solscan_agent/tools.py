"""
Tool and resource handlers.

Each handler takes plain arguments, talks to the gateways through the
``AgentContext`` and returns response text. Failures propagate as
``AgentError``; turning them into MCP errors is the server's job.
"""

import json
from typing import Optional

from mcp.server.fastmcp.utilities.logging import get_logger

from . import dashboard
from .agent import AgentContext
from .errors import NotFoundError, ValidationError
from .jupiter import DEFAULT_SLIPPAGE_BPS, list_popular_tokens
from .wallet import get_sol_balance, parse_pubkey

DEFAULT_TRANSACTION_LIMIT = 10
DEFAULT_TRENDING_LIMIT = 5
DEFAULT_ACTIVITY_LIMIT = 20

logger = get_logger(__name__)


def require(name: str, value: Optional[str]) -> str:
    """Rejects missing or blank required string arguments."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required", argument=name)
    return str(value).strip()


def positive_or_default(value: Optional[int], default: int) -> int:
    return value if isinstance(value, int) and value > 0 else default


class SolscanTools:
    def __init__(self, agent: AgentContext):
        self.agent = agent

    # --- Accounts & tokens ---

    async def get_account_info(self, address: str) -> str:
        address = require("Address", address)
        account = (await self.agent.solscan.account_detail(address)).unwrap()
        return dashboard.account_info_markdown(address, account)

    async def get_token_info(self, address: str) -> str:
        address = require("Token mint address", address)
        meta = (await self.agent.solscan.token_meta(address)).unwrap()
        return dashboard.token_info_markdown(address, meta)

    async def get_transaction_history(self, address: str, limit: Optional[int] = None) -> str:
        address = require("Address", address)
        limit = positive_or_default(limit, DEFAULT_TRANSACTION_LIMIT)
        transactions = (await self.agent.solscan.account_transactions(address, limit=limit)).unwrap()
        return dashboard.transaction_history_markdown(address, transactions or [])

    # --- Dashboards ---

    async def get_network_overview(self) -> str:
        info = (await self.agent.solscan.chain_info()).unwrap()
        return dashboard.network_overview(info)

    async def get_trending_tokens(self, limit: Optional[int] = None) -> str:
        limit = positive_or_default(limit, DEFAULT_TRENDING_LIMIT)
        tokens = (await self.agent.solscan.trending_tokens(limit=limit)).unwrap()
        return dashboard.trending_tokens(tokens or [], limit=limit)

    async def analyze_wallet(self, address: str) -> str:
        address = require("Wallet address", address)
        parse_pubkey(address)
        logger.info(f"Analyzing wallet {address[:6]}...{address[-4:]}")
        portfolio = (await self.agent.solscan.account_portfolio(address)).unwrap()
        return dashboard.wallet_overview(address, portfolio)

    async def analyze_transfer_flow(self, address: str, is_token: bool = False, limit: Optional[int] = None) -> str:
        address = require("Address", address)
        limit = positive_or_default(limit, DEFAULT_ACTIVITY_LIMIT)
        history = (await self.agent.analytics.transfer_history(address, is_token=is_token, limit=limit)).unwrap()
        return dashboard.transfer_flow(address, history)

    async def analyze_defi_activity(self, address: str, limit: Optional[int] = None) -> str:
        address = require("Address", address)
        limit = positive_or_default(limit, DEFAULT_ACTIVITY_LIMIT)
        report = (await self.agent.analytics.defi_activities(address, limit=limit)).unwrap()
        return dashboard.defi_activity(address, report)

    async def analyze_token_risk(self, address: str) -> str:
        address = require("Token address", address)
        metrics = (await self.agent.analytics.token_risk_metrics(address)).unwrap()
        return dashboard.token_risk_analysis(address, metrics)

    # --- Swaps ---

    async def get_swap_quote(
        self, input_mint: str, output_mint: str, amount: str, slippage_bps: Optional[int] = None
    ) -> str:
        input_mint = require("Input mint", input_mint)
        output_mint = require("Output mint", output_mint)
        amount = require("Amount", amount)
        slippage_bps = positive_or_default(slippage_bps, DEFAULT_SLIPPAGE_BPS)
        quote = (await self.agent.jupiter.get_swap_quote(input_mint, output_mint, amount, slippage_bps)).unwrap()
        return dashboard.swap_quote_markdown(amount, quote)

    async def analyze_swap(self, from_token: str, to_token: str, amount: str) -> str:
        from_token = require("From token", from_token)
        to_token = require("To token", to_token)
        amount = require("Amount", amount)
        route = (await self.agent.jupiter.get_best_route(from_token, to_token, amount)).unwrap()
        return dashboard.swap_analysis(from_token, to_token, amount, route)

    async def list_popular_tokens(self) -> str:
        return dashboard.popular_tokens_markdown(list_popular_tokens())

    # --- Wallet ---

    def _connected_wallet(self) -> str:
        address = self.agent.wallet_address
        if address is None:
            raise NotFoundError("No wallet is connected")
        return address

    async def get_wallet_balance(self, address: Optional[str] = None) -> str:
        connected = not (address and address.strip())
        target = self._connected_wallet() if connected else address.strip()
        lamports = await get_sol_balance(self.agent.config.rpc_url, target)
        return dashboard.wallet_balance_markdown(target, lamports, connected=connected)

    async def generate_wallet_dashboard(self) -> str:
        address = self._connected_wallet()
        sections = [
            await self.get_network_overview(),
            await self.get_trending_tokens(),
            await self.analyze_wallet(address),
        ]
        return dashboard.full_dashboard(sections)

    # --- Resources ---

    async def read_chain_info(self) -> str:
        body = (await self.agent.solscan.chain_info_raw()).unwrap()
        return json.dumps(body, indent=2)

    async def read_wallet(self, address: str) -> str:
        address = require("Address", address)
        body = (await self.agent.solscan.fetch("/account/detail", {"address": address})).unwrap()
        return json.dumps(body, indent=2)
