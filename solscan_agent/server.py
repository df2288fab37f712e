import sys
from contextlib import asynccontextmanager, contextmanager
from typing import Annotated, AsyncIterator, Iterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ResourceError, ToolError
from mcp.server.fastmcp.utilities.logging import configure_logging, get_logger
from pydantic import Field

from .agent import AgentContext
from .config import load_config, load_env_file
from .errors import AgentError, ConfigError
from .settings import SettingsStore
from .tools import SolscanTools

SERVER_NAME = "solscan-agent"

logger = get_logger(__name__)


@contextmanager
def tool_failure(action: str) -> Iterator[None]:
    """Re-raises AgentErrors as fatal tool errors prefixed with ``action``."""
    try:
        yield
    except AgentError as e:
        logger.error(f"{action}: {e.to_dict()}")
        raise ToolError(f"{action}: {e}") from e


@contextmanager
def resource_failure(action: str) -> Iterator[None]:
    try:
        yield
    except AgentError as e:
        logger.error(f"{action}: {e.to_dict()}")
        raise ResourceError(f"{action}: {e}") from e


def create_server(agent: AgentContext) -> FastMCP:
    """Builds the MCP server with every tool and resource bound to ``agent``."""
    tools = SolscanTools(agent)

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict]:
        try:
            yield {}
        finally:
            await agent.close()

    mcp = FastMCP(name=SERVER_NAME, lifespan=lifespan)

    # --- Resources ---

    @mcp.resource(
        "solscan://chaininfo",
        name="Solana Chain Info",
        description="Current Solana network status and statistics",
        mime_type="application/json",
    )
    async def chain_info() -> str:
        with resource_failure("Failed to fetch chain info"):
            return await tools.read_chain_info()

    @mcp.resource(
        "solscan://wallet/{address}",
        name="Wallet",
        description="Account details for a Solana address",
        mime_type="application/json",
    )
    async def wallet_info(address: str) -> str:
        with resource_failure("Failed to fetch wallet info"):
            return await tools.read_wallet(address)

    if agent.wallet_address is not None:
        connected_address = agent.wallet_address

        @mcp.resource(
            f"solscan://wallet/{connected_address}",
            name="Connected Wallet",
            description=f"Information about the connected wallet: {connected_address}",
            mime_type="application/json",
        )
        async def connected_wallet_info() -> str:
            with resource_failure("Failed to fetch wallet info"):
                return await tools.read_wallet(connected_address)

    # --- Account tools ---

    @mcp.tool()
    async def get_account_info(address: Annotated[str, Field(description="Solana account address")]) -> str:
        """Get detailed information about a Solana account"""
        with tool_failure("Failed to get account info"):
            return await tools.get_account_info(address)

    @mcp.tool()
    async def get_token_info(address: Annotated[str, Field(description="Token mint address")]) -> str:
        """Get information about a Solana SPL token"""
        with tool_failure("Failed to get token info"):
            return await tools.get_token_info(address)

    @mcp.tool()
    async def get_transaction_history(
        address: Annotated[str, Field(description="Solana account address")],
        limit: Annotated[
            Optional[int], Field(description="Maximum number of transactions to return (default: 10)")
        ] = None,
    ) -> str:
        """Get transaction history for an account"""
        with tool_failure("Failed to get transaction history"):
            return await tools.get_transaction_history(address, limit)

    # --- Dashboard tools ---

    @mcp.tool()
    async def get_network_overview() -> str:
        """Get a comprehensive overview of the Solana network"""
        with tool_failure("Failed to generate network overview"):
            return await tools.get_network_overview()

    @mcp.tool()
    async def get_trending_tokens(
        limit: Annotated[
            Optional[int], Field(description="Maximum number of trending tokens to retrieve (default: 5)")
        ] = None,
    ) -> str:
        """Get trending tokens on Solana with price and volume data"""
        with tool_failure("Failed to get trending tokens"):
            return await tools.get_trending_tokens(limit)

    @mcp.tool()
    async def analyze_wallet(address: Annotated[str, Field(description="Solana wallet address to analyze")]) -> str:
        """Generate a comprehensive analysis of a wallet's holdings and activity"""
        with tool_failure("Failed to analyze wallet"):
            return await tools.analyze_wallet(address)

    @mcp.tool()
    async def analyze_transfer_flow(
        address: Annotated[str, Field(description="Account address, or token mint when isToken is set")],
        isToken: Annotated[bool, Field(description="Treat the address as a token mint")] = False,
        limit: Annotated[Optional[int], Field(description="Maximum number of transfers to analyze (default: 20)")] = None,
    ) -> str:
        """Summarize token inflow and outflow for an account or mint, bucketed by day"""
        with tool_failure("Failed to analyze transfer flow"):
            return await tools.analyze_transfer_flow(address, is_token=isToken, limit=limit)

    @mcp.tool()
    async def analyze_defi_activity(
        address: Annotated[str, Field(description="Solana account address")],
        limit: Annotated[
            Optional[int], Field(description="Maximum number of activities to analyze (default: 20)")
        ] = None,
    ) -> str:
        """Break down an account's DeFi activity by platform"""
        with tool_failure("Failed to analyze DeFi activity"):
            return await tools.analyze_defi_activity(address, limit)

    # --- Analytics tools ---

    @mcp.tool()
    async def analyze_token_risk(address: Annotated[str, Field(description="Token mint address to analyze")]) -> str:
        """Get detailed risk metrics for a token including concentration, liquidity, and age analysis"""
        with tool_failure("Failed to analyze token risk"):
            return await tools.analyze_token_risk(address)

    # --- Jupiter swap tools ---

    @mcp.tool()
    async def get_swap_quote(
        inputMint: Annotated[str, Field(description="Input token mint address")],
        outputMint: Annotated[str, Field(description="Output token mint address")],
        amount: Annotated[str, Field(description="Amount to swap in raw units (based on token decimals)")],
        slippageBps: Annotated[
            Optional[int], Field(description="Slippage tolerance in basis points (e.g., 50 = 0.5%)")
        ] = None,
    ) -> str:
        """Get a swap quote for trading between two tokens via Jupiter"""
        with tool_failure("Failed to get swap quote"):
            return await tools.get_swap_quote(inputMint, outputMint, amount, slippageBps)

    @mcp.tool()
    async def analyze_swap(
        fromToken: Annotated[str, Field(description="Source token mint address")],
        toToken: Annotated[str, Field(description="Destination token mint address")],
        amount: Annotated[str, Field(description="Amount to swap in raw units")],
    ) -> str:
        """Analyze a potential swap between two tokens with detailed routing insights"""
        with tool_failure("Failed to analyze swap"):
            return await tools.analyze_swap(fromToken, toToken, amount)

    @mcp.tool()
    async def list_popular_tokens() -> str:
        """List popular tokens on Solana with their addresses"""
        with tool_failure("Failed to list popular tokens"):
            return await tools.list_popular_tokens()

    # --- Wallet tools, only with a configured keypair ---

    if agent.wallet is not None:

        @mcp.tool()
        async def get_wallet_balance(
            address: Annotated[
                Optional[str], Field(description="Optional wallet address (uses connected wallet if not provided)")
            ] = None,
        ) -> str:
            """Get the balance of the connected wallet"""
            with tool_failure("Failed to get wallet balance"):
                return await tools.get_wallet_balance(address)

        @mcp.tool()
        async def generate_wallet_dashboard() -> str:
            """Generate a complete dashboard for the connected wallet with all metrics"""
            with tool_failure("Failed to generate wallet dashboard"):
                return await tools.generate_wallet_dashboard()

    return mcp


def main() -> None:
    load_env_file()
    try:
        config = load_config(settings_store=SettingsStore())
    except ConfigError as e:
        configure_logging("INFO")
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    configure_logging(config.log_level.upper())

    try:
        agent = AgentContext.from_config(config)
    except AgentError as e:
        logger.error(f"Could not initialize agent: {e}")
        sys.exit(1)
    if agent.wallet_address:
        logger.info(f"Wallet address: {agent.wallet_address}")
    else:
        logger.info("No wallet configured; wallet tools are disabled.")

    logger.info(f"Starting {SERVER_NAME} on stdio")
    create_server(agent).run(transport="stdio")


if __name__ == "__main__":
    main()
