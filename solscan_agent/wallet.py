import json
from typing import Optional

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.core import RPCException
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .errors import NetworkError, UpstreamApiError, ValidationError

logger = get_logger(__name__)


def parse_pubkey(address: str) -> Pubkey:
    try:
        return Pubkey.from_string(address.strip())
    except ValueError as e:
        raise ValidationError("Invalid Solana wallet address format", address=address) from e


def load_keypair(private_key_json: Optional[str]) -> Optional[Keypair]:
    """Parses a JSON array of 64 secret-key bytes. Returns None when unset."""
    if not private_key_json:
        return None
    try:
        secret = json.loads(private_key_json)
        if not isinstance(secret, list):
            raise ValueError("private key must be a JSON array of bytes")
        return Keypair.from_bytes(bytes(secret))
    except (ValueError, TypeError) as e:
        # The key itself must never reach the logs
        raise ValidationError(f"SOLANA_PRIVATE_KEY is not a valid keypair: {type(e).__name__}") from e


async def get_sol_balance(rpc_url: str, address: str) -> int:
    """Returns the lamport balance of ``address`` via the configured RPC node."""
    pubkey = parse_pubkey(address)
    try:
        async with AsyncClient(rpc_url) as client:
            logger.debug(f"Checking SOL balance for {pubkey} via {rpc_url}")
            resp = await client.get_balance(pubkey)
            return resp.value
    except RPCException as e:
        logger.error(f"RPC error fetching balance for {pubkey}: {e}")
        raise UpstreamApiError(f"RPC error: {e}", address=address) from e
    except (SolanaRpcException, httpx.HTTPError) as e:
        logger.error(f"Could not reach RPC endpoint {rpc_url}: {e}")
        raise NetworkError(f"Could not reach Solana RPC: {e}", rpc_url=rpc_url) from e
