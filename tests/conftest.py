import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import pytest
from solders.keypair import Keypair

from solscan_agent.agent import AgentContext
from solscan_agent.cache import ResponseCache
from solscan_agent.config import Config
from solscan_agent.server import create_server
from solscan_agent.settings import SettingsStore

# Fixed "now" for anything time dependent (2023-11-14T22:13:20Z)
NOW = 1_700_000_000.0

SOLSCAN_PREFIX = "/v2.0"
TOKEN_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
WALLET_ADDRESS = "9C6hybhQ6Aycep9jaUnP6uL9ZYvDjUp1aSkFWPUFJtpj"
SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class FakeUpstream:
    """httpx MockTransport handler serving canned responses by URL path."""

    def __init__(self) -> None:
        self.routes: Dict[str, Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, body: Any = None, status_code: int = 200) -> None:
        self.routes[path] = (status_code, body)

    def add_solscan(self, endpoint: str, data: Any) -> None:
        self.add(SOLSCAN_PREFIX + endpoint, {"success": True, "data": data})

    def fail_with(self, path: str, exc: Exception) -> None:
        self.routes[path] = (0, exc)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path not in self.routes:
            return httpx.Response(404, json={"success": False, "errors": {"message": "Route not found"}})
        status_code, body = self.routes[request.url.path]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, (str, bytes)):
            return httpx.Response(status_code, content=body)
        return httpx.Response(status_code, json=body)


class FakeClock:
    def __init__(self, now: float = NOW):
        self.now = now

    def __call__(self) -> float:
        return self.now


def tool_text(result: Union[tuple, list]) -> str:
    """Text of the first content block from FastMCP.call_tool, across mcp versions."""
    if isinstance(result, tuple):
        result = result[0]
    return result[0].text


def keypair_json(kp: Optional[Keypair] = None) -> str:
    kp = kp or Keypair()
    return json.dumps(list(bytes(kp)))


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> Config:
    return Config(solscan_key="test-solscan-key", jupiter_key="test-jupiter-key")


@pytest.fixture
def agent(config: Config, http_client: httpx.AsyncClient, clock: FakeClock) -> AgentContext:
    return AgentContext.from_config(config, http_client=http_client, cache=ResponseCache(clock=clock), clock=clock)


@pytest.fixture
def wallet_keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def wallet_agent(
    config: Config, http_client: httpx.AsyncClient, clock: FakeClock, wallet_keypair: Keypair
) -> AgentContext:
    wallet_config = config.model_copy(update={"private_key_json": keypair_json(wallet_keypair)})
    return AgentContext.from_config(
        wallet_config, http_client=http_client, cache=ResponseCache(clock=clock), clock=clock
    )


@pytest.fixture
def server(agent: AgentContext):
    return create_server(agent)


@pytest.fixture
def wallet_server(wallet_agent: AgentContext):
    return create_server(wallet_agent)


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Path for a settings file that does not exist yet."""
    return tmp_path / "settings" / "user-settings.json"


@pytest.fixture
def settings_store(settings_path: Path) -> SettingsStore:
    return SettingsStore(settings_path)
