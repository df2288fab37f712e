import httpx
import pytest

from solscan_agent.cache import ResponseCache
from solscan_agent.errors import (
    ErrorKind,
    MalformedResponseError,
    NetworkError,
    UpstreamApiError,
    ValidationError,
)
from solscan_agent.jupiter import JUPITER_LITE_API_BASE, JupiterClient
from solscan_agent.solscan import SOLSCAN_API_BASE, SolscanClient
from tests.conftest import SOL_MINT, SOLSCAN_PREFIX, USDC_MINT, FakeClock, FakeUpstream

pytestmark = pytest.mark.asyncio

QUOTE_BODY = {
    "inputMint": SOL_MINT,
    "inAmount": "1000000000",
    "outputMint": USDC_MINT,
    "outAmount": "150000000",
    "otherAmountThreshold": "149250000",
    "swapMode": "ExactIn",
    "slippageBps": 50,
    "priceImpactPct": "0.0012",
    "routePlan": [
        {
            "swapInfo": {
                "ammKey": "amm1",
                "label": "Whirlpool",
                "inputMint": SOL_MINT,
                "outputMint": USDC_MINT,
                "inAmount": "1000000000",
                "outAmount": "150000000",
                "feeAmount": "25000",
                "feeMint": SOL_MINT,
            },
            "percent": 100,
        }
    ],
}


def _solscan(upstream: FakeUpstream, clock: FakeClock = None) -> SolscanClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return SolscanClient("key-123", ResponseCache(clock=clock or FakeClock()), http_client=client)


def _jupiter(upstream: FakeUpstream, api_key: str = "jup-key") -> JupiterClient:
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    return JupiterClient(api_key, http_client=client)


# --- Solscan ---

async def test_build_url_skips_none_and_encodes():
    client = SolscanClient("k", ResponseCache())
    url = client.build_url("/account/transactions", {"account": "a b/c", "limit": 10, "before": None})
    assert url == f"{SOLSCAN_API_BASE}/account/transactions?account=a%20b%2Fc&limit=10"
    assert client.build_url("/token/trending") == f"{SOLSCAN_API_BASE}/token/trending"


async def test_fetch_success_sends_key_and_caches(upstream: FakeUpstream):
    upstream.add_solscan("/account/detail", {"lamports": 1})
    client = _solscan(upstream)

    first = await client.fetch("/account/detail", {"address": "abc"})
    second = await client.fetch("/account/detail", {"address": "abc"})

    assert first.success and second.success
    assert first.data == second.data == {"success": True, "data": {"lamports": 1}}
    calls = upstream.calls(SOLSCAN_PREFIX + "/account/detail")
    assert len(calls) == 1
    assert calls[0].headers["token"] == "key-123"
    assert calls[0].url.params["address"] == "abc"


async def test_fetch_refetches_after_ttl(upstream: FakeUpstream):
    upstream.add_solscan("/account/detail", {"lamports": 1})
    clock = FakeClock()
    client = _solscan(upstream, clock)

    await client.fetch("/account/detail", {"address": "abc"})
    clock.now += 61
    await client.fetch("/account/detail", {"address": "abc"})

    assert len(upstream.calls(SOLSCAN_PREFIX + "/account/detail")) == 2


async def test_distinct_params_are_distinct_cache_keys(upstream: FakeUpstream):
    upstream.add_solscan("/account/detail", {"lamports": 1})
    client = _solscan(upstream)

    await client.fetch("/account/detail", {"address": "abc"})
    await client.fetch("/account/detail", {"address": "def"})

    assert len(upstream.calls(SOLSCAN_PREFIX + "/account/detail")) == 2


async def test_fetch_explicit_failure_body_is_not_cached(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", {"success": False, "errors": {"message": "Invalid token"}})
    client = _solscan(upstream)

    result = await client.fetch("/token/meta", {"address": "x"})

    assert not result.success
    assert result.error == "Invalid token"
    assert isinstance(result.exception, UpstreamApiError)
    assert len(client.cache) == 0


async def test_fetch_failure_body_without_message_uses_fallback(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", {"success": False})
    result = await _solscan(upstream).fetch("/token/meta", {"address": "x"})
    assert result.error == "API request failed"


async def test_fetch_http_error_status(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", {"detail": "nope"}, status_code=500)
    result = await _solscan(upstream).fetch("/token/meta", {"address": "x"})

    assert not result.success
    assert result.exception.kind == ErrorKind.UPSTREAM_API
    assert result.exception.status_code == 500
    assert "HTTP 500" in result.error


async def test_fetch_http_error_status_with_embedded_message(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", {"errors": {"message": "Unauthorized key"}}, status_code=401)
    result = await _solscan(upstream).fetch("/token/meta", {"address": "x"})
    assert result.error == "Unauthorized key"


async def test_fetch_network_error(upstream: FakeUpstream):
    upstream.fail_with(SOLSCAN_PREFIX + "/token/meta", httpx.ConnectError("connection refused"))
    result = await _solscan(upstream).fetch("/token/meta", {"address": "x"})

    assert not result.success
    assert isinstance(result.exception, NetworkError)
    with pytest.raises(NetworkError):
        result.unwrap()


async def test_fetch_non_json_body(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", "<html>oops</html>")
    result = await _solscan(upstream).fetch("/token/meta", {"address": "x"})
    assert isinstance(result.exception, MalformedResponseError)


async def test_typed_endpoint_decodes_data(upstream: FakeUpstream):
    upstream.add_solscan(
        "/account/detail",
        {"account": "abc", "lamports": 2_500_000_000, "type": "system_account",
         "owner_program": "11111111111111111111111111111111", "executable": False, "extra": 1},
    )
    result = await _solscan(upstream).account_detail("abc")

    assert result.success
    assert result.data.lamports == 2_500_000_000
    assert result.data.type == "system_account"


async def test_typed_endpoint_malformed_data(upstream: FakeUpstream):
    upstream.add_solscan("/account/transactions", {"not": "a list"})
    result = await _solscan(upstream).account_transactions("abc")

    assert not result.success
    assert isinstance(result.exception, MalformedResponseError)
    assert result.exception.kind == ErrorKind.UPSTREAM_API


async def test_typed_endpoint_missing_data_field(upstream: FakeUpstream):
    upstream.add(SOLSCAN_PREFIX + "/token/meta", {"success": True})
    result = await _solscan(upstream).token_meta("abc")
    assert isinstance(result.exception, MalformedResponseError)


async def test_transfers_endpoint_depends_on_address_kind(upstream: FakeUpstream):
    upstream.add_solscan("/token/transfer", [])
    upstream.add_solscan("/account/transfer", [])
    client = _solscan(upstream)

    await client.transfers("mint", is_token=True, limit=5)
    await client.transfers("acct", limit=5)

    token_call = upstream.calls(SOLSCAN_PREFIX + "/token/transfer")[0]
    account_call = upstream.calls(SOLSCAN_PREFIX + "/account/transfer")[0]
    assert token_call.url.params["token"] == "mint"
    assert account_call.url.params["address"] == "acct"
    assert account_call.url.params["limit"] == "5"


async def test_chain_info_accepts_envelope_and_bare_body(upstream: FakeUpstream):
    upstream.add("/chaininfo", {"success": True, "data": {"absoluteSlot": 10, "currentTPS": 2500.5}})
    client = _solscan(upstream)
    result = await client.chain_info()
    assert result.data.absolute_slot == 10

    upstream.add("/chaininfo", {"absoluteSlot": 11})
    assert (await client.chain_info()).data.absolute_slot == 11
    # Public chain info is never cached
    assert len(upstream.calls("/chaininfo")) == 2


# --- Jupiter ---

async def test_quote_success(upstream: FakeUpstream):
    upstream.add("/swap/v1/quote", QUOTE_BODY)
    result = await _jupiter(upstream).get_swap_quote(SOL_MINT, USDC_MINT, "1000000000", 100)

    assert result.success
    quote = result.data
    assert quote.out_amount == "150000000"
    assert quote.other_amount_threshold == "149250000"
    assert quote.route_plan[0].swap_info.label == "Whirlpool"

    request = upstream.calls("/swap/v1/quote")[0]
    assert request.url.host == "api.jup.ag"
    assert request.headers["x-api-key"] == "jup-key"
    assert request.url.params["slippageBps"] == "100"
    assert request.url.params["swapMode"] == "ExactIn"
    assert request.url.params["restrictIntermediateTokens"] == "true"
    assert request.url.params["amount"] == "1000000000"


async def test_quote_without_key_uses_lite_host(upstream: FakeUpstream):
    upstream.add("/swap/v1/quote", QUOTE_BODY)
    client = _jupiter(upstream, api_key=None)
    assert client.base_url == JUPITER_LITE_API_BASE

    await client.get_swap_quote(SOL_MINT, USDC_MINT, "1")
    request = upstream.calls("/swap/v1/quote")[0]
    assert request.url.host == "lite-api.jup.ag"
    assert "x-api-key" not in request.headers


async def test_quote_upstream_error_message(upstream: FakeUpstream):
    upstream.add("/swap/v1/quote", {"error": "Could not find any route", "errorCode": "COULD_NOT_FIND_ANY_ROUTE"},
                 status_code=400)
    result = await _jupiter(upstream).get_swap_quote(SOL_MINT, USDC_MINT, "abc")

    assert not result.success
    assert result.error == "Could not find any route"


async def test_quote_rejects_unknown_swap_mode(upstream: FakeUpstream):
    result = await _jupiter(upstream).get_swap_quote(SOL_MINT, USDC_MINT, "1", swap_mode="Sideways")
    assert isinstance(result.exception, ValidationError)
    assert upstream.requests == []


async def test_quote_malformed(upstream: FakeUpstream):
    upstream.add("/swap/v1/quote", {"inputMint": SOL_MINT})
    result = await _jupiter(upstream).get_swap_quote(SOL_MINT, USDC_MINT, "1")
    assert isinstance(result.exception, MalformedResponseError)


async def test_best_route(upstream: FakeUpstream):
    upstream.add("/swap/v1/quote", QUOTE_BODY)
    result = await _jupiter(upstream).get_best_route(SOL_MINT, USDC_MINT, "1000000000")

    assert result.success
    summary = result.data
    assert summary.out_amount == "150000000"
    assert summary.price_impact_pct == "0.0012"
    assert [(h.step, h.source, h.fee) for h in summary.routes] == [(1, "Whirlpool", "25000")]
