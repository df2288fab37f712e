"""
Integration Tests for the Solscan Agent

These tests drive the MCP tools and resources through FastMCP's own dispatch
(argument validation, unknown tools, error wrapping) and exercise the settings
HTTP API through Starlette's test client.

All upstream HTTP traffic goes to an httpx MockTransport and Solana RPC calls
are mocked, so no network access is needed.
"""

# Integration tests for solscan-agent
