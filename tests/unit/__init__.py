"""
Unit Tests for the Solscan Agent

These tests cover the pieces that need no MCP server around them: the response
cache, the derived metrics, the upstream gateways (against an httpx
MockTransport), configuration loading, settings persistence and rendering.
"""

# Unit tests for solscan-agent
