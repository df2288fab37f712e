"""
Test Package for the Solscan Agent

This package contains the test suite for the Solscan Agent MCP server.

Test Structure:
- unit/: Cache, metrics, gateways, config, settings and rendering
- integration/: MCP tools and resources through FastMCP, and the settings HTTP API
- conftest.py: Shared fixtures (fake upstream transport, agent, server)
"""

# Test package for solscan-agent
