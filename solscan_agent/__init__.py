"""
Solscan Agent Package

This package provides an MCP (Model Context Protocol) server that exposes Solana
blockchain data from the Solscan API and token swap quotes from the Jupiter API
as tools for an AI assistant. It also ships a small HTTP API for managing the
user settings the server starts from.

Upstream calls are single-attempt and return an ``ApiResult``; Solscan responses
are cached for a minute per request URL. Risk scores, transfer flows and swap
route summaries are derived from the fetched payloads without further I/O.

Main components:
- server.py: MCP tool and resource registration
- tools.py: Tool handlers composing gateways, metrics and rendering
- solscan.py / jupiter.py: Upstream API gateways
- cache.py: TTL response cache
- metrics.py: Risk, flow and route calculations
- dashboard.py: Markdown and table rendering
- web.py: Settings HTTP API
"""

__version__ = "0.1.0"
