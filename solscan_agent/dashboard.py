"""
Text rendering for tool responses.

Single-entity lookups are rendered as Markdown; dashboard sections use rich
tables rendered to plain text (no ANSI codes) so the output survives any MCP
client.
"""

import io
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from .analytics import DefiActivityReport, TransferHistory
from .jupiter import PopularToken, RouteSummary, find_popular_token
from .metrics import RiskMetrics, risk_level, to_float
from .schemas import AccountDetail, ChainInfo, Portfolio, Quote, TokenMeta, TransactionSummary, TrendingToken

LAMPORTS_PER_SOL = 1_000_000_000
RENDER_WIDTH = 100
GAUGE_WIDTH = 50


def render(*renderables: Any) -> str:
    console = Console(
        file=io.StringIO(), width=RENDER_WIDTH, color_system=None, highlight=False, emoji=False
    )
    for renderable in renderables:
        console.print(renderable)
    return console.file.getvalue()


def format_usd(value: float) -> str:
    if value >= 1_000_000_000:
        return f"${value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"${value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"${value / 1_000:.2f}K"
    return f"${value:.2f}"


def format_compact(value: float) -> str:
    if value >= 1_000_000_000:
        return f"{value / 1_000_000_000:.2f}B"
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f}M"
    if value >= 1_000:
        return f"{value / 1_000:.2f}K"
    return f"{value:.2f}"


def format_sol(lamports: int) -> str:
    return f"{lamports / LAMPORTS_PER_SOL:.9f}".rstrip("0").rstrip(".")


def _or_unknown(value: Any, default: str = "Unknown") -> str:
    return default if value is None or value == "" else str(value)


# --- Markdown responses ---

def account_info_markdown(address: str, account: AccountDetail) -> str:
    return (
        f"## Account Information for {address}\n\n"
        f"**Type:** {_or_unknown(account.type)}\n"
        f"**Balance:** {format_sol(account.lamports)} SOL\n"
        f"**Owner Program:** {_or_unknown(account.owner_program)}\n"
        f"**Executable:** {'Yes' if account.executable else 'No'}\n"
    )


def token_info_markdown(address: str, meta: TokenMeta) -> str:
    return (
        f"## Token Information for {address}\n\n"
        f"**Name:** {_or_unknown(meta.name)}\n"
        f"**Symbol:** {_or_unknown(meta.symbol)}\n"
        f"**Decimals:** {_or_unknown(meta.decimals)}\n"
        f"**Total Supply:** {_or_unknown(meta.supply)}\n"
        f"**Price (USD):** ${_or_unknown(meta.price)}\n"
    )


def transaction_history_markdown(address: str, transactions: Sequence[TransactionSummary]) -> str:
    text = f"## Transaction History for {address}\n\n"
    if not transactions:
        return text + "No transactions found for this address."
    for index, tx in enumerate(transactions, start=1):
        status = "✅ Success" if tx.status == "Success" else "❌ Failed"
        text += f"{index}. **Signature:** {_or_unknown(tx.tx_hash)}\n"
        text += f"   **Slot:** {_or_unknown(tx.slot)}\n"
        text += f"   **Fee:** {format_sol(tx.fee)} SOL\n"
        text += f"   **Status:** {status}\n\n"
    return text


def wallet_balance_markdown(address: str, lamports: int, connected: bool = True) -> str:
    title = "Connected Wallet Balance" if connected else "Wallet Balance"
    return f"## {title}\n\n**Address:** {address}\n**Balance:** {format_sol(lamports)} SOL\n"


def swap_quote_markdown(amount: str, quote: Quote) -> str:
    return (
        "## Swap Quote\n\n"
        f"**Input:** {amount} ({quote.input_mint})\n"
        f"**Output:** {quote.out_amount} ({quote.output_mint})\n"
        f"**Min. Received:** {quote.other_amount_threshold}\n"
        f"**Price Impact:** {_or_unknown(quote.price_impact_pct, '0')}%\n"
        f"**Route Steps:** {len(quote.route_plan)}\n"
    )


def popular_tokens_markdown(tokens: Iterable[PopularToken]) -> str:
    text = "## Popular Tokens on Solana\n\n"
    for index, token in enumerate(tokens, start=1):
        text += f"{index}. **{token.name} ({token.symbol})** - `{token.mint}`\n"
    return text


# --- Dashboard sections ---

def dashboard_title() -> str:
    rule = "=" * 82
    return f"\nSolana AI Agent\n{rule}\n◆ Advanced Blockchain Analytics Dashboard\n{rule}\n"


def network_overview(info: ChainInfo, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    table = Table("Metric", "Value", box=box.SQUARE)
    table.add_row("Current Slot", f"{info.absolute_slot:,}" if info.absolute_slot is not None else "Unknown")
    table.add_row("TPS", f"{info.current_tps:.2f}" if info.current_tps is not None else "Unknown")
    table.add_row(
        "Transaction Count", f"{info.transaction_count:,}" if info.transaction_count is not None else "Unknown"
    )
    table.add_row("Epoch", f"{_or_unknown(info.current_epoch, '?')} / {_or_unknown(info.max_epoch, '?')}")
    table.add_row("SOL Price", format_usd(info.sol_price) if info.sol_price else "Unknown")
    table.add_row("Market Cap", format_usd(info.market_cap) if info.market_cap else "Unknown")
    return f"\nNetwork Overview (as of {now:%Y-%m-%d %H:%M:%S})\n" + render(table)


def trending_tokens(tokens: Sequence[TrendingToken], limit: int = 5) -> str:
    if not tokens:
        return "No trending token data available\n"
    table = Table("#", "Token", "Symbol", "Price", "24h Change", "Volume (24h)", box=box.SQUARE)
    for index, token in enumerate(tokens[:limit], start=1):
        if token.price_change_24h is not None and token.price_change_24h != "":
            change = to_float(token.price_change_24h)
            change_text = f"{'▲' if change >= 0 else '▼'} {abs(change):.2f}%"
        else:
            change_text = "N/A"
        table.add_row(
            str(index),
            token.name or "Unknown",
            token.symbol or "?",
            format_usd(to_float(token.price)) if token.price else "Unknown",
            change_text,
            format_usd(to_float(token.volume_24h)) if token.volume_24h else "Unknown",
        )
    return "\nTrending Tokens\n" + render(table)


def wallet_overview(address: str, portfolio: Portfolio) -> str:
    table = Table("Asset", "Balance", "Value (USD)", box=box.SQUARE)
    if portfolio.native_balance is not None:
        table.add_row(
            "SOL",
            _or_unknown(portfolio.native_balance.balance, "0"),
            format_usd(to_float(portfolio.native_balance.value)),
        )
    for token in portfolio.tokens:
        table.add_row(
            token.symbol or "Unknown",
            _or_unknown(token.balance, "0"),
            format_usd(to_float(token.value)) if token.value else "$0.00",
        )
    return (
        f"\nWallet Overview {address}\n"
        f"Total Value: {format_usd(to_float(portfolio.total_value))}\n\n" + render(table)
    )


def transfer_flow(address: str, history: TransferHistory) -> str:
    analysis = history.analysis
    table = Table("Date (UTC)", "Net Flow", box=box.SQUARE)
    for point in analysis.time_series:
        table.add_row(point.date, f"{point.net_value:,.4f}")
    return (
        f"\nTransfer Flow {address}\n"
        f"Transfers analysed: {len(history.transfers)}\n"
        f"Total Inflow: {analysis.total_inflow:,.4f}\n"
        f"Total Outflow: {analysis.total_outflow:,.4f}\n"
        f"Net Flow: {analysis.net_flow:,.4f}\n\n" + render(table)
    )


def defi_activity(address: str, report: DefiActivityReport) -> str:
    if not report.platform_analysis:
        return f"\nDeFi Activity {address}\nNo DeFi activity found for this address.\n"
    table = Table("Platform", "Activities", "Value (USD)", box=box.SQUARE)
    for platform in report.platform_analysis:
        table.add_row(platform.platform, str(platform.activity_count), format_usd(platform.total_value_usd))
    return f"\nDeFi Activity {address}\nActivities analysed: {len(report.activities)}\n\n" + render(table)


def swap_analysis(from_token: str, to_token: str, amount: str, route: RouteSummary) -> str:
    from_info = find_popular_token(from_token) or PopularToken("Unknown", "Unknown Token", from_token)
    to_info = find_popular_token(to_token) or PopularToken("Unknown", "Unknown Token", to_token)

    table = Table("Step", "Source", "Input", "Output", "Fee", box=box.SQUARE)
    for hop in route.routes:
        table.add_row(
            str(hop.step),
            hop.source,
            format_compact(to_float(hop.in_amount)),
            format_compact(to_float(hop.out_amount)),
            format_compact(to_float(hop.fee)) if hop.fee else "N/A",
        )

    price_impact = to_float(route.price_impact_pct)
    receiving = format_compact(to_float(route.out_amount)) if route.out_amount else "N/A"
    minimum = format_compact(to_float(route.other_amount_threshold)) if route.other_amount_threshold else "N/A"
    return (
        "\nSwap Analysis\n"
        f"From: {from_info.name} ({from_info.symbol})\n"
        f"To: {to_info.name} ({to_info.symbol})\n"
        f"Amount: {format_compact(to_float(amount))} {from_info.symbol}\n"
        f"Receiving: {receiving} {to_info.symbol}\n"
        f"Price Impact: {price_impact:g}%\n"
        f"Minimum Received: {minimum} {to_info.symbol}\n\n"
        "Routing Path:\n" + render(table)
    )


def risk_gauge(score: float, width: int = GAUGE_WIDTH) -> str:
    """ASCII gauge: one character per 2 points, marker at ``score``."""
    position = min(width - 1, max(0, int((score / 100) * width)))
    cells = []
    for i in range(width):
        if i == position:
            cells.append("▼")
        elif i < width // 3:
            cells.append("░")
        elif i < 2 * width // 3:
            cells.append("▒")
        else:
            cells.append("▓")
    return "".join(cells)


def token_risk_analysis(token_address: str, metrics: RiskMetrics) -> str:
    table = Table("Risk Metric", "Score", "Level", "Details", box=box.SQUARE)
    concentration = metrics.concentration_risk
    table.add_row(
        "Holder Concentration",
        f"{concentration.score:.1f}",
        risk_level(concentration.score),
        f"Top 3 holders: {concentration.top_three_holders_percent:.1f}% of supply",
    )
    age = metrics.age_risk
    table.add_row("Token Age", f"{age.score:.1f}", risk_level(age.score), f"{int(age.age_in_days)} days old")
    liquidity = metrics.liquidity_risk
    table.add_row(
        "Liquidity",
        f"{liquidity.score:.1f}",
        risk_level(liquidity.score),
        f"24h volume: {format_usd(liquidity.volume_24h or 0.0)}",
    )
    overall = metrics.overall_risk
    table.add_row("OVERALL RISK", f"{overall.score:.1f}", overall.risk_level, "Weighted average of all metrics")
    return (
        f"\nToken Risk Analysis\n{token_address}\n\n"
        + render(table)
        + f"\nRisk Gauge:\n{risk_gauge(overall.score)}\n\n"
        "Lower scores are better. <30 = Low Risk, 30-60 = Medium Risk, >60 = High Risk\n"
    )


def full_dashboard(sections: List[str]) -> str:
    return dashboard_title() + "\n".join(sections)
