from typing import Optional

from rich.text import Text

from tickchart.constants import DISPLAY_NAMES, QUOTE_ASSETS


def fmt_price(val: Optional[float], style: str = "bold white") -> Text:
    if val is None:
        return Text("—", style="dim")
    if abs(val) >= 1:
        return Text(f"${val:,.2f}", style=style)
    return Text(f"${val:.6f}", style=style)


def fmt_pct(val: Optional[float]) -> Text:
    if val is None:
        return Text("—", style="dim")
    sign = "+" if val >= 0 else ""
    s = f"{sign}{val:.2f}%"
    style = "green" if val >= 0 else "red"
    return Text(s, style=style)


def fmt_volume(val: Optional[float]) -> str:
    if val is None:
        return "—"
    if val >= 1_000_000_000:
        return f"{val / 1_000_000_000:.1f}B"
    elif val >= 1_000_000:
        return f"{val / 1_000_000:.1f}M"
    elif val >= 1_000:
        return f"{val / 1_000:.1f}K"
    return f"{val:.0f}"


def fmt_axis(val: Optional[float]) -> str:
    """Compact y-axis label: no decimals for large prices, more for small ones."""
    if val is None:
        return "—"
    if abs(val) >= 1000:
        return f"{val:,.0f}"
    if abs(val) >= 1:
        return f"{val:.2f}"
    return f"{val:.5f}"


def display_name(ticker: str) -> str:
    """Known names win; otherwise split the quote asset off, e.g. 'ADAUSDT' -> 'ADA/USDT'."""
    if ticker in DISPLAY_NAMES:
        return DISPLAY_NAMES[ticker]
    for quote in QUOTE_ASSETS:
        if ticker.endswith(quote) and len(ticker) > len(quote):
            return f"{ticker[:-len(quote)]}/{quote}"
    return ticker
