from typing import List, Sequence, Tuple

from rich.console import Console, ConsoleOptions, RenderResult
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from tickchart.constants import CHART_COLORS, STATUS_BAR_ROWS, Y_LABEL_WIDTH
from tickchart.formatting import fmt_axis, fmt_pct, fmt_price, fmt_volume
from tickchart.history import SymbolSeries
from tickchart.state import DashboardState, viewport_capacity

_BRAILLE_BASE = 0x2800
# Dot bit for (pixel row % 4, pixel col % 2) inside one braille cell
_DOT_BITS = ((0x01, 0x08), (0x02, 0x10), (0x04, 0x20), (0x40, 0x80))


def braille_plot(points: Sequence[Tuple[float, float]], x_bounds: Tuple[float, float],
                 y_bounds: Tuple[float, float], width: int, height: int) -> List[str]:
    """Draw ``points`` as a connected line on a width x height grid of braille cells."""
    if width <= 0 or height <= 0:
        return []
    cells = [[0] * width for _ in range(height)]
    px_w, px_h = width * 2, height * 4
    x0, x1 = x_bounds
    y0, y1 = y_bounds
    x_span = (x1 - x0) or 1.0
    y_span = (y1 - y0) or 1.0

    def to_px(x: float, y: float) -> Tuple[int, int]:
        px = round((x - x0) / x_span * (px_w - 1))
        py = round((y1 - y) / y_span * (px_h - 1))
        return min(max(px, 0), px_w - 1), min(max(py, 0), px_h - 1)

    def set_dot(px: int, py: int):
        cells[py // 4][px // 2] |= _DOT_BITS[py % 4][px % 2]

    pixels = [to_px(x, y) for x, y in points]
    if len(pixels) == 1:
        set_dot(*pixels[0])
    for (ax, ay), (bx, by) in zip(pixels, pixels[1:]):
        steps = max(abs(bx - ax), abs(by - ay), 1)
        for i in range(steps + 1):
            set_dot(round(ax + (bx - ax) * i / steps), round(ay + (by - ay) * i / steps))

    return ["".join(chr(_BRAILLE_BASE + c) if c else " " for c in row) for row in cells]


def _spread_labels(labels: List[str], width: int) -> str:
    """Place labels left, evenly between, and right-aligned across ``width`` columns."""
    if not labels or width <= 0:
        return ""
    line = [" "] * width
    n = len(labels)
    for i, label in enumerate(labels):
        if n == 1:
            start = 0
        else:
            anchor = round(i * (width - 1) / (n - 1))
            start = anchor - len(label) // 2
            if i == 0:
                start = 0
            elif i == n - 1:
                start = width - len(label)
        start = max(0, min(start, width - len(label)))
        for j, ch in enumerate(label[:width]):
            line[start + j] = ch
    return "".join(line)


def chart_x_max(coin: SymbolSeries) -> float:
    """The x axis always spans a full window so a short history grows from the left."""
    return float(max(len(coin.price_history) - 1, coin.window - 1, 1))


class PriceChart:
    """Rich renderable drawing one symbol's history with y and time axes."""

    def __init__(self, coin: SymbolSeries, color: str):
        self.coin = coin
        self.color = color

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = options.max_width
        height = options.height or 6
        plot_w = max(width - Y_LABEL_WIDTH - 1, 1)
        plot_h = max(height - 1, 1)

        points = self.coin.history_points()
        y_min, y_max = self.coin.price_bounds()
        x_max = chart_x_max(self.coin)
        rows = braille_plot(points, (0.0, x_max), (y_min, y_max), plot_w, plot_h)
        # Time labels only span the part of the x axis that holds samples
        labels = self.coin.time_labels()
        label_w = plot_w
        if len(points) >= 2:
            label_w = min(max(round(plot_w * (len(points) - 1) / x_max), len(labels[-1])), plot_w)

        for i, row in enumerate(rows):
            if i == 0:
                label = fmt_axis(y_max)
            elif i == len(rows) - 1:
                label = fmt_axis(y_min)
            else:
                label = ""
            line = Text(label.rjust(Y_LABEL_WIDTH)[:Y_LABEL_WIDTH], style="grey50",
                        no_wrap=True, overflow="crop")
            line.append("│", style="grey37")
            line.append(row, style=self.color)
            yield line

        axis = " " * (Y_LABEL_WIDTH + 1) + _spread_labels(labels, label_w)
        yield Text(axis, style="grey50", no_wrap=True, overflow="crop")


def chart_title(coin: SymbolSeries, color: str) -> Text:
    title = Text()
    title.append(f" {coin.display_name} ", style=f"bold {color}")
    title.append(" ")
    title.append_text(fmt_price(coin.price))
    title.append("  ")
    title.append_text(fmt_pct(coin.change_24h))
    title.append("  ")
    title.append(f"H:{fmt_axis(coin.high_24h)} L:{fmt_axis(coin.low_24h)}", style="grey50")
    title.append("  ")
    title.append(f"Vol:{fmt_volume(coin.volume_24h)} ", style="grey50")
    return title


def build_chart_panel(coin: SymbolSeries, color: str) -> Panel:
    return Panel(PriceChart(coin, color), title=chart_title(coin, color),
                 title_align="left", border_style="grey37")


def build_status_bar(state: DashboardState) -> Panel:
    status = Text()
    status.append(" [q]", style="yellow")
    status.append("uit ")
    status.append("[r]", style="yellow")
    status.append("efresh ")
    status.append("[↑↓]", style="yellow")
    status.append("scroll")
    status.append("   ")
    status.append(f"Updated: {state.last_update_str()}", style="grey50")
    status.append("   ")
    status.append(state.status_message, style="cyan")
    return Panel(status, border_style="grey37")


def build_layout(state: DashboardState, height: int) -> Layout:
    """Lay out as many charts as fit in ``height`` rows, starting at the scroll offset."""
    layout = Layout()
    visible = state.visible_coins(viewport_capacity(height - STATUS_BAR_ROWS))

    charts = [Layout(name=f"chart{i}", ratio=1) for i in range(len(visible))]
    if not charts:
        charts = [Layout(Panel(Text("No symbols configured", style="dim"), border_style="grey37"),
                         name="empty", ratio=1)]
    layout.split_column(*charts, Layout(name="status", size=STATUS_BAR_ROWS))

    for i, coin in enumerate(visible):
        color = CHART_COLORS[(state.scroll_offset + i) % len(CHART_COLORS)]
        layout[f"chart{i}"].update(build_chart_panel(coin, color))
    layout["status"].update(build_status_bar(state))
    return layout
