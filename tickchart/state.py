from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from tickchart.constants import ROWS_PER_CHART
from tickchart.formatting import display_name
from tickchart.history import SymbolSeries


@dataclass
class DashboardState:
    coins: List[SymbolSeries] = field(default_factory=list)
    scroll_offset: int = 0
    last_update_time: Optional[float] = None  # epoch seconds of the last completed refresh
    status_message: str = ""

    @classmethod
    def for_symbols(cls, symbols: List[str], window: int) -> "DashboardState":
        """Create a state with one empty series per symbol, in configured order."""
        return cls(coins=[SymbolSeries(s, display_name(s), window) for s in symbols])

    def scroll_up(self):
        if self.scroll_offset > 0:
            self.scroll_offset -= 1

    def scroll_down(self):
        if self.scroll_offset + 1 < len(self.coins):
            self.scroll_offset += 1

    def clamp_scroll(self):
        """Keep 0 <= scroll_offset < len(coins) (0 when there are no coins)."""
        self.scroll_offset = max(0, min(self.scroll_offset, len(self.coins) - 1))

    def visible_coins(self, capacity: int) -> List[SymbolSeries]:
        start = max(0, min(self.scroll_offset, len(self.coins) - 1))
        return self.coins[start:start + min(capacity, len(self.coins) - start)]

    def last_update_str(self) -> str:
        if self.last_update_time is None:
            return "never"
        return datetime.fromtimestamp(self.last_update_time).strftime("%H:%M:%S")


def viewport_capacity(height: int) -> int:
    """Number of charts that fit in a terminal ``height`` rows tall."""
    return max(height // ROWS_PER_CHART, 1)
