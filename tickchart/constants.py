import os

# Project root: parent of the tickchart/ package directory
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.ini")
DEFAULT_LOG_FILE = os.path.join("logs", "tickchart.log")

DEFAULT_REFRESH = 5
DEFAULT_HISTORY_SIZE = 100
DEFAULT_SYMBOLS = ["BTCUSDT", "ETHUSDT", "SOLUSDT"]
DEFAULT_SEED_HISTORY = True
DEFAULT_LOG_LEVEL = "INFO"

BINANCE_BASE_URL = "https://api.binance.com"
DEFAULT_TIMEOUT = 30
KLINE_INTERVAL = "15m"

# Quote assets recognised when deriving a display name, longest first
QUOTE_ASSETS = ("FDUSD", "USDT", "USDC", "BUSD", "BTC", "ETH", "BNB", "EUR", "USD")

DISPLAY_NAMES = {
    "BTCUSDT": "Bitcoin",
    "ETHUSDT": "Ethereum",
    "SOLUSDT": "Solana",
    "XRPUSDT": "XRP",
    "BNBUSDT": "BNB",
    "DOGEUSDT": "Dogecoin",
}

# Layout: terminal rows reserved per chart and for the status bar
ROWS_PER_CHART = 8
STATUS_BAR_ROWS = 3

# Chart axis
TIME_LABEL_COUNT = 3
Y_LABEL_WIDTH = 10

CHART_COLORS = ["yellow", "cyan", "magenta", "green", "red", "blue"]

QUIT_KEYS = ("q", "Q")
REFRESH_KEYS = ("r", "R")
SCROLL_UP_KEYS = ("up", "k")
SCROLL_DOWN_KEYS = ("down", "j")
