import configparser
import os
import re
from dataclasses import dataclass, field
from typing import List

from tickchart.constants import (
    CONFIG_PATH, PROJECT_ROOT, DEFAULT_LOG_FILE, DEFAULT_LOG_LEVEL,
    DEFAULT_REFRESH, DEFAULT_HISTORY_SIZE, DEFAULT_SYMBOLS, DEFAULT_SEED_HISTORY,
    BINANCE_BASE_URL, DEFAULT_TIMEOUT,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_interval(value: str, default: int) -> int:
    """Convert interval string like '10s', '1m', '5m', '1h', '1d' to seconds."""
    value = value.strip().lower()
    m = re.match(r"^(\d+)\s*(s|m|h|d)?$", value)
    if not m:
        print(f"[warning] Invalid interval '{value}', using {default}s")
        return default
    num, unit = int(m.group(1)), m.group(2) or "s"
    multipliers = {"s": 1, "m": 60, "h": 3600, "d": 86400}
    seconds = num * multipliers[unit]
    if seconds < 1:
        print(f"[warning] Interval '{value}' is too short, using {default}s")
        return default
    return seconds


def _parse_positive_int(value: str, name: str, default: int) -> int:
    try:
        num = int(value.strip())
    except ValueError:
        print(f"[warning] Invalid {name} '{value}', using {default}")
        return default
    if num < 1:
        print(f"[warning] {name} must be at least 1, using {default}")
        return default
    return num


def _parse_bool(value: str, name: str, default: bool) -> bool:
    value = value.strip().lower()
    if value in ("1", "yes", "true", "on"):
        return True
    if value in ("0", "no", "false", "off"):
        return False
    print(f"[warning] Invalid {name} '{value}', using {'yes' if default else 'no'}")
    return default


def parse_symbols(value: str) -> List[str]:
    """Parse a comma-separated symbol list, keeping order and dropping duplicates."""
    symbols: List[str] = []
    for raw in value.split(","):
        sym = raw.strip().upper().replace("/", "").replace("-", "")
        if sym and sym not in symbols:
            symbols.append(sym)
    return symbols


@dataclass
class Config:
    refresh_interval: int = DEFAULT_REFRESH
    history_size: int = DEFAULT_HISTORY_SIZE
    symbols: List[str] = field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    seed_history: bool = DEFAULT_SEED_HISTORY
    base_url: str = BINANCE_BASE_URL
    timeout: int = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str = os.path.join(PROJECT_ROOT, DEFAULT_LOG_FILE)


def parse_config(path: str = CONFIG_PATH) -> Config:
    """Read config.ini and return a Config object."""
    cfg_obj = Config()
    if not os.path.exists(path):
        print("[notice] config.ini not found, using defaults")
        return cfg_obj

    cfg = configparser.RawConfigParser()
    cfg.read(path)

    sect = cfg["dashboard"] if "dashboard" in cfg else {}
    cfg_obj.refresh_interval = parse_interval(sect.get("refresh_interval", f"{DEFAULT_REFRESH}s"),
                                              DEFAULT_REFRESH)
    if "history_size" in sect:
        cfg_obj.history_size = _parse_positive_int(sect["history_size"], "history_size",
                                                   DEFAULT_HISTORY_SIZE)
    if "symbols" in sect:
        symbols = parse_symbols(sect["symbols"])
        if symbols:
            cfg_obj.symbols = symbols
        else:
            print("[warning] No symbols configured, using defaults")
    if "seed_history" in sect:
        cfg_obj.seed_history = _parse_bool(sect["seed_history"], "seed_history", DEFAULT_SEED_HISTORY)

    sect = cfg["binance"] if "binance" in cfg else {}
    base_url = sect.get("base_url", "").strip().rstrip("/")
    if base_url:
        cfg_obj.base_url = base_url
    if "timeout" in sect:
        cfg_obj.timeout = parse_interval(sect["timeout"], DEFAULT_TIMEOUT)

    sect = cfg["logging"] if "logging" in cfg else {}
    level = sect.get("level", DEFAULT_LOG_LEVEL).strip().upper()
    if level in _LOG_LEVELS:
        cfg_obj.log_level = level
    else:
        print(f"[warning] Invalid log level '{level}', using {DEFAULT_LOG_LEVEL}")
    log_file = sect.get("file", "").strip()
    if log_file:
        cfg_obj.log_file = os.path.join(PROJECT_ROOT, log_file)

    return cfg_obj
