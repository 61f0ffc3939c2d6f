from tickchart.config import parse_config, parse_interval, parse_symbols
from tickchart.constants import DEFAULT_HISTORY_SIZE, DEFAULT_SYMBOLS, PROJECT_ROOT


def test_parse_interval():
    assert parse_interval("10s", 5) == 10
    assert parse_interval("2m", 5) == 120
    assert parse_interval("1h", 5) == 3600
    assert parse_interval("15", 5) == 15
    assert parse_interval("soon", 5) == 5
    assert parse_interval("0s", 5) == 5


def test_parse_symbols():
    assert parse_symbols("btc/usdt, ETHUSDT,,BTCUSDT , sol-usdt") == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]


def test_missing_file_uses_defaults(tmp_path, capsys):
    cfg = parse_config(str(tmp_path / "nope.ini"))
    assert cfg.symbols == DEFAULT_SYMBOLS
    assert cfg.history_size == DEFAULT_HISTORY_SIZE
    assert "not found" in capsys.readouterr().out


def test_full_config(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text(
        "[dashboard]\n"
        "refresh_interval = 1m\n"
        "history_size = 20\n"
        "symbols = ethusdt, BTCUSDT\n"
        "seed_history = no\n"
        "[binance]\n"
        "base_url = https://example.test/\n"
        "timeout = 5s\n"
        "[logging]\n"
        "level = debug\n"
        "file = tmp/app.log\n"
    )
    cfg = parse_config(str(path))
    assert cfg.refresh_interval == 60
    assert cfg.history_size == 20
    assert cfg.symbols == ["ETHUSDT", "BTCUSDT"]
    assert cfg.seed_history is False
    assert cfg.base_url == "https://example.test"
    assert cfg.timeout == 5
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file.startswith(PROJECT_ROOT)


def test_invalid_values_fall_back(tmp_path, capsys):
    path = tmp_path / "config.ini"
    path.write_text(
        "[dashboard]\n"
        "history_size = -4\n"
        "symbols = ,\n"
        "seed_history = maybe\n"
        "[logging]\n"
        "level = loud\n"
    )
    cfg = parse_config(str(path))
    assert cfg.history_size == DEFAULT_HISTORY_SIZE
    assert cfg.symbols == DEFAULT_SYMBOLS
    assert cfg.seed_history is True
    assert cfg.log_level == "INFO"
    assert capsys.readouterr().out.count("[warning]") == 4
