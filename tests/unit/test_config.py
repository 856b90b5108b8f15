"""
测试配置加载
"""

import pytest

from ratiowatch.core.config import BinanceConfig, Config, load_config
from ratiowatch.core.exceptions import ConfigError

ENV_VARS = [
    "RATIOWATCH_CONFIG",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
    "API_TOKEN",
    "CHAT_ID",
    "RATIOWATCH_USE_TELEGRAM",
    "RATIOWATCH_SYMBOL",
    "LOG_LEVEL",
    "RATIOWATCH_METRICS_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfig:
    """测试默认值与校验"""

    def test_defaults(self):
        config = Config()

        assert config.binance.symbol == "BTCUSDT"
        assert config.binance.period == "5m"
        assert config.report.interval_minutes == 5
        assert config.report.base_delta_precision == 2
        assert config.report.quote_delta_precision == 0
        assert config.telegram.enabled is True
        assert config.telegram.configured is False

    def test_assets_from_symbol(self):
        assert BinanceConfig(symbol="BTCUSDT").base_asset == "BTC"
        assert BinanceConfig(symbol="BTCUSDT").quote_asset == "USDT"
        assert BinanceConfig(symbol="1000PEPEUSDC").base_asset == "1000PEPE"
        assert BinanceConfig(symbol="BTCUSD_PERP").quote_asset == ""

    def test_interval_must_divide_hour(self):
        with pytest.raises(ConfigError):
            Config._from_dict({"report": {"interval_minutes": 7}})
        with pytest.raises(ConfigError):
            Config._from_dict({"report": {"interval_minutes": 0}})

    @pytest.mark.parametrize("name, value", [
        ("base_delta_precision", "2"),
        ("base_delta_precision", -1),
        ("quote_delta_precision", 1.5),
        ("ratio_delta_precision", True),
    ])
    def test_precision_must_be_non_negative_int(self, name, value):
        with pytest.raises(ConfigError) as exc:
            Config._from_dict({"report": {name: value}})
        assert exc.value.field == f"report.{name}"

    def test_precision_from_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("report:\n  base_delta_precision: \"2\"\n", encoding="utf-8")

        # 加载阶段即失败，不会进入报告周期
        with pytest.raises(ConfigError):
            load_config(str(path))

        path.write_text("report:\n  base_delta_precision: 3\n", encoding="utf-8")
        assert load_config(str(path)).report.base_delta_precision == 3


class TestLoadConfig:
    """测试 YAML + 环境变量"""

    def test_no_file_uses_defaults(self):
        config = load_config()

        assert config.binance.symbol == "BTCUSDT"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "binance:\n"
            "  symbol: ETHUSDT\n"
            "  unknown_key: ignored\n"
            "report:\n"
            "  interval_minutes: 15\n"
            "telegram:\n"
            "  bot_token: file-token\n"
            "  chat_id: '42'\n"
            "log_file: ''\n",
            encoding="utf-8",
        )

        config = load_config(str(path))

        assert config.binance.symbol == "ETHUSDT"
        assert config.report.interval_minutes == 15
        assert config.telegram.bot_token == "file-token"
        assert config.telegram.chat_id == "42"
        assert config.log_file == ""

    def test_default_yaml_in_cwd(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "default.yaml").write_text("binance:\n  symbol: SOLUSDT\n", encoding="utf-8")

        assert load_config().binance.symbol == "SOLUSDT"

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("telegram:\n  bot_token: file-token\n  chat_id: '1'\n", encoding="utf-8")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "env-token")
        monkeypatch.setenv("RATIOWATCH_SYMBOL", "ethusdt")
        monkeypatch.setenv("RATIOWATCH_USE_TELEGRAM", "false")

        config = load_config(str(path))

        assert config.telegram.bot_token == "env-token"
        assert config.telegram.chat_id == "1"
        assert config.telegram.enabled is False
        assert config.binance.symbol == "ETHUSDT"

    def test_legacy_env_names(self, monkeypatch):
        monkeypatch.setenv("API_TOKEN", "legacy-token")
        monkeypatch.setenv("CHAT_ID", "7")

        config = load_config()

        assert config.telegram.bot_token == "legacy-token"
        assert config.telegram.chat_id == "7"
        assert config.telegram.configured is True

    def test_metrics_port_env(self, monkeypatch):
        monkeypatch.setenv("RATIOWATCH_METRICS_PORT", "9100")

        config = load_config()

        assert config.metrics.enabled is True
        assert config.metrics.port == 9100

        monkeypatch.setenv("RATIOWATCH_METRICS_PORT", "abc")
        with pytest.raises(ConfigError):
            load_config()
