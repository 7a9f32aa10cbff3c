from decimal import Decimal

from zerthyx.core.config import Settings, parse_blockchains, parse_cors_origins


def test_parse_cors_origins_csv():
    value = "http://localhost:5173, http://localhost:3000"
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def test_parse_cors_origins_json_list():
    value = '["http://localhost:5173", "https://app.zerthyx.example"]'
    assert parse_cors_origins(value) == [
        "http://localhost:5173",
        "https://app.zerthyx.example",
    ]


def test_parse_cors_origins_deduplicates():
    value = "http://localhost:5173,http://localhost:5173"
    assert parse_cors_origins(value) == ["http://localhost:5173"]


def test_parse_blockchains_normalizes_and_deduplicates():
    assert parse_blockchains(" trc20, BEP20 ,trc20,") == ["TRC20", "BEP20"]
    assert parse_blockchains("") == []


def test_ledger_policy_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("DAILY_RATE", "0.01")
    monkeypatch.setenv("MATURITY_DAYS", "30")
    monkeypatch.setenv("WITHDRAWAL_MAX", "250")
    settings = Settings()
    assert settings.daily_rate == Decimal("0.01")
    assert settings.maturity_days == 30
    assert settings.withdrawal_max == Decimal("250")
    assert settings.withdrawal_min == Decimal("10")


def test_engine_options_only_tune_postgres():
    from zerthyx.core.database import engine_options

    settings = Settings(db_pool_size=2)
    assert engine_options("sqlite:///ledger.db", settings) == {}

    remote = engine_options("postgresql://u:p@db.example.com:5432/ledger", settings)
    assert remote["pool_size"] == 5
    assert remote["connect_args"]["sslmode"] == "require"

    local = engine_options("postgresql://u:p@localhost:5432/ledger", settings)
    assert "sslmode" not in local["connect_args"]
