import pytest

from pension_backend.settings import DEFAULT_PAYMENT_INTERVAL, EngineSettings


def test_settings_defaults(monkeypatch):
    for name in ("PENSION_DATA_DIR", "PENSION_PAYMENT_INTERVAL", "PENSION_REFERENCE_PRICE", "PENSION_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = EngineSettings.from_env()

    assert settings.payment_interval == DEFAULT_PAYMENT_INTERVAL == 2_592_000
    assert settings.log_level == "INFO"


def test_settings_read_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("PENSION_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("PENSION_PAYMENT_INTERVAL", "60")
    monkeypatch.setenv("PENSION_LOG_LEVEL", "debug")

    settings = EngineSettings.from_env()

    assert settings.data_dir == str(tmp_path)
    assert settings.payment_interval == 60
    assert settings.log_level == "DEBUG"


def test_invalid_integer_setting_is_reported(monkeypatch):
    monkeypatch.setenv("PENSION_PAYMENT_INTERVAL", "monthly")

    with pytest.raises(ValueError, match="PENSION_PAYMENT_INTERVAL"):
        EngineSettings.from_env()


def test_build_engine_uses_settings(tmp_path, make_params):
    from pension_backend.engine import build_engine

    engine = build_engine(EngineSettings(data_dir=str(tmp_path), payment_interval=60))
    engine.create_plan("holder-1", make_params())

    assert engine.ctx.payment_interval == 60
    assert (tmp_path / "vault.json").exists()
    assert (tmp_path / "ledger" / "transfers.sqlite").exists()


def test_build_engine_with_price_feed_checks_freshness(tmp_path, make_params):
    import time

    from pension_backend.engine import build_engine
    from pension_backend.engine.errors import RateUnavailable

    settings = EngineSettings(data_dir=str(tmp_path), rate_max_age=60)
    fresh = build_engine(settings, price_feed=lambda: (2000 * 10 ** 8, int(time.time())))
    stale = build_engine(settings, price_feed=lambda: (2000 * 10 ** 8, int(time.time()) - 3600))

    assert fresh.quote(make_params()).target_settlement > 0
    with pytest.raises(RateUnavailable):
        stale.quote(make_params())
