from swinglevels.config import get_settings
from swinglevels.levels.guardrails import GuardrailLimits


def test_defaults_match_production_rules(monkeypatch):
    get_settings.cache_clear()
    for name in ("SWING_LEVELS_MAX_RISK_PCT", "SWING_LEVELS_TICK_SIZE", "SWING_LEVELS_LOG_LEVEL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.tick_size == 0.05
    assert settings.max_risk_pct == 8.0
    assert settings.min_risk_pct == 0.5
    assert settings.min_reward_pct == 2.0
    assert settings.max_reward_pct == 15.0
    assert settings.min_rr == 1.2
    assert settings.structural_min_rr == 1.5
    assert settings.verify_invariants is False
    get_settings.cache_clear()


def test_env_overrides_flow_into_guardrail_limits(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.setenv("SWING_LEVELS_MAX_RISK_PCT", "5")
    monkeypatch.setenv("SWING_LEVELS_TICK_SIZE", "0.1")

    limits = GuardrailLimits.from_settings()

    assert limits.max_risk_pct == 5.0
    assert limits.tick == 0.1
    get_settings.cache_clear()


def test_log_level_accepts_plain_alias(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.delenv("SWING_LEVELS_LOG_LEVEL", raising=False)
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    assert get_settings().log_level == "DEBUG"
    get_settings.cache_clear()
