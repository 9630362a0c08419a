import pytest

from pydantic import ValidationError

from dealscope.adapters.config import AppConfig
from dealscope.domain.assumptions import AnalysisConfig
from dealscope.domain.errors import ConfigurationError


def test_defaults_match_house_rules():
    cfg = AnalysisConfig()

    assert cfg.arv_multiplier == 0.70
    assert cfg.holding_costs == 9_000.0
    assert cfg.closing_cost_percent == 0.03
    assert cfg.hot_min_spread == 25_000
    assert cfg.risk_structural_keywords[0] == "foundation"


@pytest.mark.parametrize("raw", ["75%", "75", 75, 0.75, "0.75"])
def test_percent_like_rates_are_normalized(raw):
    assert AnalysisConfig.from_mapping({"arvMultiplier": raw}).arv_multiplier == pytest.approx(0.75)


def test_flat_dotted_keys():
    cfg = AnalysisConfig.from_mapping(
        {
            "exit.rentEstimate.multiplier": 0.01,
            "risk.legalKeywords": "lien, tax deed ,probate",
            "unknownKey": "ignored",
        }
    )
    assert cfg.exit_rent_multiplier == 0.01
    assert cfg.risk_legal_keywords == ("lien", "tax deed", "probate")


@pytest.mark.parametrize(
    "mapping",
    [
        {"arvMultiplier": "abc"},
        {"holdingMonths": -2},
        {"hotMaxRisk": 11},
        {"monthlyHoldingCost": "NaN"},
        {"risk.structuralKeywords": ""},
    ],
)
def test_bad_values_raise_configuration_error(mapping):
    with pytest.raises(ConfigurationError):
        AnalysisConfig.from_mapping(mapping)


def test_config_is_immutable():
    cfg = AnalysisConfig()
    with pytest.raises(ValidationError):
        cfg.arv_multiplier = 0.5


def test_app_config_reads_env(monkeypatch):
    monkeypatch.setenv("DEALSCOPE_LOG_LEVEL", "debug")
    monkeypatch.setenv("DEALSCOPE_BATCH_WORKERS", "4")
    monkeypatch.setenv("DEALSCOPE_ANALYSIS_OVERRIDES", '{"hotMinSpread": 30000, "arvMultiplier": "65%"}')

    app_cfg = AppConfig()
    assert app_cfg.LOG_LEVEL == "DEBUG"
    assert app_cfg.BATCH_WORKERS == 4

    cfg = app_cfg.analysis_config({"hotMaxRisk": 2})
    assert cfg.hot_min_spread == 30_000
    assert cfg.arv_multiplier == pytest.approx(0.65)
    assert cfg.hot_max_risk == 2


def test_app_config_rejects_zero_workers(monkeypatch):
    monkeypatch.setenv("DEALSCOPE_BATCH_WORKERS", "0")
    with pytest.raises(ValidationError):
        AppConfig()
