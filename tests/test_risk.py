from hypothesis import given, strategies as st

from dealscope.analysis.risk import compute_risk_score
from dealscope.domain.assumptions import (
    DEFAULT_LEGAL_KEYWORDS,
    DEFAULT_LOCATION_KEYWORDS,
    DEFAULT_STRUCTURAL_KEYWORDS,
    AnalysisConfig,
)
from fixtures.records import record

ALL_KEYWORDS = DEFAULT_STRUCTURAL_KEYWORDS + DEFAULT_LEGAL_KEYWORDS + DEFAULT_LOCATION_KEYWORDS


def test_repairs_foundation_and_probate_score_seven(default_config):
    rec = record(repair_estimate=60_000, notes="foundation issues, probate", year_built=2005)
    risk = compute_risk_score(rec, default_config)

    assert risk.score == 7
    assert [name for name, _ in risk.triggered_factors] == ["high_repair_cost", "structural", "legal"]


def test_clean_record_scores_zero(default_config):
    rec = record(repair_estimate=10_000, notes="", year_built=2015)
    risk = compute_risk_score(rec, default_config)

    assert risk.score == 0
    assert risk.triggered_factors == ()


def test_category_counts_once_however_many_keywords(default_config):
    rec = record(notes="Foundation crack, structural settling, sinkhole nearby")
    risk = compute_risk_score(rec, default_config)

    assert risk.score == 3
    assert risk.triggered_factors == (("structural", 3),)


def test_keyword_match_is_case_insensitive(default_config):
    rec = record(notes="Estate in PROBATE; house backs onto RAILROAD")
    names = [n for n, _ in compute_risk_score(rec, default_config).triggered_factors]
    assert names == ["legal", "location"]


def test_old_home_adds_age_point(default_config):
    assert compute_risk_score(record(year_built=1920), default_config).score == 1
    assert compute_risk_score(record(year_built=1950), default_config).score == 0
    assert compute_risk_score(record(), default_config).score == 0


def test_estimated_repairs_feed_the_repair_factor(default_config):
    rec = record(sqft=2_500)
    assert compute_risk_score(rec, default_config).score == 0
    assert compute_risk_score(rec, default_config, repair_estimate=62_500.0).score == 2


def test_score_clamps_at_ten():
    cfg = AnalysisConfig.from_mapping({"risk.structuralPoints": 10, "risk.legalPoints": 10})
    rec = record(notes="foundation, lien", repair_estimate=90_000, year_built=1900)
    assert compute_risk_score(rec, cfg).score == 10


@given(
    words=st.lists(st.sampled_from(ALL_KEYWORDS), max_size=30),
    repairs=st.floats(min_value=0.0, max_value=1_000_000.0),
    year=st.one_of(st.none(), st.integers(min_value=1800, max_value=2030)),
)
def test_risk_score_always_in_range(words, repairs, year):
    rec = record(notes=" ".join(words), repair_estimate=repairs, year_built=year)
    score = compute_risk_score(rec, AnalysisConfig()).score
    assert 0 <= score <= 10


def test_survey_flags_trigger_structural_and_legal(default_config):
    rec = record(notes="", foundation_issues=True, title_issues=True, year_built=2010)
    risk = compute_risk_score(rec, default_config)

    assert risk.score == 5
    assert risk.triggered_factors == (("structural", 3), ("legal", 2))


def test_flag_and_keyword_still_count_once(default_config):
    rec = record(notes="foundation cracked", foundation_issues=True, year_built=2010)
    assert compute_risk_score(rec, default_config).triggered_factors == (("structural", 3),)
