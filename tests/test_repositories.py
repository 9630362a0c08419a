import pytest

from dealscope.adapters.memory_repo import InMemoryPropertyStore, InMemoryVerdictSink
from dealscope.adapters.sql_repo import SqlPropertyRepository, SqlVerdictRepository
from dealscope.pipelines.core import run_analysis
from dealscope.services.deal_analyzer import analyze_one
from dealscope.services.validation import record_from_payload
from fixtures.records import hot_flip_row, missing_address_row, overpriced_row, record, solid_flip_row


@pytest.fixture
def db_uri(tmp_path):
    return f"sqlite:///{tmp_path / 'dealscope_test.db'}"


def test_memory_store_upsert_replaces_by_identifier():
    store = InMemoryPropertyStore([record(identifier="a", asking_price=1), record(identifier="b", asking_price=2)])
    store.upsert_many([record(identifier="a", asking_price=99)])

    assert store.get("a").asking_price == 99
    assert len(store.list_all()) == 2
    assert len(store.list_all(limit=1)) == 1
    assert store.get("missing") is None


def test_memory_sink_keeps_latest_verdict():
    sink = InMemoryVerdictSink()
    first = analyze_one(solid_flip_row())
    rerun = analyze_one(solid_flip_row(), {"hotMinSpread": 20_000})

    sink.publish_many([first])
    sink.publish_many([rerun])

    assert len(sink.all()) == 1
    assert sink.get("solid-1").classification == "HOT"


def test_sql_property_repository_roundtrip(db_uri):
    repo = SqlPropertyRepository(db_uri)
    rows = [solid_flip_row(), hot_flip_row(), overpriced_row()]
    assert repo.upsert_many(record_from_payload(r) for r in rows) == 3

    got = repo.get("hot-1")
    assert got is not None
    assert got.arv == 400_000
    assert got.address == "20 Hot Blvd"

    repo.upsert_many([record_from_payload(dict(hot_flip_row(), asking_price=140_000))])
    assert repo.get("hot-1").asking_price == 140_000
    assert [r.identifier for r in repo.list_all()] == ["hot-1", "pass-1", "solid-1"]
    assert len(repo.list_all(limit=2)) == 2

    cheap = repo.search("48009", max_price=160_000)
    assert [r.identifier for r in cheap] == ["hot-1", "solid-1"]


def test_sql_verdict_repository_ranks_and_replaces(db_uri):
    repo = SqlVerdictRepository(db_uri)
    verdicts = [analyze_one(r) for r in (overpriced_row(), solid_flip_row(), hot_flip_row())]
    assert repo.publish_many(verdicts) == 3

    ranked = repo.list_ranked()
    assert [v["property_identifier"] for v in ranked] == ["hot-1", "solid-1", "pass-1"]
    assert repo.list_ranked(classification="PASS")[0]["property_identifier"] == "pass-1"

    repo.publish_many([analyze_one(solid_flip_row(), {"hotMinSpread": 20_000})])
    stored = repo.get("solid-1")
    assert stored["classification"] == "HOT"
    assert len(repo.list_ranked()) == 3
    assert repo.get("nope") is None


def test_run_analysis_store_to_sink():
    store = InMemoryPropertyStore(
        [record_from_payload(r) for r in (solid_flip_row(), hot_flip_row(), overpriced_row())]
        + [record_from_payload(missing_address_row())]
    )
    sink = InMemoryVerdictSink()

    result = run_analysis(store, sink)

    assert result.succeeded == 3
    assert result.failed_identifiers == ["bad-1"]
    assert {v.property_identifier for v in sink.all()} == {"solid-1", "hot-1", "pass-1"}
