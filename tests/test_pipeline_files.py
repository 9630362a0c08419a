import json

import pandas as pd

from dealscope.adapters.storage import read_records
from dealscope.pipelines.core import analyze_file
from fixtures.records import hot_flip_row, missing_address_row, overpriced_row, solid_flip_row


def _write_csv(path, rows):
    pd.DataFrame(rows).to_csv(path, index=False)


def test_analyze_csv_to_ranked_csv(tmp_path):
    inp = tmp_path / "leads.csv"
    out = tmp_path / "out" / "verdicts.csv"
    _write_csv(inp, [overpriced_row(), solid_flip_row(), missing_address_row(), hot_flip_row()])

    result = analyze_file(inp, out)

    assert result.succeeded == 3
    assert result.failed_identifiers == ["bad-1"]

    df = pd.read_csv(out)
    assert list(df["property_identifier"]) == ["hot-1", "solid-1", "pass-1"]
    assert list(df["rank"]) == [1, 2, 3]
    assert list(df["classification"]) == ["HOT", "SOLID", "PASS"]
    assert df.loc[1, "mao"] == 172_000.0


def test_json_input_with_comps(tmp_path):
    inp = tmp_path / "leads.json"
    rows = [
        {
            "identifier": "comp-1",
            "address": "5 Comp Ln",
            "asking_price": 120_000,
            "sqft": 1_400,
            "comps": [{"sale_price": 200_000, "sqft": 1_400}, {"sale_price": 210_000, "sqft": 1_400}],
        }
    ]
    inp.write_text(json.dumps(rows))

    result = analyze_file(inp, tmp_path / "verdicts.json", {"repairPerSqft": 20})

    assert result.succeeded == 1
    v = result.verdicts[0]
    assert v.valuation.arv_source == "comps"
    # both comps match the subject on size; default conditions add 5,000 each
    assert v.valuation.arv == 210_000.0
    assert v.valuation.repair_estimate == 28_000.0


def test_read_records_passes_comps_text_through_and_blanks(tmp_path):
    inp = tmp_path / "leads.csv"
    _write_csv(
        inp,
        [
            {"identifier": "c1", "address": "1 A St", "asking_price": 100_000, "arv": None,
             "comps": json.dumps([{"sale_price": 150_000}])},
        ],
    )

    rows = read_records(str(inp))
    assert rows[0]["arv"] is None
    assert rows[0]["comps"] == '[{"sale_price": 150000}]'

    result = analyze_file(inp, tmp_path / "verdicts.csv")
    assert result.succeeded == 1
    assert result.verdicts[0].valuation.arv_source == "comps"


def test_malformed_comps_cell_fails_only_its_row(tmp_path):
    inp = tmp_path / "leads.csv"
    out = tmp_path / "verdicts.csv"
    _write_csv(
        inp,
        [
            {"identifier": "good-1", "address": "1 Good St", "asking_price": 100_000, "arv": 180_000, "comps": None},
            {"identifier": "bad-2", "address": "2 Bad St", "asking_price": 100_000, "arv": 180_000, "comps": "not-json"},
        ],
    )

    result = analyze_file(inp, out)

    assert result.succeeded == 1
    assert result.failed_identifiers == ["bad-2"]
    assert list(pd.read_csv(out)["property_identifier"]) == ["good-1"]
