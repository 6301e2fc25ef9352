import json
from unittest.mock import MagicMock, patch

import pytest

from planyt.connection.query_engine import QueryResult
from planyt.semantic_field_mapping.context import build_candidate_context
from planyt.semantic_field_mapping.fallback import resolve_best_match
from planyt.semantic_field_mapping.models import ScoredCandidate
from scripts.conversation_demo import run_loop
from scripts.run_auto_mapping import load_candidates, main as automap_main
from scripts.run_forecast_job import main as forecast_main


def test_auto_mapping_cli_prints_mappings(tmp_path, capsys, make_embedder):
    csv_path = tmp_path / "sales.csv"
    csv_path.write_text("qty,region\n1,North\n2,South\n")
    embedder = make_embedder({}, default=[1.0, 0.0, 0.0])

    with patch("scripts.run_auto_mapping.get_embedding_client", return_value=embedder):
        ret = automap_main(["--file", str(csv_path)])

    assert ret == 0
    out = json.loads(capsys.readouterr().out)
    assert [m["column"] for m in out] == ["qty", "region"]
    assert len(out[0]["candidates_ranked"]) == 5
    # identical vectors tie at 1.0, so the first candidate wins
    assert out[0]["best_match"]["id"] == "sale_date"
    column_batch = [inputs for _, inputs in embedder.calls if inputs[0].startswith("Column:")][0]
    assert column_batch[0] == "Column: qty\nSample Values: 1, 2"


def test_auto_mapping_cli_missing_file(tmp_path):
    with patch("scripts.run_auto_mapping.get_embedding_client") as mock_client:
        assert automap_main(["--file", str(tmp_path / "nope.csv")]) == 1
    mock_client.assert_not_called()


def test_load_candidates_from_yaml(tmp_path):
    path = tmp_path / "candidates.yaml"
    path.write_text("candidates:\n  - id: sku\n    description: Stock keeping unit\n    synonyms: [item]\n")

    [candidate] = load_candidates(str(path))

    assert candidate.id == "sku"
    assert candidate.synonyms == ("item",)


def test_load_candidates_wraps_scalar_synonym(tmp_path):
    path = tmp_path / "candidates.yaml"
    path.write_text("candidates:\n  - id: quantity\n    description: Units\n    synonyms: qty\n")

    [candidate] = load_candidates(str(path))

    assert candidate.synonyms == ("qty",)
    assert build_candidate_context(candidate) == "Field: quantity\nDescription: Units\nSynonyms: qty"
    ranked = [ScoredCandidate(candidate, 0.1)]
    assert resolve_best_match("t", ranked) == (candidate, 0.1)
    assert resolve_best_match("QTY", ranked) == (candidate, 0.6)


def test_load_candidates_rejects_non_string_synonyms(tmp_path):
    path = tmp_path / "candidates.json"
    path.write_text(json.dumps([{"id": "quantity", "description": "Units", "synonyms": [1, 2]}]))

    with pytest.raises(ValueError):
        load_candidates(str(path))


def test_forecast_cli(tmp_path, capsys):
    template = tmp_path / "t.sql"
    template.write_text('SELECT * FROM {{ schema }}."{{ table }}" WHERE d BETWEEN @start_date AND @end_date')
    engine = MagicMock()
    engine.run.return_value = QueryResult(job_id="job-1", rows=[{"i": i} for i in range(15)])

    ret = forecast_main(
        ["--start-date", "2024-01-01", "--end-date", "2024-02-01", "--template", str(template), "--schema", "s"],
        engine=engine,
    )

    assert ret == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["job_id"] == "job-1"
    assert len(summary["rows_preview"]) == 10
    assert engine.run.call_args[0][0] == 'SELECT * FROM s."sample_sales" WHERE d BETWEEN @start_date AND @end_date'


def test_forecast_cli_rejects_long_timeout(tmp_path):
    engine = MagicMock()
    ret = forecast_main(["--start-date", "2024-01-01", "--end-date", "2024-02-01", "--timeout", "300"], engine=engine)
    assert ret == 1
    engine.run.assert_not_called()


def test_conversation_loop_stops_on_empty_line(capsys):
    handler = MagicMock()
    handler.handle.return_value = MagicMock(human_message="Found 0 recent forecasts for your account.", payload=[])
    lines = iter(["show history", ""])

    turns = run_loop(handler, "demo-user", read=lambda _prompt: next(lines))

    assert turns == 1
    handler.handle.assert_called_once_with("show history", "demo-user")
    assert "Found 0 recent forecasts" in capsys.readouterr().out
