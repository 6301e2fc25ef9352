import json

import pytest

from planyt.errors import StoreError
from planyt.semantic_field_mapping import Candidate, ColumnMapping, ScoredCandidate
from planyt.storage import (
    FIELD_MAPPINGS_TABLE,
    ForecastRunRecord,
    JsonFileStore,
    persist_mappings,
    recent_forecast_runs,
    save_forecast_run,
)


def test_insert_and_select(tmp_path):
    store = JsonFileStore(tmp_path)
    store.insert("t", {"id": 1, "ts": "2024-01-02", "user": "a"})
    store.insert("t", {"id": 2, "ts": "2024-01-03", "user": "a"})
    store.insert("t", {"id": 3, "ts": "2024-01-01", "user": "b"})

    rows = store.select("t", where={"user": "a"}, order_by="ts", descending=True)

    assert [r["id"] for r in rows] == [2, 1]
    assert store.select("t", limit=1) == [{"id": 1, "ts": "2024-01-02", "user": "a"}]
    assert store.select("missing") == []


def test_upsert_replaces_on_conflict(tmp_path):
    store = JsonFileStore(tmp_path)
    store.upsert("t", [{"k1": "a", "k2": 1, "v": "old"}, {"k1": "b", "k2": 1, "v": "keep"}], on_conflict=("k1", "k2"))
    store.upsert("t", [{"k1": "a", "k2": 1, "v": "new"}, {"k1": "a", "k2": 2, "v": "added"}], on_conflict=("k1", "k2"))

    rows = store.select("t")

    assert rows == [
        {"k1": "a", "k2": 1, "v": "new"},
        {"k1": "b", "k2": 1, "v": "keep"},
        {"k1": "a", "k2": 2, "v": "added"},
    ]


def test_corrupt_table_raises_store_error(tmp_path):
    (tmp_path / "t.json").write_text("{not json")
    with pytest.raises(StoreError):
        JsonFileStore(tmp_path).select("t")


def test_persist_mappings(tmp_path):
    store = JsonFileStore(tmp_path)
    qty = Candidate(id="quantity", description="Units")
    rev = Candidate(id="revenue", description="Revenue")
    mappings = [
        ColumnMapping("qty", qty, 0.6, [ScoredCandidate(rev, 0.5), ScoredCandidate(qty, 0.4)]),
        ColumnMapping("blank", None, 0.0, []),
    ]

    assert persist_mappings(store, "tenant-1", "sales.csv", mappings) == 2
    persist_mappings(store, "tenant-1", "sales.csv", mappings[:1])

    rows = json.loads((tmp_path / f"{FIELD_MAPPINGS_TABLE}.json").read_text())
    assert len(rows) == 2
    assert rows[0] == {
        "tenant_id": "tenant-1",
        "dataset_id": "sales.csv",
        "source_column": "qty",
        "target_field": "quantity",
        "score": 0.6,
        "candidates_ranked": [{"id": "revenue", "score": 0.5}, {"id": "quantity", "score": 0.4}],
    }
    assert rows[1]["target_field"] is None


def test_forecast_runs_newest_first(tmp_path):
    store = JsonFileStore(tmp_path)
    for i, ts in enumerate(["2024-01-01T00:00:00", "2024-03-01T00:00:00", "2024-02-01T00:00:00"]):
        save_forecast_run(store, ForecastRunRecord(
            job_id=f"job-{i}", query="SELECT 1", requested_at=ts, status="success", requested_by="u1",
        ))
    save_forecast_run(store, ForecastRunRecord(
        job_id="other", query="SELECT 1", requested_at="2025-01-01T00:00:00", status="success", requested_by="u2",
    ))

    runs = recent_forecast_runs(store, "u1", limit=2)

    assert [r["job_id"] for r in runs] == ["job-1", "job-2"]
