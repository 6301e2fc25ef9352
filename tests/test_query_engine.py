from unittest.mock import MagicMock, patch

import polars as pl
import pytest

from planyt.connection.connection import ConnectionSettings, get_connection
from planyt.connection.query_engine import FlightSQLQueryEngine, bind_named_parameters, enforce_timeout


def test_bind_named_parameters_positional_order():
    sql, values = bind_named_parameters(
        "WHERE d BETWEEN @start_date AND @end_date AND (@product IS NULL OR p = @product)",
        {"start_date": "2024-01-01", "end_date": "2024-02-01", "product": "Widget"},
    )
    assert sql == "WHERE d BETWEEN ? AND ? AND (? IS NULL OR p = ?)"
    assert values == ["2024-01-01", "2024-02-01", "Widget", "Widget"]


def test_bind_named_parameters_missing_value():
    with pytest.raises(KeyError):
        bind_named_parameters("WHERE a = @a", {})


def test_enforce_timeout():
    assert enforce_timeout(None) is None
    assert enforce_timeout(60) == 60
    with pytest.raises(ValueError):
        enforce_timeout(121)


def test_get_connection_from_env(monkeypatch):
    monkeypatch.setenv("DREMIO_USER", "analyst")
    monkeypatch.setenv("DREMIO_PASSWORD", "secret")
    monkeypatch.setenv("DREMIO_HOST", "dremio.local")
    monkeypatch.setenv("DREMIO_USE_TLS", "true")

    conn = get_connection()

    assert conn.uri == "grpc+tls://dremio.local:32010"
    assert conn.db_kwargs() == {"username": "analyst", "password": "secret"}


def test_run_binds_parameters_and_returns_rows():
    engine = FlightSQLQueryEngine(connection=ConnectionSettings(uri="grpc://x:32010", username="u", password="p"))
    df = pl.DataFrame({"product": ["A", "B"], "forecast_sum": [10.0, 20.0]})

    with patch.object(FlightSQLQueryEngine, "_connect", return_value=MagicMock()), \
         patch("planyt.connection.query_engine.pl.read_database", return_value=df) as mock_read:
        result = engine.run("SELECT * FROM t WHERE d >= @start", params={"start": "2024-01-01"}, timeout_seconds=30)

    assert result.rows == [{"product": "A", "forecast_sum": 10.0}, {"product": "B", "forecast_sum": 20.0}]
    assert result.job_id
    assert result.statistics["row_count"] == 2
    kwargs = mock_read.call_args.kwargs
    assert kwargs["query"] == "SELECT * FROM t WHERE d >= ?"
    assert kwargs["execute_options"] == {"parameters": ["2024-01-01"]}


def test_run_rejects_long_timeout_before_connecting():
    engine = FlightSQLQueryEngine(connection=ConnectionSettings(uri="grpc://x:32010"))
    with patch.object(FlightSQLQueryEngine, "_connect") as mock_connect:
        with pytest.raises(ValueError):
            engine.run("SELECT 1", timeout_seconds=500)
    mock_connect.assert_not_called()
