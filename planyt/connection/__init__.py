from .connection import ConnectionSettings, get_connection
from .query_engine import FlightSQLQueryEngine, QueryEngine, QueryResult, bind_named_parameters

__all__ = ["ConnectionSettings", "FlightSQLQueryEngine", "QueryEngine", "QueryResult", "bind_named_parameters", "get_connection"]
