#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl
import yaml

# Ensure local package is importable when running as a script
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from planyt.assistant.embedding_client import get_embedding_client
from planyt.semantic_field_mapping import AutoMapper, Candidate, DEFAULT_MODEL
from planyt.storage.json_store import JsonFileStore
from planyt.storage.repository import persist_mappings
from planyt.utils.config import load_settings
from planyt.utils.logger import logger

DEFAULT_CANDIDATES: List[Candidate] = [
    Candidate(
        id="sale_date",
        description="Transaction date when the sale occurred; ISO-8601 formatted",
        synonyms=("date", "transaction_date", "order_date"),
        required=True,
    ),
    Candidate(
        id="product",
        description="Product name or unique identifier sold in the transaction",
        synonyms=("sku", "item_name"),
        required=True,
    ),
    Candidate(
        id="quantity",
        description="Number of units sold for the transaction",
        synonyms=("qty", "units", "count"),
    ),
    Candidate(
        id="revenue",
        description="Net revenue recorded for the transaction",
        synonyms=("sales_amount", "sales", "amount"),
    ),
    Candidate(
        id="region",
        description="Geographical region or market",
        synonyms=("territory", "market"),
    ),
]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Suggest target fields for the columns of a CSV file using embeddings.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    ap.add_argument("--file", default="./samples/sample_sales.csv", help="Path to the CSV file to process")
    ap.add_argument("--model", default=DEFAULT_MODEL, help="Embedding model name")
    ap.add_argument("--candidates-file", default="", help="YAML/JSON file with a list of candidates (id, description, synonyms, required)")
    ap.add_argument("--max-rows", type=int, default=0, help="Limit rows read from the CSV (0 = all)")
    ap.add_argument("--persist", action="store_true", help="Upsert results into the local store")
    ap.add_argument("--tenant", default="demo-tenant", help="Tenant id used when persisting")
    ap.add_argument("--dataset", default="", help="Dataset id used when persisting (defaults to file name)")
    return ap.parse_args(argv)


def load_candidates(path: str) -> List[Candidate]:
    if not path:
        return list(DEFAULT_CANDIDATES)
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Candidates file not found: {path}")
    with p.open("r", encoding="utf-8") as f:
        obj = yaml.safe_load(f) if p.suffix.lower() in {".yml", ".yaml"} else json.load(f)
    if isinstance(obj, dict):
        obj = obj.get("candidates")
    if not isinstance(obj, list):
        raise ValueError("candidates-file must hold a list of candidates (or a dict with 'candidates')")
    return [Candidate.from_dict(item) for item in obj]


def read_rows(path: Path, max_rows: int = 0) -> List[dict]:
    # Everything as strings, like the raw CSV cells
    df = pl.read_csv(path, infer_schema_length=0, n_rows=max_rows or None)
    return df.to_dicts()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    file_path = Path(args.file).resolve()
    logger.info(f"Running auto-mapping harness on {file_path}")

    try:
        rows = read_rows(file_path, args.max_rows)
        candidates = load_candidates(args.candidates_file)
        mapper = AutoMapper(embedder=get_embedding_client(), model=args.model)
        mappings = mapper.map_columns(rows, candidates)
        if args.persist:
            store = JsonFileStore(load_settings().store_dir)
            persist_mappings(store, args.tenant, args.dataset or file_path.name, mappings)
    except Exception as e:
        logger.error(f"Auto-mapping harness failed: {e}")
        return 1

    print(json.dumps([m.to_dict() for m in mappings], indent=2))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
