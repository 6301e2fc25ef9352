"""
Semantic Field Mapping package.

Core entrypoints:
- AutoMapper: maps dataset columns to candidate target fields via embeddings + lexical fallback
- auto_map_columns: convenience function wrapping AutoMapper.map_columns

Usage example:

```
from planyt.assistant.embedding_client import get_embedding_client
from planyt.semantic_field_mapping import Candidate, auto_map_columns

rows = [{"qty": "3", "order_date": "2024-01-02"}]
candidates = [
    Candidate(id="quantity", description="Number of units sold", synonyms=("qty", "units")),
    Candidate(id="sale_date", description="Transaction date", synonyms=("order_date",)),
]
for m in auto_map_columns(rows, candidates, embedder=get_embedding_client()):
    print(m.column, m.best_match.id if m.best_match else None, m.score)
```
"""
from .mapper import AutoMapper, DEFAULT_MODEL, Embedder, auto_map_columns
from .models import Candidate, ColumnMapping, Row, ScoredCandidate

__all__ = [
    "AutoMapper",
    "Candidate",
    "ColumnMapping",
    "DEFAULT_MODEL",
    "Embedder",
    "Row",
    "ScoredCandidate",
    "auto_map_columns",
]
