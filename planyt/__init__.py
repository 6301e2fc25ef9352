"""
planyt: semantic column auto-mapping and conversational demand forecasting.

Core entrypoints:
- auto_map_columns: map dataset columns to target fields via embeddings + lexical fallback
- ConversationHandler: route free-text requests to forecast / simulate / recall actions
"""
from .semantic_field_mapping import AutoMapper, Candidate, ColumnMapping, auto_map_columns

__all__ = ["AutoMapper", "Candidate", "ColumnMapping", "auto_map_columns"]
