"""Core (UI-agnostic) dashboard logic.

This package contains:
- record schema for the backend tables and the list views built on them
- the tabular pipeline: date normalization, filter predicates, comparators,
  pagination and CSV export (pure functions over in-memory records)
- data-source adapters and record mutations
- summary metrics (JSON-serializable payloads, Altair -> Vega-Lite specs)
"""
