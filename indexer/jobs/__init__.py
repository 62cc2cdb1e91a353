"""
Indexer jobs package.

Available entry points:
    python -m indexer.jobs.run_indexer   # Full indexing pass

NOTE: This __init__.py intentionally does NOT import run_indexer
to avoid side effects when importing the package.
"""

__all__: list[str] = []
