"""
indexer/ - Run orchestration.

Modules:
- starting_point: Starting cursor resolution
- runner: Fetch -> classify -> persist loop
- jobs.run_indexer: CLI entrypoint
"""

from indexer.runner import IndexerRunner
from indexer.starting_point import (
    StartingPoint,
    build_contract_id_cursor,
    parse_starting_point,
    resolve_from_starting_point,
    resolve_starting_cursor,
)

__all__ = [
    "IndexerRunner",
    "StartingPoint",
    "build_contract_id_cursor",
    "parse_starting_point",
    "resolve_from_starting_point",
    "resolve_starting_cursor",
]
