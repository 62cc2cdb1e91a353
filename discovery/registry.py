"""
discovery/registry.py - On-disk token registry with resumable cursor.

Layout (one directory per network):
    {root}/{network}/erc-20.json      [ClassifiedToken, ...]
    {root}/{network}/erc-721.json
    {root}/{network}/erc-1155.json
    {root}/{network}/next-pointer.json  "<cursor>"

Merge rules:
- No existing entries: new entries are written verbatim
- min(new id) > max(existing id): append + dedup, no sort
  (valid because the mirror node lists contracts in ascending id order)
- Otherwise: append + dedup (existing entries win) + sort by numeric id

At most one indexer process per (network, directory): there is no
cross-process locking.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from core.constants import CURSOR_FILENAME, TokenStandard
from core.exceptions import RegistryError
from core.logging import get_logger
from core.models import ClassificationResult, ClassifiedToken, contract_id_num

logger = get_logger(__name__)

Entry = dict[str, Any]


def _entry_id(entry: Entry) -> int:
    return contract_id_num(entry["contractId"])


def dedupe_by_contract_id(entries: Iterable[Entry]) -> list[Entry]:
    """Keep the first occurrence of every contractId, preserving order."""
    seen: set[str] = set()
    out: list[Entry] = []
    for entry in entries:
        key = entry["contractId"]
        if key in seen:
            continue
        seen.add(key)
        out.append(entry)
    return out


def merge_entries(existing: list[Entry], new_entries: list[Entry]) -> list[Entry]:
    """
    Merge a batch of new registry entries into the existing ones.

    Existing entries take precedence over new entries with the same id.
    """
    if not existing:
        return list(new_entries)
    if not new_entries:
        return list(existing)

    combined = dedupe_by_contract_id(existing + new_entries)

    if min(_entry_id(e) for e in new_entries) > max(_entry_id(e) for e in existing):
        return combined

    return sorted(combined, key=_entry_id)


class TokenRegistryStore:
    """
    Registry of classified tokens for one network.

    Usage:
        store = TokenRegistryStore(Path("erc-registry"), "testnet")
        store.merge(TokenStandard.ERC20, tokens)
        store.persist_cursor(page.next)
    """

    def __init__(self, root_dir: Union[str, Path], network: str):
        self.root_dir = Path(root_dir)
        self.network = network
        self.network_dir = self.root_dir / network
        self._lock: Optional[asyncio.Lock] = None
        self._lock_loop: Optional[asyncio.AbstractEventLoop] = None

    def path_for(self, standard: TokenStandard) -> Path:
        return self.network_dir / standard.registry_filename

    @property
    def cursor_path(self) -> Path:
        return self.network_dir / CURSOR_FILENAME

    # -------------------------------------------------------------------------
    # File helpers
    # -------------------------------------------------------------------------

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RegistryError(
                f"Cannot read {path}: {e}",
                details={"path": str(path)},
            ) from e

    def _write_json(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            raise RegistryError(
                f"Cannot write {path}: {e}",
                details={"path": str(path)},
            ) from e

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def read(self, standard: TokenStandard) -> list[Entry]:
        """Existing entries for a standard ([] if the file is absent)."""
        data = self._read_json(self.path_for(standard))
        if data is None:
            return []
        if not isinstance(data, list):
            raise RegistryError(
                f"Registry file is not a JSON array: {self.path_for(standard)}",
                details={"path": str(self.path_for(standard))},
            )
        return data

    def merge(
        self,
        standard: TokenStandard,
        new_entries: Iterable[Union[ClassifiedToken, Entry]],
    ) -> list[Entry]:
        """
        Merge new entries into the registry file for a standard.

        Returns:
            The merged list as written to disk
        """
        batch = [e.to_dict() if isinstance(e, ClassifiedToken) else dict(e) for e in new_entries]
        existing = self.read(standard)
        merged = merge_entries(existing, batch)

        self._write_json(self.path_for(standard), merged)
        logger.info(
            f"Registry updated: {standard.registry_filename}",
            extra={"context": {
                "network": self.network,
                "standard": standard.value,
                "new_entries": len(batch),
                "total_entries": len(merged),
            }},
        )
        return merged

    def update_registry(self, result: ClassificationResult) -> dict[TokenStandard, int]:
        """
        Merge every non-empty standard of a classification result.

        Returns:
            Mapping of updated standard -> total entries after merge
        """
        totals: dict[TokenStandard, int] = {}
        for standard in TokenStandard:
            tokens = result.for_standard(standard)
            if not tokens:
                continue
            totals[standard] = len(self.merge(standard, tokens))
        return totals

    async def update_registry_async(self, result: ClassificationResult) -> dict[TokenStandard, int]:
        """
        update_registry() off the event loop.

        Concurrent calls are serialized in call order, so background
        updates from consecutive pages never interleave their
        read-modify-write cycles.
        """
        async with self._get_lock():
            return await asyncio.to_thread(self.update_registry, result)

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to the first loop that waits on it; one per loop
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    # -------------------------------------------------------------------------
    # Cursor
    # -------------------------------------------------------------------------

    def persist_cursor(self, next_cursor: Optional[str]) -> bool:
        """
        Store the pagination cursor.

        A None cursor (last page) leaves the stored cursor untouched.

        Returns:
            True if the cursor file was written
        """
        if next_cursor is None:
            return False
        self._write_json(self.cursor_path, next_cursor)
        logger.debug(
            "Cursor persisted",
            extra={"context": {"network": self.network, "cursor": next_cursor}},
        )
        return True

    def read_cursor(self) -> Optional[str]:
        """Stored cursor, or None if none was ever persisted."""
        data = self._read_json(self.cursor_path)
        if data is None:
            return None
        if not isinstance(data, str):
            raise RegistryError(
                f"Cursor file does not hold a string: {self.cursor_path}",
                details={"path": str(self.cursor_path)},
            )
        return data or None
