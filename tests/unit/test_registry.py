"""
tests/unit/test_registry.py - Token registry store tests.
"""

import asyncio
import json

import pytest

from core.constants import TokenStandard
from core.exceptions import RegistryError
from core.models import ClassificationResult, ClassifiedToken
from discovery.registry import TokenRegistryStore, dedupe_by_contract_id, merge_entries


def entry(num: int, **fields) -> dict:
    return {"contractId": f"0.0.{num}", "address": f"0x{num:040x}", **fields}


def token(num: int, **fields) -> ClassifiedToken:
    return ClassifiedToken(contract_id=f"0.0.{num}", address=f"0x{num:040x}", fields=fields)


@pytest.fixture
def store(tmp_path):
    return TokenRegistryStore(tmp_path / "erc-registry", "testnet")


class TestMergeEntries:
    def test_empty_existing_returns_new_verbatim(self):
        new = [entry(5), entry(3)]
        assert merge_entries([], new) == new

    def test_fast_path_appends_without_sort(self):
        existing = [entry(1), entry(2)]
        new = [entry(10), entry(11)]
        assert merge_entries(existing, new) == existing + new

    def test_fast_path_dedupes(self):
        existing = [entry(1)]
        new = [entry(10), entry(10, name="dup")]
        assert merge_entries(existing, new) == [entry(1), entry(10)]

    def test_overlap_sorts_numerically(self):
        existing = [entry(2), entry(100)]
        new = [entry(9), entry(50)]
        merged = merge_entries(existing, new)
        assert [e["contractId"] for e in merged] == ["0.0.2", "0.0.9", "0.0.50", "0.0.100"]

    def test_existing_entries_win_conflicts(self):
        existing = [entry(10, name="A")]
        new = [entry(10, name="B"), entry(20, name="C")]
        assert merge_entries(existing, new) == [entry(10, name="A"), entry(20, name="C")]

    def test_sort_uses_final_segment_only(self):
        existing = [{"contractId": "0.0.30", "address": "0x1"}]
        new = [{"contractId": "1.2.4", "address": "0x2"}]
        merged = merge_entries(existing, new)
        assert [e["contractId"] for e in merged] == ["1.2.4", "0.0.30"]

    def test_empty_batch_keeps_existing(self):
        existing = [entry(1)]
        assert merge_entries(existing, []) == existing

    def test_dedupe_keeps_first(self):
        assert dedupe_by_contract_id([entry(1, v=1), entry(1, v=2)]) == [entry(1, v=1)]


class TestTokenRegistryStore:
    def test_read_absent_file(self, store):
        assert store.read(TokenStandard.ERC20) == []

    def test_merge_writes_pretty_json(self, store):
        store.merge(TokenStandard.ERC20, [token(10, name="A", decimals=None)])

        path = store.path_for(TokenStandard.ERC20)
        assert path.name == "erc-20.json"
        assert path.parent.name == "testnet"
        text = path.read_text()
        assert text.startswith("[\n  {")
        assert json.loads(text) == [
            {"contractId": "0.0.10", "address": f"0x{10:040x}", "name": "A", "decimals": None}
        ]

    def test_conflict_rule_on_disk(self, store):
        store.merge(TokenStandard.ERC721, [token(10, name="A")])
        store.merge(TokenStandard.ERC721, [token(10, name="B"), token(20, name="C")])

        names = [(e["contractId"], e["name"]) for e in store.read(TokenStandard.ERC721)]
        assert names == [("0.0.10", "A"), ("0.0.20", "C")]

    def test_merge_is_idempotent(self, store):
        store.merge(TokenStandard.ERC20, [token(5), token(7)])
        batch = [token(6), token(8)]

        store.merge(TokenStandard.ERC20, batch)
        once = store.path_for(TokenStandard.ERC20).read_text()
        store.merge(TokenStandard.ERC20, batch)
        twice = store.path_for(TokenStandard.ERC20).read_text()

        assert once == twice

    def test_standards_use_separate_files(self, store):
        store.merge(TokenStandard.ERC20, [token(1)])
        store.merge(TokenStandard.ERC1155, [token(2)])

        assert [e["contractId"] for e in store.read(TokenStandard.ERC20)] == ["0.0.1"]
        assert [e["contractId"] for e in store.read(TokenStandard.ERC1155)] == ["0.0.2"]
        assert store.read(TokenStandard.ERC721) == []

    def test_update_registry_skips_empty_standards(self, store):
        result = ClassificationResult(erc20=[token(1)], erc1155=[token(1)])

        totals = store.update_registry(result)

        assert totals == {TokenStandard.ERC20: 1, TokenStandard.ERC1155: 1}
        assert not store.path_for(TokenStandard.ERC721).exists()

    @pytest.mark.asyncio
    async def test_async_updates_are_serialized(self, store):
        results = [ClassificationResult(erc20=[token(n)]) for n in range(1, 6)]

        await asyncio.gather(*(store.update_registry_async(r) for r in results))

        ids = [e["contractId"] for e in store.read(TokenStandard.ERC20)]
        assert ids == [f"0.0.{n}" for n in range(1, 6)]

    def test_store_reused_across_event_loops(self, store):
        async def update_pair(first, second):
            await asyncio.gather(
                store.update_registry_async(ClassificationResult(erc20=[token(first)])),
                store.update_registry_async(ClassificationResult(erc20=[token(second)])),
            )

        asyncio.run(update_pair(1, 2))
        asyncio.run(update_pair(3, 4))

        ids = [e["contractId"] for e in store.read(TokenStandard.ERC20)]
        assert ids == ["0.0.1", "0.0.2", "0.0.3", "0.0.4"]

    def test_corrupt_registry_raises(self, store):
        path = store.path_for(TokenStandard.ERC20)
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with pytest.raises(RegistryError):
            store.read(TokenStandard.ERC20)


class TestCursor:
    def test_read_cursor_absent(self, store):
        assert store.read_cursor() is None

    def test_persist_and_read(self, store):
        cursor = "/api/v1/contracts?limit=100&order=asc&contract.id=gt:0.0.1500"

        assert store.persist_cursor(cursor) is True

        assert store.read_cursor() == cursor
        assert json.loads(store.cursor_path.read_text()) == cursor
        assert store.cursor_path.name == "next-pointer.json"

    def test_none_leaves_cursor_untouched(self, store):
        store.persist_cursor("/api/v1/contracts?limit=100&order=asc&contract.id=gt:0.0.7")

        assert store.persist_cursor(None) is False

        assert store.read_cursor() == "/api/v1/contracts?limit=100&order=asc&contract.id=gt:0.0.7"

    def test_overwritten_on_advance(self, store):
        store.persist_cursor("/a")
        store.persist_cursor("/b")
        assert store.read_cursor() == "/b"
