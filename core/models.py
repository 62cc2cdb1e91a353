# PATH: core/models.py
"""
Core data models for the ERC indexer.

CONTRACT ID CONTRACT
====================
Native contract ids are three-part strings "shard.realm.num"
(e.g. "0.0.1234"). Ordering anywhere in the indexer uses the numeric
value of the final segment only, matching the mirror node's
ascending contract list.

REGISTRY ENTRY CONTRACT
=======================
ClassifiedToken.to_dict() is the on-disk format:
  {"contractId": "0.0.1234", "address": "0x...", ...standard fields}
Standard fields are null when the read call failed or returned no data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.constants import EMPTY_BYTECODE, StopReason, TokenStandard


def contract_id_num(contract_id: str) -> int:
    """Numeric value of the final segment of a native contract id."""
    return int(str(contract_id).rsplit(".", 1)[-1])


def _has_code(bytecode: Optional[str]) -> bool:
    return bool(bytecode) and bytecode != EMPTY_BYTECODE


@dataclass(frozen=True)
class ContractRecord:
    """A contract as reported by the mirror node. Never mutated."""
    contract_id: str
    evm_address: str
    bytecode: Optional[str] = None
    runtime_bytecode: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContractRecord":
        return cls(
            contract_id=data["contract_id"],
            evm_address=data.get("evm_address") or "",
            bytecode=data.get("bytecode"),
            runtime_bytecode=data.get("runtime_bytecode"),
        )

    @property
    def selected_bytecode(self) -> Optional[str]:
        """Runtime bytecode if present, else creation bytecode, else None."""
        if _has_code(self.runtime_bytecode):
            return self.runtime_bytecode
        if _has_code(self.bytecode):
            return self.bytecode
        return None


@dataclass
class ContractPage:
    """One page of the mirror node contract list."""
    contracts: List[ContractRecord]
    next: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContractPage":
        links = data.get("links") or {}
        return cls(
            contracts=[ContractRecord.from_api(c) for c in data.get("contracts") or []],
            next=links.get("next"),
        )


@dataclass(frozen=True)
class ReadSelector:
    """A read-only call used to extract one token metadata field."""
    type: str
    field: str
    selector: str


@dataclass(frozen=True)
class ClassifiedToken:
    """A contract classified as implementing a token standard."""
    contract_id: str
    address: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def id_num(self) -> int:
        return contract_id_num(self.contract_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contractId": self.contract_id,
            "address": self.address,
            **self.fields,
        }


@dataclass
class ClassificationResult:
    """Tokens detected in one batch of contracts, per standard."""
    erc20: List[ClassifiedToken] = field(default_factory=list)
    erc721: List[ClassifiedToken] = field(default_factory=list)
    erc1155: List[ClassifiedToken] = field(default_factory=list)

    def for_standard(self, standard: TokenStandard) -> List[ClassifiedToken]:
        return {
            TokenStandard.ERC20: self.erc20,
            TokenStandard.ERC721: self.erc721,
            TokenStandard.ERC1155: self.erc1155,
        }[standard]

    @property
    def total(self) -> int:
        return len(self.erc20) + len(self.erc721) + len(self.erc1155)

    def counts(self) -> Dict[str, int]:
        return {standard.value: len(self.for_standard(standard)) for standard in TokenStandard}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "erc20": [t.to_dict() for t in self.erc20],
            "erc721": [t.to_dict() for t in self.erc721],
            "erc1155": [t.to_dict() for t in self.erc1155],
        }


@dataclass
class RunStats:
    """Summary of one indexer run."""
    pages_fetched: int = 0
    contracts_scanned: int = 0
    tokens_found: Dict[str, int] = field(
        default_factory=lambda: {standard.value: 0 for standard in TokenStandard}
    )
    registry_updates: int = 0
    last_cursor: Optional[str] = None
    elapsed_ms: int = 0
    stop_reason: Optional[StopReason] = None

    def record_page(self, contracts: int, result: ClassificationResult) -> None:
        self.pages_fetched += 1
        self.contracts_scanned += contracts
        for key, count in result.counts().items():
            self.tokens_found[key] += count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages_fetched": self.pages_fetched,
            "contracts_scanned": self.contracts_scanned,
            "tokens_found": dict(self.tokens_found),
            "registry_updates": self.registry_updates,
            "last_cursor": self.last_cursor,
            "elapsed_ms": self.elapsed_ms,
            "stop_reason": self.stop_reason.value if self.stop_reason else None,
        }
