"""
indexer/starting_point.py - Resolve where a run starts in the contract list.

Precedence (highest first):
1. explicit pagination cursor
2. explicit native contract id  -> "contract.id=gte:{id}" cursor
3. explicit EVM address         -> one detail lookup, then as (2)
4. cursor persisted by a previous run
5. None (start of the contract list)
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from core.constants import CONTRACTS_PATH, DEFAULT_PAGE_SIZE, StartingPointKind
from core.exceptions import ConfigError, StartingPointError
from core.logging import get_logger

if TYPE_CHECKING:
    from chains.mirror_node import MirrorNodeClient
    from discovery.registry import TokenRegistryStore

logger = get_logger(__name__)

CONTRACT_ID_RE = re.compile(r"^\d+\.\d+\.\d+$")
EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class StartingPoint:
    """A parsed starting-point override."""
    kind: StartingPointKind
    value: str


def _is_cursor(value: str) -> bool:
    if value.startswith(CONTRACTS_PATH + "?"):
        return True
    return value.startswith(("http://", "https://")) and f"{CONTRACTS_PATH}?" in value


def parse_starting_point(value: str) -> StartingPoint:
    """
    Classify a raw override string.

    Accepts a contract list URL or path ("/api/v1/contracts?..."),
    a native contract id ("0.0.1234") or an EVM address ("0x" + 40 hex).

    Raises:
        ConfigError: if the value matches none of the accepted forms
    """
    value = value.strip()

    if _is_cursor(value):
        return StartingPoint(StartingPointKind.CURSOR, value)
    if CONTRACT_ID_RE.match(value):
        return StartingPoint(StartingPointKind.CONTRACT_ID, value)
    if EVM_ADDRESS_RE.match(value):
        return StartingPoint(StartingPointKind.EVM_ADDRESS, value)

    raise ConfigError(
        f"Invalid starting point: {value!r}",
        details={"expected": "contracts URL, contract id (shard.realm.num) or EVM address"},
    )


def build_contract_id_cursor(contract_id: str, page_size: int = DEFAULT_PAGE_SIZE) -> str:
    """Cursor listing contracts with id >= contract_id in ascending order."""
    return f"{CONTRACTS_PATH}?limit={page_size}&order=asc&contract.id=gte:{contract_id}"


async def resolve_starting_cursor(
    client: "MirrorNodeClient",
    store: Optional["TokenRegistryStore"],
    cursor: Optional[str] = None,
    contract_id: Optional[str] = None,
    evm_address: Optional[str] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Optional[str]:
    """
    Resolve the cursor the run loop starts from.

    Args:
        client: Mirror node client (used only for EVM address lookup)
        store: Registry store holding the persisted cursor (may be None)
        cursor: Explicit pagination cursor override
        contract_id: Explicit native contract id override
        evm_address: Explicit EVM address override
        page_size: Page size used in derived cursors

    Returns:
        Cursor string, or None to start from the beginning

    Raises:
        ConfigError: malformed contract id / address override
        StartingPointError: the EVM address could not be resolved
    """
    if cursor:
        logger.info("Starting from explicit cursor", extra={"context": {"cursor": cursor}})
        return cursor

    if contract_id:
        if not CONTRACT_ID_RE.match(contract_id):
            raise ConfigError(f"Invalid contract id: {contract_id!r}")
        resolved = build_contract_id_cursor(contract_id, page_size)
        logger.info(
            "Starting from contract id",
            extra={"context": {"contract_id": contract_id, "cursor": resolved}},
        )
        return resolved

    if evm_address:
        if not EVM_ADDRESS_RE.match(evm_address):
            raise ConfigError(f"Invalid EVM address: {evm_address!r}")
        record = await client.fetch_contract_detail(evm_address)
        if record is None:
            raise StartingPointError(
                f"Could not resolve EVM address {evm_address} to a contract id",
                details={"evm_address": evm_address},
            )
        resolved = build_contract_id_cursor(record.contract_id, page_size)
        logger.info(
            "Starting from EVM address",
            extra={"context": {
                "evm_address": evm_address,
                "contract_id": record.contract_id,
                "cursor": resolved,
            }},
        )
        return resolved

    stored = store.read_cursor() if store is not None else None
    if stored:
        logger.info("Resuming from stored cursor", extra={"context": {"cursor": stored}})
        return stored

    logger.info("Starting from the beginning of the contract list")
    return None


async def resolve_from_starting_point(
    client: "MirrorNodeClient",
    store: Optional["TokenRegistryStore"],
    starting_point: Optional[StartingPoint],
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Optional[str]:
    """Resolve a parsed StartingPoint override (or None) into a cursor."""
    kwargs: dict[str, str] = {}
    if starting_point is not None:
        key = {
            StartingPointKind.CURSOR: "cursor",
            StartingPointKind.CONTRACT_ID: "contract_id",
            StartingPointKind.EVM_ADDRESS: "evm_address",
        }[starting_point.kind]
        kwargs[key] = starting_point.value

    return await resolve_starting_cursor(client, store, page_size=page_size, **kwargs)
