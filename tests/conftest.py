# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for the ERC indexer tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from eth_abi import encode as abi_encode

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.constants import TokenStandard  # noqa: E402
from core.models import ContractRecord  # noqa: E402
from discovery.signatures import get_signatures  # noqa: E402

RUNTIME_PREFIX = "0x608060405234801561001057600080fd5b50600436106100a95760003560e01c"


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


def build_bytecode(signatures) -> str:
    """Bytecode-shaped hex string embedding every given signature."""
    body = []
    for sig in signatures:
        if len(sig) <= 8:
            # DUP1 PUSH4 <selector> EQ
            body.append(f"8063{sig}14")
        else:
            # PUSH32 <topic>
            body.append(f"7f{sig}")
    return RUNTIME_PREFIX + "".join(body) + "5b600080fd"


@pytest.fixture
def bytecode_for():
    """Factory: bytecode containing every signature of the given standards."""
    def _build(*standards: TokenStandard) -> str:
        sigs: list[str] = []
        for standard in standards:
            for sig in get_signatures(standard):
                if sig not in sigs:
                    sigs.append(sig)
        return build_bytecode(sigs)
    return _build


@pytest.fixture
def build_bytecode_fn():
    return build_bytecode


@pytest.fixture
def plain_bytecode():
    """Bytecode of a contract that implements no token standard."""
    return build_bytecode(["3ccfd60b", "8da5cb5b", "f2fde38b"])


@pytest.fixture
def abi_hex():
    """Factory: ABI-encode a single value as a 0x-prefixed hex result."""
    def _encode(abi_type: str, value) -> str:
        return "0x" + abi_encode([abi_type], [value]).hex()
    return _encode


@pytest.fixture
def make_contract():
    """Factory for ContractRecord."""
    def _make(num: int, runtime_bytecode=None, bytecode=None) -> ContractRecord:
        return ContractRecord(
            contract_id=f"0.0.{num}",
            evm_address="0x" + hex(num)[2:].zfill(40),
            bytecode=bytecode,
            runtime_bytecode=runtime_bytecode,
        )
    return _make


@pytest.fixture
def make_mock_client():
    """
    Factory for a mocked MirrorNodeClient.

    Args:
        details: contract_id -> ContractRecord (missing -> None)
        call_results: (address, selector) -> hex result (missing -> None)
        pages: sequence of ContractPage / None returned by fetch_contract_page
    """
    def _make(details=None, call_results=None, pages=None):
        details = details or {}
        call_results = call_results or {}

        async def fetch_contract_detail(contract_id):
            return details.get(contract_id)

        async def simulate_call(to, data, from_address=None):
            return call_results.get((to, data))

        client = MagicMock()
        client.last_page_error = None
        client.fetch_contract_detail = AsyncMock(side_effect=fetch_contract_detail)
        client.simulate_call = AsyncMock(side_effect=simulate_call)
        client.fetch_contract_page = AsyncMock(side_effect=list(pages or []))
        return client
    return _make
