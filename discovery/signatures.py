"""
discovery/signatures.py - Bytecode signature catalog per token standard.

Function selectors are stored without 0x. Event topics are full 32-byte
keccak hashes. A contract is classified as a standard only when its
bytecode contains every signature listed for that standard.

ERC-1155 balanceOf(address,uint256) is 0x00fdd58e. The compiler pushes it
with PUSH3 (leading zero byte dropped), so the bytecode only ever contains
"fdd58e". Keep the stripped form.
"""

from types import MappingProxyType
from typing import Final, Mapping

from core.constants import TokenStandard
from core.models import ReadSelector

# =============================================================================
# EVENT TOPICS
# =============================================================================

# Transfer(address,address,uint256)
TOPIC_TRANSFER = "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
# Approval(address,address,uint256)
TOPIC_APPROVAL = "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"
# ApprovalForAll(address,address,bool)
TOPIC_APPROVAL_FOR_ALL = "17307eab39ab6107e8899845ad3d59bd9653f200f220920489ca2b5937696c31"
# TransferSingle(address,address,address,uint256,uint256)
TOPIC_TRANSFER_SINGLE = "c3d58168c5ae7397731d063d5bbf3d657854427343f4c083240f7aacaa2d0f62"
# TransferBatch(address,address,address,uint256[],uint256[])
TOPIC_TRANSFER_BATCH = "4a39dc06d4c0dbc64b70af90fd698a233a518aa5d07e595d983b8c0526c8f7fb"
# URI(string,uint256)
TOPIC_URI = "6bb7ff708619ba0610cba295a58592e0451dee2622938c8755667688daf3529b"

# =============================================================================
# SIGNATURE SETS
# =============================================================================

ERC20_SIGNATURES: Final[tuple[str, ...]] = (
    "dd62ed3e",  # allowance(address,address)
    "095ea7b3",  # approve(address,uint256)
    "70a08231",  # balanceOf(address)
    "18160ddd",  # totalSupply()
    "a9059cbb",  # transfer(address,uint256)
    "23b872dd",  # transferFrom(address,address,uint256)
    TOPIC_APPROVAL,
    TOPIC_TRANSFER,
)

ERC721_SIGNATURES: Final[tuple[str, ...]] = (
    "095ea7b3",  # approve(address,uint256)
    "70a08231",  # balanceOf(address)
    "081812fc",  # getApproved(uint256)
    "e985e9c5",  # isApprovedForAll(address,address)
    "6352211e",  # ownerOf(uint256)
    "42842e0e",  # safeTransferFrom(address,address,uint256)
    "b88d4fde",  # safeTransferFrom(address,address,uint256,bytes)
    "a22cb465",  # setApprovalForAll(address,bool)
    "23b872dd",  # transferFrom(address,address,uint256)
    TOPIC_APPROVAL,
    TOPIC_APPROVAL_FOR_ALL,
    TOPIC_TRANSFER,
)

ERC1155_SIGNATURES: Final[tuple[str, ...]] = (
    "fdd58e",    # balanceOf(address,uint256), leading zero byte stripped
    "4e1273f4",  # balanceOfBatch(address[],uint256[])
    "e985e9c5",  # isApprovedForAll(address,address)
    "2eb2c2d6",  # safeBatchTransferFrom(address,address,uint256[],uint256[],bytes)
    "f242432a",  # safeTransferFrom(address,address,uint256,uint256,bytes)
    "a22cb465",  # setApprovalForAll(address,bool)
    TOPIC_APPROVAL_FOR_ALL,
    TOPIC_TRANSFER_BATCH,
    TOPIC_TRANSFER_SINGLE,
    TOPIC_URI,
)

SIGNATURES: Final[Mapping[TokenStandard, tuple[str, ...]]] = MappingProxyType({
    TokenStandard.ERC20: ERC20_SIGNATURES,
    TokenStandard.ERC721: ERC721_SIGNATURES,
    TokenStandard.ERC1155: ERC1155_SIGNATURES,
})

# =============================================================================
# METADATA READ SELECTORS
# =============================================================================

SELECTOR_NAME = ReadSelector(type="string", field="name", selector="0x06fdde03")
SELECTOR_SYMBOL = ReadSelector(type="string", field="symbol", selector="0x95d89b41")
SELECTOR_DECIMALS = ReadSelector(type="uint8", field="decimals", selector="0x313ce567")
SELECTOR_TOTAL_SUPPLY = ReadSelector(type="uint256", field="totalSupply", selector="0x18160ddd")

READ_SELECTORS: Final[Mapping[TokenStandard, tuple[ReadSelector, ...]]] = MappingProxyType({
    TokenStandard.ERC20: (SELECTOR_NAME, SELECTOR_SYMBOL, SELECTOR_DECIMALS, SELECTOR_TOTAL_SUPPLY),
    TokenStandard.ERC721: (SELECTOR_NAME, SELECTOR_SYMBOL),
    TokenStandard.ERC1155: (),
})


def get_signatures(standard: TokenStandard) -> tuple[str, ...]:
    return SIGNATURES[standard]


def get_read_selectors(standard: TokenStandard) -> tuple[ReadSelector, ...]:
    return READ_SELECTORS[standard]
