# PATH: core/constants.py
"""
Constants for the ERC indexer.

Contains enums, defaults, and mirror node API constants.
"""

from enum import Enum
from typing import Final

# =============================================================================
# MIRROR NODE API
# =============================================================================

CONTRACTS_PATH: Final[str] = "/api/v1/contracts"
CONTRACT_CALL_PATH: Final[str] = "/api/v1/contracts/call"

# Page size bounds accepted by the mirror node
MIN_PAGE_SIZE: Final[int] = 1
MAX_PAGE_SIZE: Final[int] = 100
DEFAULT_PAGE_SIZE: Final[int] = 100

# Fixed delay between retries of a rate-limited request
DEFAULT_RATE_LIMIT_DELAY_MS: Final[int] = 500

DEFAULT_HTTP_TIMEOUT_SECONDS: Final[float] = 30.0

# Bytecode value the mirror node returns for a contract without code
EMPTY_BYTECODE: Final[str] = "0x"

# =============================================================================
# REGISTRY STORAGE
# =============================================================================

DEFAULT_REGISTRY_DIR: Final[str] = "erc-registry"
CURSOR_FILENAME: Final[str] = "next-pointer.json"


class TokenStandard(str, Enum):
    """Token standards the classifier detects."""
    ERC20 = "ERC_20"
    ERC721 = "ERC_721"
    ERC1155 = "ERC_1155"

    @property
    def registry_filename(self) -> str:
        return {
            TokenStandard.ERC20: "erc-20.json",
            TokenStandard.ERC721: "erc-721.json",
            TokenStandard.ERC1155: "erc-1155.json",
        }[self]


class StartingPointKind(str, Enum):
    """Kinds of starting-point override accepted on the command line / env."""
    CURSOR = "CURSOR"
    CONTRACT_ID = "CONTRACT_ID"
    EVM_ADDRESS = "EVM_ADDRESS"


class StopReason(str, Enum):
    """Why a run loop stopped."""
    END_OF_DATA = "END_OF_DATA"
    FETCH_FAILED = "FETCH_FAILED"


class ErrorCode(str, Enum):
    """Error codes carried by IndexerError and its subclasses."""
    # Configuration
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Infrastructure
    INFRA_HTTP_ERROR = "INFRA_HTTP_ERROR"
    INFRA_RATE_LIMIT = "INFRA_RATE_LIMIT"
    INFRA_TIMEOUT = "INFRA_TIMEOUT"

    # Classification
    BYTECODE_MISSING = "BYTECODE_MISSING"
    DECODE_FAILED = "DECODE_FAILED"

    # Orchestration
    STARTING_POINT_UNRESOLVED = "STARTING_POINT_UNRESOLVED"

    # Storage
    REGISTRY_IO_ERROR = "REGISTRY_IO_ERROR"

    UNKNOWN = "UNKNOWN"
