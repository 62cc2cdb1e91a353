"""
core - Core utilities and models for the ERC indexer.

This package contains:
- models.py: Data models (ContractRecord, ClassifiedToken, RunStats)
- constants.py: Enums and constants
- exceptions.py: Typed exceptions with error codes
- logging.py: Structured JSON logging
"""

from core.constants import (
    ErrorCode,
    StartingPointKind,
    StopReason,
    TokenStandard,
)
from core.exceptions import (
    ConfigError,
    DecodeError,
    IndexerError,
    RegistryError,
    StartingPointError,
)
from core.logging import get_logger, setup_logging
from core.models import (
    ClassificationResult,
    ClassifiedToken,
    ContractPage,
    ContractRecord,
    ReadSelector,
    RunStats,
    contract_id_num,
)

__all__ = [
    # Constants
    "ErrorCode",
    "StartingPointKind",
    "StopReason",
    "TokenStandard",
    # Exceptions
    "ConfigError",
    "DecodeError",
    "IndexerError",
    "RegistryError",
    "StartingPointError",
    # Models
    "ClassificationResult",
    "ClassifiedToken",
    "ContractPage",
    "ContractRecord",
    "ReadSelector",
    "RunStats",
    "contract_id_num",
    # Logging
    "get_logger",
    "setup_logging",
]
