"""
discovery/abi.py - ABI decoding of read-call results.

Supported scalar types:
- string  -> str
- uint8   -> int
- uint256 -> int (exact, no precision loss)
"""

from typing import Any

from eth_abi import decode as abi_decode

from core.exceptions import DecodeError

SUPPORTED_TYPES = frozenset({"string", "uint8", "uint256"})


def hex_to_bytes(hex_result: str) -> bytes:
    data = hex_result[2:] if hex_result.startswith("0x") else hex_result
    try:
        return bytes.fromhex(data)
    except ValueError as e:
        raise DecodeError(
            f"Result is not valid hex: {e}",
            details={"raw": hex_result[:100]},
        ) from e


def decode_result(abi_type: str, hex_result: str) -> Any:
    """
    Decode a single ABI-encoded return value.

    Args:
        abi_type: One of SUPPORTED_TYPES
        hex_result: 0x-prefixed call result

    Returns:
        Decoded value (str for string, int for uints)

    Raises:
        DecodeError: unsupported type or malformed data
    """
    if abi_type not in SUPPORTED_TYPES:
        raise DecodeError(f"Unsupported ABI type: {abi_type}")

    data = hex_to_bytes(hex_result)
    try:
        (value,) = abi_decode([abi_type], data)
    except Exception as e:
        # eth_abi raises several unrelated types (DecodingError, InsufficientDataBytes, ...)
        raise DecodeError(
            f"Cannot decode {abi_type}: {e}",
            details={"abi_type": abi_type, "raw": hex_result[:100]},
        ) from e

    if abi_type == "string":
        return str(value)
    return int(value)
