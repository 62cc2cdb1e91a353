"""
chains/ - Network interaction layer.

Modules:
- mirror_node: Mirror node REST + web3 client with rate-limit retry
"""

from chains.mirror_node import (
    EndpointStats,
    MirrorNodeClient,
)

__all__ = [
    "EndpointStats",
    "MirrorNodeClient",
]
