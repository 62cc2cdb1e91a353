"""
discovery/ - Token detection and registry.

Modules:
- signatures: Per-standard bytecode signatures and read selectors
- matcher: Aho-Corasick signature matching
- abi: Read-call result decoding
- classifier: Contract classification + metadata extraction
- registry: On-disk token registry and cursor
"""

from discovery.classifier import BytecodeClassifier
from discovery.matcher import SignatureMatcher, matches_standard
from discovery.registry import TokenRegistryStore, merge_entries

__all__ = [
    "BytecodeClassifier",
    "SignatureMatcher",
    "TokenRegistryStore",
    "matches_standard",
    "merge_entries",
]
