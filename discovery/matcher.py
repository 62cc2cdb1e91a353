"""
discovery/matcher.py - Multi-pattern signature matching over bytecode.

One Aho-Corasick automaton per signature set, built once and reused.
A single linear scan of the bytecode collects every required signature
that occurs; the match is conjunctive (all present), independent of
position, order and occurrence count.
"""

from functools import lru_cache
from typing import Iterable

import ahocorasick

from core.constants import TokenStandard
from discovery.signatures import get_signatures


class SignatureMatcher:
    """
    Aho-Corasick matcher for a fixed set of hex signatures.

    Usage:
        matcher = SignatureMatcher(["a9059cbb", "23b872dd"])
        matcher.matches(bytecode)  # True only if both occur
    """

    def __init__(self, signatures: Iterable[str]):
        self.signatures = frozenset(s.lower() for s in signatures)
        self._automaton = ahocorasick.Automaton()
        for signature in self.signatures:
            self._automaton.add_word(signature, signature)
        if self.signatures:
            self._automaton.make_automaton()

    def find(self, bytecode: str) -> set[str]:
        """Return the required signatures that occur in the bytecode."""
        if not self.signatures or not bytecode:
            return set()

        found: set[str] = set()
        for _, signature in self._automaton.iter(bytecode.lower()):
            found.add(signature)
            if len(found) == len(self.signatures):
                break
        return found

    def missing(self, bytecode: str) -> set[str]:
        return set(self.signatures) - self.find(bytecode)

    def matches(self, bytecode: str) -> bool:
        """True iff every signature occurs at least once."""
        return len(self.find(bytecode)) == len(self.signatures)


@lru_cache(maxsize=None)
def get_matcher(standard: TokenStandard) -> SignatureMatcher:
    """Cached matcher for a token standard."""
    return SignatureMatcher(get_signatures(standard))


def matches_standard(standard: TokenStandard, bytecode: str) -> bool:
    """True iff the bytecode contains every signature of the standard."""
    return get_matcher(standard).matches(bytecode)
