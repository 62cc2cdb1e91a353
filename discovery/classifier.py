"""
discovery/classifier.py - Bytecode classification into token standards.

Pipeline per contract (each contract in its own failure boundary):
1. Fetch contract detail (bytecode) from the mirror node
2. Pick runtime bytecode, fall back to creation bytecode, skip if neither
3. For every standard: test the signature set against the bytecode
4. On a match: extract token metadata via simulated read calls

Standards are evaluated independently; one contract may land in several
outputs.
"""

import asyncio
from typing import TYPE_CHECKING, Optional, Sequence

from core.constants import ErrorCode, TokenStandard
from core.exceptions import DecodeError
from core.logging import get_logger
from core.models import ClassificationResult, ClassifiedToken, ContractRecord, ReadSelector
from discovery.abi import decode_result
from discovery.matcher import matches_standard
from discovery.signatures import get_read_selectors

if TYPE_CHECKING:
    from chains.mirror_node import MirrorNodeClient

logger = get_logger(__name__)


class BytecodeClassifier:
    """
    Classifies contracts as ERC-20 / ERC-721 / ERC-1155 from bytecode.

    Usage:
        classifier = BytecodeClassifier(client)
        result = await classifier.classify(page.contracts)
    """

    def __init__(
        self,
        client: "MirrorNodeClient",
        standards: Sequence[TokenStandard] = tuple(TokenStandard),
    ):
        self.client = client
        self.standards = tuple(standards)

    async def classify(self, contracts: Sequence[ContractRecord]) -> ClassificationResult:
        """
        Classify a batch of contracts.

        Detail fetches for the batch run concurrently. Output lists keep
        the input order.
        """
        per_contract = await asyncio.gather(
            *(self._classify_contract(contract) for contract in contracts)
        )

        result = ClassificationResult()
        for matches in per_contract:
            for standard, token in matches:
                result.for_standard(standard).append(token)
        return result

    async def _classify_contract(
        self,
        contract: ContractRecord,
    ) -> list[tuple[TokenStandard, ClassifiedToken]]:
        try:
            detail = await self.client.fetch_contract_detail(contract.contract_id)
            if detail is None:
                logger.warning(
                    "Skipping contract: detail unavailable",
                    extra={"context": {"contract_id": contract.contract_id}},
                )
                return []

            bytecode = detail.selected_bytecode
            if bytecode is None:
                logger.warning(
                    "Skipping contract: no bytecode",
                    extra={"context": {
                        "contract_id": contract.contract_id,
                        "error_code": ErrorCode.BYTECODE_MISSING.value,
                    }},
                )
                return []

            matches: list[tuple[TokenStandard, ClassifiedToken]] = []
            for standard in self.standards:
                if not matches_standard(standard, bytecode):
                    continue

                token = await self.extract_token_info(detail, get_read_selectors(standard))
                if token is None:
                    continue

                logger.debug(
                    f"Detected {standard.value}",
                    extra={"context": {"contract_id": detail.contract_id}},
                )
                matches.append((standard, token))

            return matches

        except Exception as e:
            logger.warning(
                f"Skipping contract after unexpected error: {e}",
                extra={"context": {"contract_id": contract.contract_id}},
                exc_info=True,
            )
            return []

    async def extract_token_info(
        self,
        contract: ContractRecord,
        selectors: Sequence[ReadSelector],
    ) -> Optional[ClassifiedToken]:
        """
        Read token metadata with concurrent simulated calls.

        Args:
            contract: Contract (with EVM address) to call
            selectors: Read selectors for the matched standard

        Returns:
            ClassifiedToken; fields whose call failed are None.
            None if any returned value failed to decode.
        """
        results = await asyncio.gather(
            *(self.client.simulate_call(contract.evm_address, s.selector) for s in selectors)
        )

        fields: dict[str, object] = {}
        try:
            for selector, raw in zip(selectors, results):
                fields[selector.field] = None if raw is None else decode_result(selector.type, raw)
        except DecodeError as e:
            logger.warning(
                f"Dropping token record: {e.message}",
                extra={"context": {
                    "contract_id": contract.contract_id,
                    "error_code": e.code.value,
                    **e.details,
                }},
            )
            return None

        return ClassifiedToken(
            contract_id=contract.contract_id,
            address=contract.evm_address,
            fields=fields,
        )
