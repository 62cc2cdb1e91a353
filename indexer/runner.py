"""
indexer/runner.py - Fetch -> classify -> persist loop.

State machine:
    FETCH_PAGE -> (None / empty) -> STOP
    FETCH_PAGE -> CLASSIFY_PAGE
               -> UPDATE_REGISTRY (background task, not awaited)
               -> PERSIST_CURSOR(next)
               -> ADVANCE(cursor = next) -> FETCH_PAGE

A page whose links.next is None is the last page.

Registry updates for page N run in the background while page N+1 is
fetched. They are serialized per store and drained before run() returns,
so only an abnormal process exit can lose a page whose cursor already
advanced.
"""

import asyncio
import time
from typing import TYPE_CHECKING, Optional

from core.constants import StopReason
from core.logging import get_logger
from core.models import ClassificationResult, RunStats

if TYPE_CHECKING:
    from chains.mirror_node import MirrorNodeClient
    from discovery.classifier import BytecodeClassifier
    from discovery.registry import TokenRegistryStore

logger = get_logger(__name__)


class IndexerRunner:
    """
    Drives one indexing run over the mirror node contract list.

    Usage:
        runner = IndexerRunner(client, classifier, store)
        stats = await runner.run(start_cursor)
    """

    def __init__(
        self,
        client: "MirrorNodeClient",
        classifier: "BytecodeClassifier",
        store: Optional["TokenRegistryStore"],
        detection_only: bool = False,
    ):
        if store is None and not detection_only:
            raise ValueError("A registry store is required unless detection_only is set")

        self.client = client
        self.classifier = classifier
        self.store = store
        self.detection_only = detection_only
        self.stats = RunStats()
        self._pending: set[asyncio.Task] = set()

    def _schedule_registry_update(self, result: ClassificationResult) -> None:
        task = asyncio.create_task(self.store.update_registry_async(result))
        self._pending.add(task)
        task.add_done_callback(self._on_update_done)

    def _on_update_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Registry update failed: {error}",
                extra={"context": {"error": str(error)}},
                exc_info=error,
            )
            return
        self.stats.registry_updates += len(task.result())

    @property
    def pending_updates(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all background registry updates to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _stop(self, reason: StopReason, cursor: Optional[str]) -> None:
        self.stats.stop_reason = reason
        if reason == StopReason.FETCH_FAILED:
            logger.warning(
                "Stopping: contract page fetch failed",
                extra={"context": {"cursor": cursor, "error": self.client.last_page_error}},
            )
        else:
            logger.info("Stopping: no more contracts", extra={"context": {"cursor": cursor}})

    async def run(self, start_cursor: Optional[str] = None) -> RunStats:
        """
        Run until the contract list is exhausted.

        Args:
            start_cursor: Resolved starting cursor (None = first page)

        Returns:
            RunStats for the run
        """
        started = time.monotonic()
        cursor = start_cursor
        self.stats.last_cursor = cursor

        try:
            while True:
                page = await self.client.fetch_contract_page(cursor)

                if page is None:
                    reason = StopReason.FETCH_FAILED if self.client.last_page_error else StopReason.END_OF_DATA
                    self._stop(reason, cursor)
                    break

                if not page.contracts:
                    self._stop(StopReason.END_OF_DATA, cursor)
                    break

                logger.info(
                    f"Fetched {len(page.contracts)} contracts",
                    extra={"context": {
                        "first": page.contracts[0].contract_id,
                        "last": page.contracts[-1].contract_id,
                        "next": page.next,
                    }},
                )

                result = await self.classifier.classify(page.contracts)
                self.stats.record_page(len(page.contracts), result)

                logger.info(
                    f"Classified page: {result.total} tokens",
                    extra={"context": result.counts()},
                )

                if self.detection_only:
                    logger.info(
                        "Detection only: results not persisted",
                        extra={"context": result.to_dict()},
                    )
                else:
                    if result.total:
                        self._schedule_registry_update(result)
                    self.store.persist_cursor(page.next)

                if page.next is None:
                    self._stop(StopReason.END_OF_DATA, cursor)
                    break

                cursor = page.next
                self.stats.last_cursor = cursor
        finally:
            await self.drain()
            self.stats.elapsed_ms = int((time.monotonic() - started) * 1000)

        logger.info("Run finished", extra={"context": self.stats.to_dict()})
        return self.stats
