"""AuctionDriver — fan out N settlement units and reduce their outcomes.

Every unit gets its own session and its own RetryPolicy run, and returns a
SettlementOutcome instead of touching shared state. The summary is reduced
once, after all N units have been joined.
"""
import asyncio
import logging
from collections.abc import Callable
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.pa_auction.application.service import AuctionApplicationService
from src.pa_auction.domain.models import AuctionSummary, SettlementOutcome
from src.pa_common.enums import SettlementStatus
from src.pa_common.errors import AppError, InvalidShareCountError
from src.pa_common.retry import RetryPolicy
from src.pa_common.store_errors import is_transient_store_fault
from src.pa_common.tracing import create_span

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[int, SettlementOutcome], None]


class AuctionDriver:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        service: AuctionApplicationService | None = None,
        retry_policy: RetryPolicy | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._service = service or AuctionApplicationService()
        self._retry = retry_policy or RetryPolicy.from_settings(is_transient_store_fault)
        self._max_concurrency = (
            settings.AUCTION_MAX_CONCURRENCY if max_concurrency is None else max_concurrency
        )
        if self._max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self._max_concurrency}")

    async def run(
        self, number_of_shares: int, on_outcome: OutcomeCallback | None = None
    ) -> AuctionSummary:
        """Attempt `number_of_shares` purchases concurrently; returns after all finish.

        `on_outcome(index, outcome)` is called as each unit completes, in
        completion order. An unexpected exception from any unit is re-raised
        only after every other unit has finished.
        """
        if number_of_shares < 0:
            raise InvalidShareCountError(number_of_shares)

        with create_span("auction.run", {"auction.shares": number_of_shares}) as span:
            # Caps in-flight attempts at what the connection pool can serve
            slots = asyncio.Semaphore(self._max_concurrency)

            async def unit(index: int) -> SettlementOutcome:
                outcome = await self._run_unit(index, slots)
                if on_outcome is not None:
                    on_outcome(index, outcome)
                return outcome

            results = await asyncio.gather(
                *(unit(i) for i in range(number_of_shares)), return_exceptions=True
            )
            outcomes = [r for r in results if isinstance(r, SettlementOutcome)]
            crashed = [r for r in results if isinstance(r, BaseException)]
            summary = AuctionSummary.from_outcomes(number_of_shares, outcomes)
            span.set_attribute("auction.purchased", summary.purchased)
            span.set_attribute("auction.failed", summary.failed)

            logger.info(
                "Auction finished: %d/%d purchased, failures by status %s",
                summary.purchased, summary.requested, summary.by_status,
            )
            if crashed:
                logger.error("%d auction unit(s) raised unexpectedly", len(crashed))
                raise crashed[0]
        return summary

    async def _run_unit(self, index: int, slots: asyncio.Semaphore) -> SettlementOutcome:
        try:
            return await self._retry.run(partial(self._attempt, slots))
        except AppError as e:
            logger.warning("Auction run attempt %d failed with an exception: %s", index, e.message)
            return SettlementOutcome(status=SettlementStatus.ERROR, error=e.message)

    async def _attempt(self, slots: asyncio.Semaphore) -> SettlementOutcome:
        # Slot and session are per attempt; retry backoff holds neither
        async with slots, self._session_factory() as db:
            return await self._service.settle_random(db)
