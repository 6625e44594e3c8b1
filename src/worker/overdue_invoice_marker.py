"""Overdue Invoice Background Worker

Periodically moves unpaid invoices past their due date to OVERDUE.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import date
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.services.cache_service import create_cache_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.cache_service import CacheService
from src.app.use_cases.invoices import MarkOverdueInvoices, MarkOverdueResultDTO
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class OverdueInvoiceMarkerWorker:
    """
    Background worker for the overdue invoice sweep

    Features:
    - Finds issued, sent and partially paid invoices past their due date
    - Transitions them to overdue through the invoice state machine
    - Can run once or continuously
    - Configurable interval (default: hourly)

    Usage:
        # Run once
        worker = OverdueInvoiceMarkerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = OverdueInvoiceMarkerWorker()
        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        session_factory: Optional[sessionmaker] = None,
        cache: Optional[CacheService] = None,
        batch_size: int = 500,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            session_factory: Use an existing session factory instead of
                creating an engine
            cache: Cache to invalidate for marked invoices
            batch_size: Maximum invoices marked per run
        """
        self.engine = None
        if session_factory is None:
            self.engine = create_async_engine(db_uri or ApplicationConfig.DB_URI, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
        self.async_session_factory = session_factory
        self.cache = cache or create_cache_service(
            ApplicationConfig.CACHE_BACKEND,
            ApplicationConfig.REDIS_URL,
            key_prefix=ApplicationConfig.CACHE_KEY_PREFIX,
        )
        self.batch_size = batch_size

        logger.info("OverdueInvoiceMarkerWorker initialized")

    async def run_once(self, as_of: Optional[date] = None) -> MarkOverdueResultDTO:
        """
        Run the sweep once

        Args:
            as_of: Reference date (defaults to today)

        Returns:
            MarkOverdueResultDTO with the invoices that were marked
        """
        as_of = as_of or utcnow().date()

        if not ApplicationConfig.OVERDUE_SCAN_ENABLED:
            logger.info("Overdue invoice sweep is disabled, skipping")
            return MarkOverdueResultDTO(as_of=as_of, invoices_checked=0, invoices_marked=0, invoice_ids=[])

        async with self.async_session_factory() as session:
            use_case = MarkOverdueInvoices(
                uow=SqlAlchemyUnitOfWork(session, ApplicationConfig.TRANSACTION_TIMEOUT_SECONDS),
                invoice_repo=SqlAlchemyInvoiceRepository(session),
                cache=self.cache,
                batch_size=self.batch_size,
            )

            result = await use_case.execute(as_of)

            if result.is_err():
                logger.error(f"Overdue sweep failed: {result.error.message}")
                raise RuntimeError(f"Overdue sweep failed: {result.error.message}")

            return result.value

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run the sweep continuously at specified interval

        Args:
            interval_seconds: Seconds between runs (default: 1 hour)
        """
        logger.info(f"Starting continuous overdue sweep with {interval_seconds}s interval")

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Overdue sweep complete. "
                    f"Checked {result.invoices_checked} invoices, "
                    f"marked {result.invoices_marked} overdue"
                )
            except Exception as e:
                logger.error(f"Overdue sweep cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("OverdueInvoiceMarkerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.overdue_invoice_marker --once

        # Run once for a given date
        python -m src.worker.overdue_invoice_marker --once --as-of 2024-04-01

        # Run continuously (default: OVERDUE_SCAN_INTERVAL_SECONDS)
        python -m src.worker.overdue_invoice_marker --interval 600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Overdue Invoice Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--as-of", type=date.fromisoformat, default=None,
        help="Reference date in YYYY-MM-DD (default: today, only with --once)"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.OVERDUE_SCAN_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: OVERDUE_SCAN_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = OverdueInvoiceMarkerWorker()

    try:
        if args.once:
            result = await worker.run_once(as_of=args.as_of)
            print(f"Overdue sweep complete as of {result.as_of}:")
            print(f"  Invoices checked: {result.invoices_checked}")
            print(f"  Invoices marked overdue: {result.invoices_marked}")
            if result.invoice_ids:
                print(f"  Invoice IDs: {', '.join(str(i) for i in result.invoice_ids)}")
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
