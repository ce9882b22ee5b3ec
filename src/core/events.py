"""
Ingestion event sinks.

The orchestrator reports progress through an ``IngestionEventSink`` at fixed
points of a run. Sinks only observe; a failing sink never changes the outcome
of a run.
"""

from typing import Protocol, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from ..news.services.ingestion_service import IngestionReport


class IngestionEventSink(Protocol):
    def run_started(self, run_id: str, trigger: str) -> None: ...

    def source_succeeded(
        self, run_id: str, category: str, source: str, fetched: int, persisted: int, skipped: int
    ) -> None: ...

    def source_failed(self, run_id: str, category: str, source: str, error: str) -> None: ...

    def record_failed(self, run_id: str, category: str, source: str, title: str, error: str) -> None: ...

    def run_completed(self, run_id: str, report: "IngestionReport") -> None: ...


class NullEventSink:
    def run_started(self, run_id, trigger):
        pass

    def source_succeeded(self, run_id, category, source, fetched, persisted, skipped):
        pass

    def source_failed(self, run_id, category, source, error):
        pass

    def record_failed(self, run_id, category, source, title, error):
        pass

    def run_completed(self, run_id, report):
        pass


class StructlogEventSink:
    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger("ingestion")

    def run_started(self, run_id: str, trigger: str) -> None:
        self.logger.info("ingestion_run_started", run_id=run_id, trigger=trigger)

    def source_succeeded(
        self, run_id: str, category: str, source: str, fetched: int, persisted: int, skipped: int
    ) -> None:
        self.logger.info(
            "ingestion_source_succeeded",
            run_id=run_id,
            category=category,
            source=source,
            fetched=fetched,
            persisted=persisted,
            skipped=skipped,
        )

    def source_failed(self, run_id: str, category: str, source: str, error: str) -> None:
        self.logger.error(
            "ingestion_source_failed",
            run_id=run_id,
            category=category,
            source=source,
            error=error,
        )

    def record_failed(self, run_id: str, category: str, source: str, title: str, error: str) -> None:
        self.logger.error(
            "ingestion_record_failed",
            run_id=run_id,
            category=category,
            source=source,
            title=title,
            error=error,
        )

    def run_completed(self, run_id: str, report: "IngestionReport") -> None:
        self.logger.info(
            "ingestion_run_completed",
            run_id=run_id,
            trigger=report.trigger,
            duration_seconds=round(report.duration_seconds, 2),
            **report.totals(),
        )
