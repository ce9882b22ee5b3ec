"""
Ingestion Service
Fetch, classify and persist pipeline for articles and tips:
1. Pull candidates from every source adapter, per category
2. Bind and validate each candidate's category
3. Upsert each accepted candidate into the content store

Every (category, source) pair is an independent unit of work. A failing unit,
or a failing record inside a unit, is reported and never ends the run.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ..categories import Category
from .classifier import ContentClassifier
from .sources.base import SourceAdapter
from .sources.devto_adapter import DevToScraperAdapter
from .sources.newsapi_adapter import NewsApiAdapter
from ...config import get_settings
from ...core.database import create_db_engine, create_session_factory, create_tables, verify_connection
from ...core.events import IngestionEventSink, NullEventSink, StructlogEventSink
from ...core.logging import configure_logging
from ...exceptions import ClassificationSkip, TechNewsError
from ...repositories.content_repository import ContentRepository

logger = structlog.get_logger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class UnitStage(str, Enum):
    FETCHING = "fetching_sources"
    CLASSIFYING = "classifying"
    PERSISTING = "persisting"
    DONE = "done"


@dataclass
class UnitResult:
    category: str
    source: str
    fetched: int = 0
    persisted: int = 0
    skipped: int = 0
    failed_records: int = 0
    stage: UnitStage = UnitStage.FETCHING
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class IngestionReport:
    run_id: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    units: List[UnitResult] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def totals(self) -> Dict[str, int]:
        return {
            "units": len(self.units),
            "failed_units": sum(1 for unit in self.units if not unit.succeeded),
            "fetched": sum(unit.fetched for unit in self.units),
            "persisted": sum(unit.persisted for unit in self.units),
            "skipped": sum(unit.skipped for unit in self.units),
            "failed_records": sum(unit.failed_records for unit in self.units),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "trigger": self.trigger,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": round(self.duration_seconds, 3),
            **self.totals(),
        }


class IngestionOrchestrator:
    """Drives one ingestion run across all categories and sources"""

    def __init__(
        self,
        repository: ContentRepository,
        adapters: Sequence[SourceAdapter],
        classifier: Optional[ContentClassifier] = None,
        events: Optional[IngestionEventSink] = None,
        categories: Sequence[Category] = tuple(Category),
        source_timeout_seconds: Optional[float] = 120.0,
    ):
        self.repository = repository
        self.adapters = list(adapters)
        self.classifier = classifier or ContentClassifier()
        self.events = events or NullEventSink()
        self.categories = list(categories)
        self.source_timeout_seconds = source_timeout_seconds
        self._active_runs = 0

    @property
    def state(self) -> RunState:
        return RunState.RUNNING if self._active_runs else RunState.IDLE

    async def run(self, trigger: str = "manual") -> IngestionReport:
        """
        Run every (category, source) unit concurrently. Overlapping runs are
        allowed; the store's unique key keeps them from duplicating rows.
        """
        report = IngestionReport(
            run_id=uuid.uuid4().hex[:12],
            trigger=trigger,
            started_at=datetime.now(timezone.utc),
        )
        self._active_runs += 1
        self._emit("run_started", report.run_id, trigger)

        try:
            units = [
                self._run_unit(report.run_id, category, adapter)
                for category in self.categories
                for adapter in self.adapters
            ]
            report.units = list(await asyncio.gather(*units))
        finally:
            self._active_runs -= 1
            report.finished_at = datetime.now(timezone.utc)

        self._emit("run_completed", report.run_id, report)
        return report

    async def _run_unit(self, run_id: str, category: Category, adapter: SourceAdapter) -> UnitResult:
        result = UnitResult(category=category.value, source=adapter.name)
        try:
            await asyncio.wait_for(
                self._ingest(run_id, category, adapter, result),
                timeout=self.source_timeout_seconds,
            )
        except asyncio.TimeoutError:
            result.error = f"timed out after {self.source_timeout_seconds}s while {result.stage.value}"
        except Exception as e:
            result.error = str(e) or e.__class__.__name__

        if result.error is not None:
            self._emit("source_failed", run_id, result.category, result.source, result.error)
        else:
            result.stage = UnitStage.DONE
            self._emit(
                "source_succeeded", run_id, result.category, result.source,
                result.fetched, result.persisted, result.skipped,
            )
        return result

    async def _ingest(self, run_id: str, category: Category, adapter: SourceAdapter, result: UnitResult) -> None:
        loop = asyncio.get_running_loop()
        async for candidate in adapter.fetch(category):
            result.fetched += 1

            result.stage = UnitStage.CLASSIFYING
            try:
                candidate = self.classifier.classify(candidate, category)
            except ClassificationSkip as e:
                result.skipped += 1
                logger.debug("Candidate skipped", source=adapter.name, category=category.value, title=candidate.title, reason=str(e))
                result.stage = UnitStage.FETCHING
                continue

            result.stage = UnitStage.PERSISTING
            try:
                # Store calls block; run them off the loop so other units and the timeout keep running
                record = candidate.to_record()
                await loop.run_in_executor(None, lambda: self.repository.upsert(adapter.entity_kind, record))
                result.persisted += 1
            except TechNewsError as e:
                result.failed_records += 1
                self._emit("record_failed", run_id, category.value, adapter.name, candidate.title, str(e))
            result.stage = UnitStage.FETCHING

    def _emit(self, event: str, *args) -> None:
        try:
            getattr(self.events, event)(*args)
        except Exception as e:
            logger.warning("Event sink failed", sink_event=event, error=str(e))


def build_default_adapters(settings) -> List[SourceAdapter]:
    return [
        DevToScraperAdapter(
            base_url=settings.scraper_base_url,
            user_agent=settings.scraper_user_agent,
            timeout=settings.request_timeout_seconds,
        ),
        NewsApiAdapter(
            api_key=settings.news_api_key,
            endpoint=settings.news_api_url,
            timeout=settings.request_timeout_seconds,
        ),
    ]


def build_orchestrator(settings, repository: ContentRepository, events: Optional[IngestionEventSink] = None) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        repository=repository,
        adapters=build_default_adapters(settings),
        classifier=ContentClassifier(keyword_filter_enabled=settings.tech_keyword_filter_enabled),
        events=events or StructlogEventSink(),
        source_timeout_seconds=settings.source_timeout_seconds,
    )


# Main function for cron job execution
async def run_ingestion_job(trigger: str = "cron") -> IngestionReport:
    """
    Build the default stack from settings and run one ingestion pass.
    Intended for external schedulers that do not run the API process.
    """
    settings = get_settings()
    configure_logging(settings)

    engine = create_db_engine(settings.database_url)
    verify_connection(engine)
    create_tables(engine)

    try:
        orchestrator = build_orchestrator(settings, ContentRepository(create_session_factory(engine)))
        return await orchestrator.run(trigger=trigger)
    finally:
        engine.dispose()


if __name__ == "__main__":
    asyncio.run(run_ingestion_job())
