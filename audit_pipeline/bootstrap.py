"""Application bootstrap wiring for startup validation and dependency assembly."""

from dataclasses import dataclass

from fastapi import FastAPI

from audit_pipeline.adapters import WebhookAutomationTrigger
from audit_pipeline.api import create_api_application
from audit_pipeline.config import AppSettings, SegmentEngineConfig, config_load_settings
from audit_pipeline.db import (
    SQLAlchemyAuditJobStore,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyDemographicsReferenceSource,
    SQLAlchemySegmentResultStore,
    db_create_engine,
)
from audit_pipeline.domain import DEMOGRAPHICS_DEFINITION, ORGANIC_SEARCH_DEFINITION, OverallStatus
from audit_pipeline.jobs import (
    AutomationSegmentProcessor,
    ReferenceSegmentProcessor,
    SegmentDispatcher,
    StatusAggregator,
)


@dataclass(frozen=True)
class BootstrapComponents:
    """Wired runtime components shared by the HTTP and CLI surfaces.

    Attributes:
        settings: Validated runtime settings.
        db_health_service: Database health service.
        job_store: Audit job store.
        dispatcher: Segment dispatcher holding every registered processor.
        callback_processors: Two-phase processors keyed by stage name.
    """

    settings: AppSettings
    db_health_service: SQLAlchemyDatabaseHealthService
    job_store: SQLAlchemyAuditJobStore
    dispatcher: SegmentDispatcher
    callback_processors: dict[str, AutomationSegmentProcessor]


def bootstrap_create_engine_config(settings: AppSettings) -> SegmentEngineConfig:
    """Map validated settings to the immutable segment engine configuration.

    Args:
        settings: Validated runtime settings.

    Returns:
        SegmentEngineConfig: Configuration passed to the automation trigger and the aggregator.
    """

    return SegmentEngineConfig(
        organic_search_webhook_url=settings.organic_search_webhook_url,
        automation_trigger_timeout_seconds=settings.automation_trigger_timeout_seconds,
        all_queued_overall_status=OverallStatus(settings.aggregation_all_queued_status),
    )


def bootstrap_create_components(settings: AppSettings | None = None) -> BootstrapComponents:
    """Assemble stores, processors and the dispatcher from settings.

    Args:
        settings: Optional pre-validated settings, loaded from the environment when omitted.

    Returns:
        BootstrapComponents: Fully wired runtime components.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine_config = bootstrap_create_engine_config(resolved_settings)
    engine = db_create_engine(database_url=resolved_settings.database_url)

    db_health_service = SQLAlchemyDatabaseHealthService(engine=engine)
    job_store = SQLAlchemyAuditJobStore(engine=engine)
    aggregator = StatusAggregator(job_store=job_store, engine_config=engine_config)

    demographics_processor = ReferenceSegmentProcessor(
        definition=DEMOGRAPHICS_DEFINITION,
        job_store=job_store,
        reference_source=SQLAlchemyDemographicsReferenceSource(engine=engine),
        result_store=SQLAlchemySegmentResultStore(engine=engine, definition=DEMOGRAPHICS_DEFINITION),
        aggregator=aggregator,
    )
    organic_search_processor = AutomationSegmentProcessor(
        definition=ORGANIC_SEARCH_DEFINITION,
        job_store=job_store,
        result_store=SQLAlchemySegmentResultStore(engine=engine, definition=ORGANIC_SEARCH_DEFINITION),
        trigger=WebhookAutomationTrigger.from_engine_config(engine_config),
        aggregator=aggregator,
    )

    return BootstrapComponents(
        settings=resolved_settings,
        db_health_service=db_health_service,
        job_store=job_store,
        dispatcher=SegmentDispatcher(processors=(demographics_processor, organic_search_processor)),
        callback_processors={organic_search_processor.segment_name(): organic_search_processor},
    )


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    components = bootstrap_create_components()
    return create_api_application(
        settings=components.settings,
        db_health_service=components.db_health_service,
        job_store=components.job_store,
        dispatcher=components.dispatcher,
        callback_processors=components.callback_processors,
    )


def bootstrap_create_dispatcher() -> SegmentDispatcher:
    """Build the segment dispatcher for non-HTTP trigger surfaces.

    Returns:
        SegmentDispatcher: Fully wired dispatcher instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    return bootstrap_create_components().dispatcher
