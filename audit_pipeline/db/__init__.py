"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	AuditJobRecord,
	AuditJobStorePort,
	DatabaseHealthPort,
	JobStoreUnavailableError,
	ReferenceDataSourcePort,
	ReferenceRecord,
	SegmentResultRecord,
	SegmentResultStorePort,
)
from .job_store import SQLAlchemyAuditJobStore
from .reference_data import SQLAlchemyDemographicsReferenceSource
from .segment_results import SQLAlchemySegmentResultStore
from .session import db_create_engine

__all__ = [
	"AuditJobRecord",
	"AuditJobStorePort",
	"DatabaseHealthPort",
	"JobStoreUnavailableError",
	"ReferenceDataSourcePort",
	"ReferenceRecord",
	"SegmentResultRecord",
	"SegmentResultStorePort",
	"SQLAlchemyAuditJobStore",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyDemographicsReferenceSource",
	"SQLAlchemySegmentResultStore",
	"db_create_engine",
]
