"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from audit_pipeline.domain import HealthStatus, OverallStatus, SegmentStatus


class JobStoreUnavailableError(RuntimeError):
    """Raised when a store operation fails at the infrastructure level.

    Callers treat this as transient: the whole segment is re-attempted on the
    next channel delivery.
    """


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


@dataclass(frozen=True)
class AuditJobRecord:
    """Persistence model for one audit job row.

    Attributes:
        job_id: Opaque immutable job identifier.
        location_key: Business key used for reference data lookups.
        business_name: Immutable business name captured at creation.
        website: Immutable business website captured at creation.
        services: Service selection captured at creation.
        created_at_utc: Job creation timestamp.
        segment_status: Status of every known segment; missing columns read as `queued`.
        overall_status: Aggregated job status, or None before the first aggregation.
    """

    job_id: str
    location_key: str | None
    business_name: str | None
    website: str | None
    services: tuple[str, ...]
    created_at_utc: datetime | None
    segment_status: dict[str, SegmentStatus]
    overall_status: OverallStatus | None


@dataclass(frozen=True)
class SegmentResultRecord:
    """Persistence model and upsert payload for one segment result row.

    Attributes:
        job_id: Unique job key of the row.
        business_name: Business name recovered from the job.
        timestamp_utc: Job creation timestamp the result belongs to.
        fields: Coerced value for every field of the segment's fixed field set.
        status: Completeness classification mirrored from the segment status.
    """

    job_id: str
    business_name: str | None
    timestamp_utc: datetime | None
    fields: dict[str, Any]
    status: SegmentStatus


@dataclass(frozen=True)
class ReferenceRecord:
    """Read-only reference metrics for one location.

    Attributes:
        location_key: Business key of the record.
        values: Raw metric values keyed by column name.
    """

    location_key: str
    values: dict[str, Any]


class AuditJobStorePort(Protocol):
    """Port definition for audit job point reads and targeted status writes."""

    def db_job_get_by_id(self, job_id: str) -> AuditJobRecord | None:
        """Fetch one job by identifier.

        Args:
            job_id: Job identifier.

        Returns:
            AuditJobRecord | None: Matching job, or None when absent.

        Raises:
            JobStoreUnavailableError: Raised when the read fails.
        """

    def db_job_update_segment_status(self, job_id: str, segment_name: str, status: SegmentStatus) -> bool:
        """Write one segment status column.

        Args:
            job_id: Job identifier.
            segment_name: Segment owning the column.
            status: New segment status.

        Returns:
            bool: True when a job row was updated.

        Raises:
            LookupError: Raised when the segment is unknown.
            JobStoreUnavailableError: Raised when the write fails.
        """

    def db_job_update_overall_status(self, job_id: str, status: OverallStatus) -> bool:
        """Write the overall status column.

        Args:
            job_id: Job identifier.
            status: New overall status.

        Returns:
            bool: True when a job row was updated.

        Raises:
            JobStoreUnavailableError: Raised when the write fails.
        """


class SegmentResultStorePort(Protocol):
    """Port definition for one segment's result rows keyed by job id."""

    def db_segment_result_get_by_job_id(self, job_id: str) -> SegmentResultRecord | None:
        """Fetch the result row of one job.

        Args:
            job_id: Job identifier.

        Returns:
            SegmentResultRecord | None: Stored row, or None when absent.

        Raises:
            JobStoreUnavailableError: Raised when the read fails.
        """

    def db_segment_result_upsert(self, record: SegmentResultRecord) -> None:
        """Insert or update the result row of one job in a single statement.

        Args:
            record: Full row payload.

        Returns:
            None: Row is persisted as a side effect.

        Raises:
            ValueError: Raised when the payload does not match the segment field set.
            JobStoreUnavailableError: Raised when the write fails.
        """


class ReferenceDataSourcePort(Protocol):
    """Port definition for read-only reference lookups by location."""

    def db_reference_get_by_location(self, location_key: str) -> ReferenceRecord | None:
        """Fetch zero or one reference record for a location.

        Args:
            location_key: Business location key.

        Returns:
            ReferenceRecord | None: Matching record, or None when absent.

        Raises:
            JobStoreUnavailableError: Raised when the read fails.
        """
