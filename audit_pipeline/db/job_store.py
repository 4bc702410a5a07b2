"""Database service for audit job point reads and per-column status writes."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from audit_pipeline.domain import (
    SEGMENT_DEFINITIONS,
    OverallStatus,
    SegmentStatus,
    domain_get_segment_definition,
    domain_parse_overall_status,
    domain_parse_segment_status,
)

from .interfaces import AuditJobRecord, AuditJobStorePort, JobStoreUnavailableError


class SQLAlchemyAuditJobStore(AuditJobStorePort):
    """SQLAlchemy-backed audit job store.

    Status writes target exactly one column per call. Segment columns come from
    the static segment catalogue and are never taken from caller input.
    """

    def __init__(self, engine: Engine):
        """Initialize audit job persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine
        self._status_columns = {name: definition.status_column for name, definition in SEGMENT_DEFINITIONS.items()}

    def db_job_get_by_id(self, job_id: str) -> AuditJobRecord | None:
        """Fetch one audit job by id.

        Args:
            job_id: Job identifier.

        Returns:
            AuditJobRecord | None: Matching job or None.

        Raises:
            ValueError: Raised when job_id is blank.
            JobStoreUnavailableError: Raised when database read fails.
        """

        normalized_job_id = self._validate_non_empty_text(job_id, "job_id")
        status_columns_sql = ", ".join(self._status_columns.values())

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        "SELECT job_id, location_key, business_name, website, services, created_at_utc, "
                        f"{status_columns_sql}, overall_status "
                        "FROM audit_job "
                        "WHERE job_id = :job_id"
                    ),
                    {"job_id": normalized_job_id},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError("failed to fetch audit job by id") from error

        if row is None:
            return None
        return self._map_audit_job_record(row)

    def db_job_update_segment_status(self, job_id: str, segment_name: str, status: SegmentStatus) -> bool:
        """Write one segment status column and bump the row update timestamp.

        Args:
            job_id: Job identifier.
            segment_name: Segment owning the column.
            status: New segment status.

        Returns:
            bool: True when a row was updated.

        Raises:
            LookupError: Raised when the segment is unknown.
            JobStoreUnavailableError: Raised when database write fails.
        """

        normalized_job_id = self._validate_non_empty_text(job_id, "job_id")
        status_column = domain_get_segment_definition(segment_name).status_column

        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    text(
                        f"UPDATE audit_job SET {status_column} = :status, updated_at_utc = CURRENT_TIMESTAMP "
                        "WHERE job_id = :job_id"
                    ),
                    {"status": SegmentStatus(status).value, "job_id": normalized_job_id},
                )
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError(f"failed to update {status_column}") from error
        return result.rowcount > 0

    def db_job_update_overall_status(self, job_id: str, status: OverallStatus) -> bool:
        """Write the overall status column.

        Args:
            job_id: Job identifier.
            status: New overall status.

        Returns:
            bool: True when a row was updated.

        Raises:
            JobStoreUnavailableError: Raised when database write fails.
        """

        normalized_job_id = self._validate_non_empty_text(job_id, "job_id")

        try:
            with self._engine.begin() as connection:
                result = connection.execute(
                    text(
                        "UPDATE audit_job SET overall_status = :status, updated_at_utc = CURRENT_TIMESTAMP "
                        "WHERE job_id = :job_id"
                    ),
                    {"status": OverallStatus(status).value, "job_id": normalized_job_id},
                )
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError("failed to update overall_status") from error
        return result.rowcount > 0

    def _map_audit_job_record(self, row: Any) -> AuditJobRecord:
        """Map SQLAlchemy row mapping to typed audit job record.

        Args:
            row: SQLAlchemy mapping row.

        Returns:
            AuditJobRecord: Typed job record.

        Raises:
            ValueError: Raised when a stored status is not a known value.
        """

        return AuditJobRecord(
            job_id=row["job_id"],
            location_key=row["location_key"],
            business_name=row["business_name"],
            website=row["website"],
            services=self._parse_services(row["services"]),
            created_at_utc=row["created_at_utc"],
            segment_status={
                segment_name: domain_parse_segment_status(row[status_column])
                for segment_name, status_column in self._status_columns.items()
            },
            overall_status=domain_parse_overall_status(row["overall_status"]),
        )

    def _parse_services(self, raw_services: Any) -> tuple[str, ...]:
        """Parse the stored service selection into a tuple of strings.

        The column holds a JSON array, a JSON scalar, or plain text.

        Args:
            raw_services: Raw column value.

        Returns:
            tuple[str, ...]: Service names, empty when nothing is stored.
        """

        if raw_services is None:
            return ()
        if isinstance(raw_services, (list, tuple)):
            return tuple(str(service) for service in raw_services)

        raw_text = str(raw_services).strip()
        if not raw_text:
            return ()
        try:
            parsed_value = json.loads(raw_text)
        except json.JSONDecodeError:
            return (raw_text,)
        if isinstance(parsed_value, list):
            return tuple(str(service) for service in parsed_value)
        if parsed_value in (None, ""):
            return ()
        return (str(parsed_value),)

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        """Validate required text input and return stripped value.

        Args:
            value: Candidate string value.
            field_name: Field name for error reporting.

        Returns:
            str: Stripped non-empty value.

        Raises:
            ValueError: Raised when value is blank.
        """

        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
