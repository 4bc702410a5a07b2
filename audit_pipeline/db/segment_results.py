"""Database service for per-segment result rows with single-statement UPSERT."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from audit_pipeline.domain import SegmentDefinition, SegmentStatus, domain_parse_segment_status

from .interfaces import JobStoreUnavailableError, SegmentResultRecord, SegmentResultStorePort


class SQLAlchemySegmentResultStore(SegmentResultStorePort):
    """SQLAlchemy implementation of one segment's result table.

    Table and column names come from the static segment definition. Rows are
    written with `INSERT ... ON CONFLICT (job_id) DO UPDATE`, so a keyed row is
    never absent between two writes.
    """

    def __init__(self, engine: Engine, definition: SegmentDefinition):
        """Initialize segment result persistence service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.
            definition: Segment whose result table this service owns.

        Raises:
            ValueError: Raised when engine or definition is invalid.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        if definition is None:
            raise ValueError("definition must not be None")

        self._engine = engine
        self._definition = definition
        self._select_sql = self._build_select_sql()
        self._upsert_sql = self._build_upsert_sql()

    def db_segment_result_get_by_job_id(self, job_id: str) -> SegmentResultRecord | None:
        """Fetch the result row for one job.

        Args:
            job_id: Job identifier.

        Returns:
            SegmentResultRecord | None: Stored row or None.

        Raises:
            JobStoreUnavailableError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(text(self._select_sql), {"job_id": job_id.strip()}).mappings().first()
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError(f"{self._definition.result_table} read failed") from error

        if row is None:
            return None
        return SegmentResultRecord(
            job_id=row["job_id"],
            business_name=row["business_name"],
            timestamp_utc=row["timestamp_utc"],
            fields={field_name: row[field_name] for field_name in self._definition.field_names},
            status=domain_parse_segment_status(row["status"]),
        )

    def db_segment_result_upsert(self, record: SegmentResultRecord) -> None:
        """UPSERT one result row keyed by job id.

        Args:
            record: Full row payload.

        Returns:
            None: Row upsert is persisted as a side effect.

        Raises:
            ValueError: Raised when the payload field set does not match the segment.
            JobStoreUnavailableError: Raised when persistence operation fails.
        """

        parameters = self._build_upsert_parameters(record)

        try:
            with self._engine.begin() as connection:
                connection.execute(text(self._upsert_sql), parameters)
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError(f"{self._definition.result_table} upsert failed") from error

    def _build_upsert_parameters(self, record: SegmentResultRecord) -> dict[str, Any]:
        """Validate one upsert payload and flatten it to bind parameters.

        Args:
            record: Upsert payload.

        Returns:
            dict[str, Any]: Named bind parameters.

        Raises:
            ValueError: Raised when job id is blank or fields do not match the segment.
        """

        normalized_job_id = record.job_id.strip()
        if not normalized_job_id:
            raise ValueError("job_id must not be blank")

        unexpected_fields = set(record.fields) - set(self._definition.field_names)
        if unexpected_fields:
            raise ValueError(f"unexpected fields for {self._definition.name}: {sorted(unexpected_fields)}")

        parameters: dict[str, Any] = {
            "job_id": normalized_job_id,
            "business_name": record.business_name,
            "timestamp_utc": record.timestamp_utc,
            "status": SegmentStatus(record.status).value,
        }
        for field_name in self._definition.field_names:
            parameters[field_name] = record.fields.get(field_name)
        return parameters

    def _build_select_sql(self) -> str:
        column_sql = ", ".join(self._definition.field_names)
        return (
            f"SELECT job_id, business_name, timestamp_utc, {column_sql}, status "
            f"FROM {self._definition.result_table} "
            "WHERE job_id = :job_id"
        )

    def _build_upsert_sql(self) -> str:
        column_names = ("job_id", "business_name", "timestamp_utc", *self._definition.field_names, "status")
        insert_columns_sql = ", ".join(column_names)
        insert_values_sql = ", ".join(f":{column_name}" for column_name in column_names)
        update_sql = ", ".join(
            f"{column_name} = EXCLUDED.{column_name}" for column_name in column_names if column_name != "job_id"
        )
        return (
            f"INSERT INTO {self._definition.result_table} ({insert_columns_sql}) "
            f"VALUES ({insert_values_sql}) "
            f"ON CONFLICT (job_id) DO UPDATE SET {update_sql}"
        )
