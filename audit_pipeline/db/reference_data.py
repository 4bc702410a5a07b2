"""Read-only database service for demographics reference metrics."""

from __future__ import annotations

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from audit_pipeline.domain import DEMOGRAPHICS_DEFINITION

from .interfaces import JobStoreUnavailableError, ReferenceDataSourcePort, ReferenceRecord


class SQLAlchemyDemographicsReferenceSource(ReferenceDataSourcePort):
    """Point lookups against the `demographics_reference` table by location."""

    def __init__(self, engine: Engine):
        """Initialize reference data source.

        Args:
            engine: SQLAlchemy engine used for reads.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_reference_get_by_location(self, location_key: str) -> ReferenceRecord | None:
        """Fetch the demographics metrics of one location.

        Values are returned raw; coercion belongs to the segment processor.

        Args:
            location_key: Business location key.

        Returns:
            ReferenceRecord | None: Matching record or None.

        Raises:
            JobStoreUnavailableError: Raised when database read fails.
        """

        normalized_location_key = location_key.strip()
        if not normalized_location_key:
            return None

        column_sql = ", ".join(DEMOGRAPHICS_DEFINITION.field_names)
        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(
                        f"SELECT location_key, {column_sql} "
                        "FROM demographics_reference "
                        "WHERE location_key = :location_key "
                        "LIMIT 1"
                    ),
                    {"location_key": normalized_location_key},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise JobStoreUnavailableError("demographics reference read failed") from error

        if row is None:
            return None
        return ReferenceRecord(
            location_key=row["location_key"],
            values={field_name: row[field_name] for field_name in DEMOGRAPHICS_DEFINITION.field_names},
        )
