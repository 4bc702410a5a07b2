"""Database health service for connectivity and schema presence checks."""

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from audit_pipeline.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Health service that verifies connectivity and the audit job table."""

    def __init__(self, engine: Engine):
        """Initialize database health service.

        Args:
            engine: SQLAlchemy engine used for connectivity checks.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_connection_label(self) -> str:
        """Return the target database URL with the password masked."""

        return self._engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """Run a lightweight read against the audit job table.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when the database or the schema is unreachable.
        """

        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT job_id FROM audit_job LIMIT 1")).first()
        except SQLAlchemyError as error:
            raise ConnectionError("audit job store check failed") from error
        return HealthStatus(status="ok", detail="audit job store reachable")
