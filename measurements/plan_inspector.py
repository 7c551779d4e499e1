import logging
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.exceptions import PlanInspectionError
from database.postgresql_manager import PostgreSQLManager

logger = logging.getLogger(__name__)


class PlanInspector:
    """Shows how the database executes a query. Output is for humans only."""

    def __init__(self, db_manager: PostgreSQLManager, directive: str = "EXPLAIN ANALYZE"):
        self.db_manager = db_manager
        self.directive = directive

    def explain(self, query: str) -> Iterator[str]:
        """Yield the plan of query line by line.

        Nothing is executed until the first line is requested. Iterating again
        requires calling explain() again, which re-runs the query.
        """
        try:
            with self.db_manager.engine.connect() as conn:
                result = conn.execute(text(f"{self.directive} {query.strip()}"))
                for row in result:
                    # the readable plan text is the last column
                    yield str(row[-1])
        except SQLAlchemyError as e:
            logger.error(f"Error explaining query: {e}")
            raise PlanInspectionError(f"Error explaining query: {e}") from e
