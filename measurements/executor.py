import logging
import math
import statistics
import time
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from database.exceptions import QueryExecutionError
from database.postgresql_manager import PostgreSQLManager
from measurements.base_measurement import Measurement

logger = logging.getLogger(__name__)


class TimedQueryExecutor:
    """Runs single-value COUNT queries and times them."""

    def __init__(
        self,
        db_manager: PostgreSQLManager,
        statement_timeout: Optional[float] = None,
    ):
        self.db_manager = db_manager
        self.statement_timeout = statement_timeout

    def execute(
        self,
        query: str,
        scenario: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> Measurement:
        """Execute query and measure wall-clock time around it.

        The pool checkout and the statement timeout setup happen before the
        timer starts. The elapsed time is returned even when the query fails.
        """
        try:
            with self.db_manager.engine.connect() as conn:
                if self.statement_timeout is not None:
                    conn.execute(
                        text("SELECT set_config('statement_timeout', :timeout, true)"),
                        {"timeout": f"{self._timeout_ms()}ms"},
                    )

                start_time = time.perf_counter()
                try:
                    value = conn.execute(text(query)).scalar_one()
                except SQLAlchemyError as e:
                    duration = time.perf_counter() - start_time
                    return self._failed(f"Query failed: {e}", duration, scenario, variant)
                duration = time.perf_counter() - start_time
        except SQLAlchemyError as e:
            return self._failed(f"Could not prepare query: {e}", 0.0, scenario, variant)

        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return self._failed(
                f"Expected a non-negative count, got {value!r}", duration, scenario, variant
            )

        logger.debug(f"{scenario or 'query'} ({variant or '-'}): {value} in {duration:.6f}s")
        return Measurement(count=value, duration=duration)

    def sample(
        self,
        query: str,
        runs: int = 1,
        warmup: int = 0,
        scenario: Optional[str] = None,
        variant: Optional[str] = None,
    ) -> Measurement:
        """Run a query several times and keep the median duration.

        Warm-up executions are not part of the result unless they fail. Any
        failed run fails the whole sample, as do runs disagreeing on the count.
        """
        if runs < 1:
            raise ValueError("runs must be at least 1")

        for _ in range(warmup):
            measurement = self.execute(query, scenario, variant)
            if not measurement.succeeded:
                return measurement

        measurements = []
        for _ in range(runs):
            measurement = self.execute(query, scenario, variant)
            if not measurement.succeeded:
                return measurement
            measurements.append(measurement)

        counts = {m.count for m in measurements}
        if len(counts) > 1:
            return self._failed(
                f"Runs returned different counts: {sorted(counts)}",
                statistics.median(m.duration for m in measurements),
                scenario,
                variant,
            )

        if runs == 1:
            return measurements[0]
        return Measurement(
            count=measurements[0].count,
            duration=statistics.median(m.duration for m in measurements),
        )

    def _timeout_ms(self) -> int:
        # statement_timeout = 0 disables the deadline, never round down to it
        return max(1, math.ceil(self.statement_timeout * 1000))

    @staticmethod
    def _failed(message, duration, scenario, variant) -> Measurement:
        error = QueryExecutionError(message, scenario=scenario, variant=variant)
        logger.error(str(error))
        return Measurement(count=None, duration=duration, error=error)
