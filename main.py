import argparse
import json
import logging
import sys

from database.database_config import BenchmarkConfig, DatabaseConfig
from database.exceptions import DatabaseConnectionError
from database.postgresql_manager import PostgreSQLManager
from measurements.report import ReportRenderer
from measurements.runner import MeasurementRunner
from utils.logger import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compare audience count latency of the EAV and the optimized schema."
    )
    db = parser.add_argument_group("database (defaults from PG_DB_* environment variables)")
    db.add_argument("--host", dest="PG_DB_HOST")
    db.add_argument("--port", dest="PG_DB_PORT", type=int)
    db.add_argument("--user", dest="PG_DB_USER")
    db.add_argument("--dbname", dest="PG_DB_NAME")

    bench = parser.add_argument_group("benchmark (defaults from BENCH_* environment variables)")
    bench.add_argument("--target-users", dest="TARGET_USERS", type=int)
    bench.add_argument("--budget", dest="LATENCY_BUDGET_SECONDS", type=float,
                       help="latency budget in seconds")
    bench.add_argument("--samples", dest="SAMPLES", type=int,
                       help="timed runs per query, the median is reported")
    bench.add_argument("--warmup", dest="WARMUP_RUNS", type=int)
    bench.add_argument("--statement-timeout", dest="STATEMENT_TIMEOUT_SECONDS", type=float,
                       help="per-query deadline in seconds")

    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-dir", help="also write a rotating log file here")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace, names) -> dict:
    return {
        name: getattr(args, name)
        for name in names
        if getattr(args, name, None) is not None
    }


def build_configs(args: argparse.Namespace):
    db_config = DatabaseConfig(
        **_overrides(args, ("PG_DB_HOST", "PG_DB_PORT", "PG_DB_USER", "PG_DB_NAME"))
    )
    bench_config = BenchmarkConfig(
        **_overrides(
            args,
            (
                "TARGET_USERS",
                "LATENCY_BUDGET_SECONDS",
                "SAMPLES",
                "WARMUP_RUNS",
                "STATEMENT_TIMEOUT_SECONDS",
            ),
        )
    )
    return db_config, bench_config


def main(argv=None) -> int:
    """Main execution function."""
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_dir)

    try:
        db_config, bench_config = build_configs(args)
        db_manager = PostgreSQLManager(db_config)
        runner = MeasurementRunner(db_manager, bench_config)
    except ValueError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 2

    try:
        db_manager.connect()
    except DatabaseConnectionError as e:
        logger.critical(f"Failed to connect to database: {e}")
        return 1

    try:
        report = runner.run()
    finally:
        db_manager.dispose()

    if args.json:
        print(json.dumps(runner.generate_report(report), indent=2))
    else:
        ReportRenderer(sys.stdout).render(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
