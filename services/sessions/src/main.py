"""Session metrics batch job entrypoint.

Configuration comes from the environment, e.g.

    REPORT_YEAR=2015 REPORT_MONTH=3 REPORT_DAY=1 REPORT_PERIOD_DAYS=30 \
    REPORT_OUTPUT_DIR=/tmp/mobile-sessions python -m src.main
"""

import sys

from pydantic import ValidationError
from shared.metrics import export_textfile
from src.core.config import Settings, get_settings
from src.core.errors import SessionMetricsError
from src.core.job_coordinator import JobCoordinator
from src.core.logger import get_logger
from src.core.logging_config import configure_logging
from src.core.metrics import RUN_FAILURES
from src.core.schemas.report import ReportWindow

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_CONFIG = 2


def build_window(config: Settings) -> ReportWindow:
    if None in (config.report_year, config.report_month, config.report_day):
        raise ValueError("REPORT_YEAR, REPORT_MONTH and REPORT_DAY must be set")
    return ReportWindow(
        year=config.report_year,
        month=config.report_month,
        day=config.report_day,
        period_days=config.report_period_days,
    )


def main(config: Settings | None = None) -> int:
    logger = get_logger("main")
    try:
        config = config or get_settings()
        window = build_window(config)
    except (ValidationError, ValueError) as exc:
        logger.error("invalid_configuration", extra={"error": str(exc)})
        return EXIT_BAD_CONFIG

    configure_logging(run_labels={"report_range": window.date_range_label}, config=config)
    logger.info("Starting session metrics job")

    status = EXIT_OK
    try:
        JobCoordinator.from_settings(config).execute(window)
    except SessionMetricsError:
        RUN_FAILURES.inc()
        logger.exception("run_failed")
        status = EXIT_FAILED

    if config.metrics_textfile_path:
        export_textfile(config.metrics_textfile_path)
    return status


if __name__ == "__main__":
    sys.exit(main())
