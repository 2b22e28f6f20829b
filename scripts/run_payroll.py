"""Generate (and optionally disburse) payroll for one month from the command line.

    python scripts/run_payroll.py March 2024
    python scripts/run_payroll.py March 2024 --disburse
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.hr_payroll.hr_payroll.common.validators import require_month_year
from src.hr_payroll.hr_payroll.container import build_container
from src.hr_payroll.hr_payroll.core.exceptions import DomainError

logger = logging.getLogger("run_payroll")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("month", help="English month name, e.g. March")
    parser.add_argument("year", help="Four-digit year")
    parser.add_argument("--disburse", action="store_true", help="Pay out Pending/Processed records after generation")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        month, year = require_month_year(args.month, args.year)
    except DomainError as e:
        logger.error("%s", e.message)
        return 2

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=vars(settings))

    created = container.payroll_service.generate_payrolls_for_month_year(month, year)
    logger.info("Generated %d payroll record(s) for %s %s", created, month, year)

    if args.disburse:
        report = container.disbursement_service.disburse_for_period(month, year)
        logger.info("Disbursed %s %s: total=%d paid=%d failed=%d", month, year, report.total, report.paid, report.failed)
        for result in report.results:
            if result.error:
                logger.warning("payroll %s employee %s: %s", result.payroll_id, result.employee_id, result.error)
        return 1 if report.failed else 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
