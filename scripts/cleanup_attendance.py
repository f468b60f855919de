"""Repair the attendance ledger.

Usage:
    python scripts/cleanup_attendance.py orphans
    python scripts/cleanup_attendance.py day [YYYY-MM-DD]

``orphans`` removes records left behind by a student removal whose purge
step failed. ``day`` deletes every record of one day (default: today).
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config import get_settings_module

from school_attendance.common.datetime_utils import now_local, parse_iso_date
from school_attendance.container import build_container
from school_attendance.main import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("orphans", help="delete attendance rows whose student no longer exists")
    day = sub.add_parser("day", help="delete all attendance rows of one day")
    day.add_argument("date", nargs="?", type=parse_iso_date, help="YYYY-MM-DD, defaults to today")
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=dict(settings.DB_CONFIG))

    if args.command == "orphans":
        removed = container.attendance_service.purge_orphans()
    else:
        removed = container.attendance_service.clear_day(args.date or now_local().date())

    logging.getLogger("cleanup_attendance").info("Removed %d attendance records", removed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
