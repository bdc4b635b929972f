"""
Run one report job from CLI.

With ``--dry-run`` the definitions are built and printed instead of being
rendered and published.
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date

from app.scheduler.jobs import get_report_runner
from app.services.report_catalogue import REPORT_JOBS


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one chart report job.")
    parser.add_argument("job_id", choices=sorted(REPORT_JOBS), help="Catalogue job to run.")
    parser.add_argument(
        "--day",
        type=date.fromisoformat,
        default=None,
        help="Anchor day (YYYY-MM-DD, UTC). Defaults to today.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print report definitions without rendering or publishing.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    runner = get_report_runner()

    if args.dry_run:
        reports = runner.build_definitions(args.job_id, today=args.day)
        payload = [{"key": report.key, "definition": json.loads(report.definition.to_wire())} for report in reports]
        print(json.dumps(payload, indent=2))
        return 0

    result = runner.run(args.job_id, today=args.day)
    print(
        json.dumps(
            {
                "job_id": result.job_id,
                "anchor_day": result.anchor_day.isoformat(),
                "published": result.published,
                "failed_publishes": result.failed_publishes,
                "aborted_phase": result.aborted_phase,
                "error": result.error,
            },
            indent=2,
        )
    )
    return 1 if result.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
