import argparse
import dataclasses
import json
import logging

from planavail.config import load_settings, parse_division_id
from planavail.payloads import slot_to_payload
from planavail.proxy_client import fetch_divisions
from planavail.worker import run_once


def _setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="PlanAvail: open booking slots for scheduling plans")
    parser.add_argument("--category", help="Plan category to evaluate (overrides CATEGORY_TYPE)")
    parser.add_argument("--division", help="Division id (overrides DIVISION_ID)")
    parser.add_argument("--days", type=int, help="Days ahead to evaluate (overrides RANGE_DAYS)")
    parser.add_argument("--list-divisions", action="store_true", help="List scheduling divisions and exit")
    parser.add_argument("--verbose", action="store_true", help="Log per-day decisions")
    args = parser.parse_args()

    _setup_logging(args.verbose)
    settings = load_settings()

    overrides = {}
    if args.category:
        overrides["category_type"] = args.category
    if args.division:
        overrides["division_id"] = parse_division_id(args.division)
    if args.days is not None:
        if args.days < 1:
            parser.error("--days must be >= 1")
        overrides["range_days"] = args.days
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    if args.list_divisions:
        divisions = fetch_divisions(base_url=settings.proxy_url, timeout_seconds=settings.request_timeout_seconds)
        for item in divisions:
            print(f"{item.get('id')}\t{item.get('label', '')}")
        return 0

    try:
        slots = run_once(settings)
    except Exception as e:
        logging.getLogger(__name__).error("Availability check failed (%s: %s)", type(e).__name__, e)
        raise

    print(json.dumps([slot_to_payload(s) for s in slots], indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
