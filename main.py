import argparse
import logging
import sys
import time

import pandas as pd

from supplies import settings
from supplies.logger import setup_logger
from supplies.pipelines.shortfall import ShortfallPipeline
from supplies.pipelines.status import StatusPipeline
from supplies.tracker import SupplyTracker

logger = logging.getLogger(__name__)


def _print_status(tracker: SupplyTracker):
    profile = tracker.profile
    logger.info(f"--- Profile: {profile.name} ({profile.id}) ---")
    views = tracker.row_views()
    if not views:
        logger.info("No rows yet. Add one with 'add NAME RATE INVENTORY'.")
        return
    df = pd.DataFrame([v.model_dump(by_alias=True, exclude={"hours_left"}) for v in views])
    logger.info(df.to_string(index=False))


def cmd_status(tracker, args):
    _print_status(tracker)


def cmd_watch(tracker, args):
    interval = args.interval if args.interval is not None else settings.REFRESH_INTERVAL_SECONDS
    count = 0
    while args.iterations is None or count < args.iterations:
        if count:
            time.sleep(interval)
        _print_status(tracker)
        count += 1


def cmd_add(tracker, args):
    row = tracker.add_row(args.name, args.rate, args.inventory)
    logger.info(f"Row id: {row.id}")


def cmd_rename(tracker, args):
    tracker.rename_row(args.row_id, args.name)


def cmd_rate(tracker, args):
    tracker.change_rate(args.row_id, args.rate)


def cmd_count(tracker, args):
    tracker.update_inventory(args.row_id, args.inventory)


def cmd_remove(tracker, args):
    tracker.remove_row(args.row_id)


def cmd_hours(tracker, args):
    tracker.set_desired_hours(args.hours)
    logger.info(f"Desired hours for '{tracker.profile.name}' set to {args.hours}.")


def cmd_shortfall(tracker, args):
    items = tracker.shortfall(args.hours)
    if not items:
        logger.info("No rows to calculate.")
        return
    df = pd.DataFrame([item.model_dump(by_alias=True) for item in items])
    logger.info(df.to_string(index=False))


def cmd_profiles(tracker, args):
    for profile in tracker.state.profiles:
        marker = "*" if profile.id == tracker.profile.id else " "
        logger.info(f"{marker} {profile.id}  {profile.name}  ({len(profile.rows)} rows)")


def cmd_profile_add(tracker, args):
    profile = tracker.create_profile(args.name)
    logger.info(f"Profile id: {profile.id}")


def cmd_profile_select(tracker, args):
    profile = tracker.select_profile(args.profile_id)
    logger.info(f"Selected '{profile.name}'.")


def cmd_profile_delete(tracker, args):
    tracker.delete_profile(args.profile_id)
    logger.info(f"Now on '{tracker.profile.name}'.")


def cmd_export(tracker, args):
    logger.info(tracker.export_url(args.base_url))


def cmd_import(tracker, args):
    tracker.import_data(args.source)


def cmd_report(tracker, args):
    if args.kind == "status":
        pipeline = StatusPipeline(tracker, test_mode=args.test)
    else:
        hours = args.hours if args.hours is not None else tracker.profile.config.desired_hours
        pipeline = ShortfallPipeline(tracker, hours, test_mode=args.test)
    if pipeline.run() is None:
        raise ValueError(f"{args.kind} report failed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Track consumable supplies and when they run out.")
    parser.add_argument("--state", default=None, help="Path to the profiles JSON file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show projected inventory for the selected profile.").set_defaults(func=cmd_status)

    p = sub.add_parser("watch", help="Re-print the status periodically.")
    p.add_argument("--interval", type=int, default=None)
    p.add_argument("--iterations", type=int, default=None)
    p.set_defaults(func=cmd_watch)

    p = sub.add_parser("add", help="Add a row.")
    p.add_argument("name")
    p.add_argument("rate", help="Units consumed per hour.")
    p.add_argument("inventory", help="Units in stock now.")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("rename", help="Rename a row.")
    p.add_argument("row_id")
    p.add_argument("name")
    p.set_defaults(func=cmd_rename)

    p = sub.add_parser("rate", help="Change a row's consumption per hour.")
    p.add_argument("row_id")
    p.add_argument("rate")
    p.set_defaults(func=cmd_rate)

    p = sub.add_parser("count", help="Record a manual inventory count.")
    p.add_argument("row_id")
    p.add_argument("inventory")
    p.set_defaults(func=cmd_count)

    p = sub.add_parser("remove", help="Remove a row.")
    p.add_argument("row_id")
    p.set_defaults(func=cmd_remove)

    p = sub.add_parser("hours", help="Set the desired hours of supply for the profile.")
    p.add_argument("hours")
    p.set_defaults(func=cmd_hours)

    p = sub.add_parser("shortfall", help="Show what is missing to last the desired hours.")
    p.add_argument("hours", nargs="?", default=None)
    p.set_defaults(func=cmd_shortfall)

    sub.add_parser("profiles", help="List profiles.").set_defaults(func=cmd_profiles)

    p = sub.add_parser("profile-add", help="Create and select a profile.")
    p.add_argument("name", nargs="?", default=None)
    p.set_defaults(func=cmd_profile_add)

    p = sub.add_parser("profile-select", help="Select a profile.")
    p.add_argument("profile_id")
    p.set_defaults(func=cmd_profile_select)

    p = sub.add_parser("profile-delete", help="Delete a profile (the selected one by default).")
    p.add_argument("profile_id", nargs="?", default=None)
    p.set_defaults(func=cmd_profile_delete)

    p = sub.add_parser("export", help="Print a share link carrying all profiles.")
    p.add_argument("--base-url", default=None)
    p.set_defaults(func=cmd_export)

    p = sub.add_parser("import", help="Replace all profiles with a share link or its data= value.")
    p.add_argument("source")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("report", help="Save a report and post it to the webhook.")
    p.add_argument("kind", choices=["status", "shortfall"])
    p.add_argument("--hours", type=float, default=None)
    p.add_argument("--test", action="store_true", help="Skip the webhook post.")
    p.set_defaults(func=cmd_report)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logger(log_level=logging.DEBUG if args.verbose else logging.INFO)

    tracker = SupplyTracker(state_path=args.state)
    try:
        args.func(tracker, args)
    except (ValueError, KeyError) as e:
        # KeyError str() wraps the message in quotes.
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        logger.error(f"❌ {message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
