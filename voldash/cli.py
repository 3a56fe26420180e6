"""
CLI commands for voldash.
"""

import argparse
import logging
import platform
import sys
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from voldash import __version__
from voldash.alerts.subscriptions import default_toggles, enabled_ids
from voldash.config import ConfigValidationError, load_config
from voldash.dashboard import DashboardView
from voldash.data.series import chart_frame, format_vol
from voldash.data.timerange import TimeRange
from voldash.database.models import FeedbackCategory
from voldash.errors import RemoteStoreError, ValidationError
from voldash.feedback import DEFAULT_CATEGORY
from voldash.main import RETRY_MESSAGE, VolDashApp, create_store
from voldash.rules.catalog import SYMBOL_NAMES, SYMBOLS, list_rules

logger = logging.getLogger(__name__)

CHART_TAIL_ROWS = 20


def _user_agent() -> str:
    system = platform.system()
    return f"voldash/{__version__} ({system}; Python {platform.python_version()})"


def render_dashboard(
    view: DashboardView, full_table: bool, connect_gaps: bool
) -> str:
    """Render latest values, breached rules and the chart table as text."""
    window = view.window
    lines = [
        f"Range: {view.time_range.label} ({window.start_iso} to {window.end_iso})",
        "",
    ]

    for symbol in SYMBOLS:
        latest = view.latest.get(symbol.value)
        updated = latest.date if latest else view.latest_date
        value = format_vol(latest.close if latest else None)
        lines.append(f"{SYMBOL_NAMES[symbol]}: {value}  (last updated: {updated})")

    breached = view.breached_rules()
    if breached:
        lines.append("")
        lines.append("Breached alert levels:")
        for rule in breached:
            lines.append(f"  [{rule.severity.value}] {rule.title}")

    frame = chart_frame(view.chart_rows, connect_gaps=connect_gaps)
    if not full_table:
        frame = frame.tail(CHART_TAIL_ROWS)
    lines.append("")
    lines.append(frame.to_string(float_format=lambda v: format_vol(v), na_rep="-"))
    return "\n".join(lines)


def render_rules() -> str:
    """Render the rule catalog."""
    lines = []
    for rule in list_rules():
        lines.append(
            f"{rule.id.value:<10} {rule.condition:<16} "
            f"{rule.severity.value:<8} {rule.title}"
        )
        lines.append(f"           {rule.description}")
    return "\n".join(lines)


def _parse_rule_ids(args: argparse.Namespace) -> list[str]:
    if args.none:
        return []
    if args.rules:
        return [r.strip().upper() for r in args.rules.split(",") if r.strip()]
    return [rule_id.value for rule_id in enabled_ids(default_toggles())]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(description="Volatility dashboard CLI")
    parser.add_argument("--config", default=None, help="Path to config file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command")

    # Dashboard
    dash_parser = subparsers.add_parser(
        "dashboard", help="Show latest values and chart"
    )
    dash_parser.add_argument(
        "--range",
        dest="time_range",
        choices=[r.value for r in TimeRange],
        default=None,
        help="Look-back window",
    )
    dash_parser.add_argument(
        "--table", action="store_true", help="Print every row of the chart table"
    )

    # Rules
    rules_parser = subparsers.add_parser("rules", help="Alert rule catalog")
    rules_subparsers = rules_parser.add_subparsers(dest="action")
    rules_subparsers.add_parser("list", help="List alert rules")

    # Alerts
    alerts_parser = subparsers.add_parser("alerts", help="Alert subscriptions")
    alerts_parser.set_defaults(help_parser=alerts_parser)
    alerts_subparsers = alerts_parser.add_subparsers(dest="action")

    save_parser = alerts_subparsers.add_parser("save", help="Replace subscriptions")
    save_parser.add_argument("--email", required=True, help="Alert email address")
    group = save_parser.add_mutually_exclusive_group()
    group.add_argument("--rules", help="Comma-separated rule ids (default: all)")
    group.add_argument(
        "--none", action="store_true", help="Remove every subscription"
    )

    show_parser = alerts_subparsers.add_parser("show", help="Show subscriptions")
    show_parser.add_argument("--email", required=True, help="Alert email address")

    # Feedback
    feedback_parser = subparsers.add_parser("feedback", help="Send feedback")
    feedback_parser.add_argument(
        "--category",
        choices=[c.value for c in FeedbackCategory],
        default=DEFAULT_CATEGORY.value,
    )
    feedback_parser.add_argument("--message", required=True, help="Feedback text")
    feedback_parser.add_argument("--contact", default=None, help="Optional contact")

    return parser


def run(args: argparse.Namespace, app: VolDashApp) -> int:
    """Dispatch a parsed command. Returns the process exit code."""
    if args.command == "dashboard":
        result = app.load_dashboard(args.time_range)
        if result.view is not None and not result.view.is_empty:
            print(
                render_dashboard(
                    result.view,
                    full_table=args.table,
                    connect_gaps=app.config.dashboard.connect_gaps,
                )
            )
        else:
            print(result.message)
        return 0 if result.success else 1

    elif args.command == "alerts":
        if args.action == "save":
            result = app.save_alerts(args.email, _parse_rule_ids(args))
            print(result.message)
            return 0 if result.success else 1
        elif args.action == "show":
            try:
                subscriptions = app.list_alerts(args.email)
            except ValidationError as e:
                print(e)
                return 1
            except RemoteStoreError as e:
                logger.error(f"Error listing alert subscriptions: {e}")
                print(RETRY_MESSAGE)
                return 1
            if not subscriptions:
                print("No alert subscriptions.")
            for s in subscriptions:
                print(f"{s.symbol_code} {s.direction} {s.threshold:g} ({s.severity})")
            return 0

    elif args.command == "feedback":
        result = app.submit_feedback(
            args.category,
            args.message,
            contact=args.contact,
            agent=_user_agent(),
            path="cli/feedback",
        )
        print(result.message)
        return 0 if result.success else 1

    return 2


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    log_level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 2

    if args.command == "alerts" and args.action is None:
        args.help_parser.print_help()
        return 2

    # The catalog is static; no store needed
    if args.command == "rules":
        print(render_rules())
        return 0

    try:
        config = load_config(args.config)
    except (ConfigValidationError, FileNotFoundError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if not args.debug:
        logging.getLogger().setLevel(config.advanced.log_level.upper())

    app = VolDashApp(create_store(config), config=config)
    try:
        return run(args, app)
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
