"""People engine command line interface.

Provides operational tools for:
- Holiday compensation previews and loads
- Offer totals
- Leave balance initialization
- Year-end rollover

Usage:
    python -m people_engine holidays compensate --file holidays.json --weekend 5,6
    python -m people_engine holidays load --file holidays.json
    python -m people_engine offer totals --basic 5000 --housing 800 --contribution
    python -m people_engine init-db
    python -m people_engine balances init --year 2025 --employees ID,ID
    python -m people_engine rollover --from-year 2025 --employees ID,ID --confirm
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Callable
from uuid import UUID

from people_engine.config import get_settings
from people_engine.errors import PeopleEngineError
from people_engine.holidays.compensation import HolidayCompensationCalculator
from people_engine.holidays.planning import HolidayPlanner
from people_engine.offers.calculator import totals_for
from people_engine.policy import WeekendConfig
from people_engine.schemas import HolidayFile, OfferTotalsIn

logger = logging.getLogger(__name__)


def parse_uuid_list(s: str) -> list[UUID]:
    """Parse a comma-separated list of UUIDs."""
    return [UUID(part.strip()) for part in s.split(",") if part.strip()]


def parse_date_list(s: str) -> list[date]:
    """Parse a comma-separated list of ISO dates."""
    return [date.fromisoformat(part.strip()) for part in s.split(",") if part.strip()]


class PeopleCli:
    """People engine command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m people_engine",
            description="Leave, holiday and offer tools",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # holidays compensate
        holidays = subparsers.add_parser("holidays", help="Public holiday tools")
        holiday_sub = holidays.add_subparsers(dest="action")
        compensate = holiday_sub.add_parser(
            "compensate",
            help="Compute observed dates for a holiday file",
        )
        compensate.add_argument(
            "--file",
            type=Path,
            required=True,
            help="JSON file with a 'holidays' list of {name, date}",
        )
        compensate.add_argument(
            "--weekend",
            type=str,
            help="Comma-separated weekend day indices, 0=Sunday (default: $WEEKEND_DAYS)",
        )
        compensate.add_argument(
            "--existing",
            type=parse_date_list,
            default=[],
            help="Comma-separated observed dates already taken",
        )
        load = holiday_sub.add_parser(
            "load",
            help="Record a holiday file next to the holidays already stored",
        )
        load.add_argument("--file", type=Path, required=True, help="JSON holiday file")
        load.add_argument("--weekend", type=str, help="Comma-separated weekend day indices")

        # offer totals
        offer = subparsers.add_parser("offer", help="Offer tools")
        offer_sub = offer.add_subparsers(dest="action")
        totals = offer_sub.add_parser("totals", help="Compute offer totals")
        totals.add_argument("--basic", type=Decimal, required=True, help="Basic salary")
        totals.add_argument("--housing", type=Decimal, default=Decimal("0"), help="Housing allowance")
        totals.add_argument("--transport", type=Decimal, default=Decimal("0"), help="Transport allowance")
        totals.add_argument("--other", type=Decimal, default=Decimal("0"), help="Other allowances")
        totals.add_argument("--deductions", type=Decimal, default=Decimal("0"), help="Fixed deductions")
        totals.add_argument(
            "--contribution",
            action="store_true",
            help="Subject to statutory contribution",
        )

        # init-db
        subparsers.add_parser("init-db", help="Create database tables")

        # balances init
        balances = subparsers.add_parser("balances", help="Leave balance tools")
        balance_sub = balances.add_subparsers(dest="action")
        init = balance_sub.add_parser(
            "init",
            help="Create missing balances at each leave type's default allocation",
        )
        init.add_argument("--year", type=int, required=True, help="Balance year")
        init.add_argument(
            "--employees",
            type=parse_uuid_list,
            required=True,
            help="Comma-separated employee IDs",
        )

        # rollover
        rollover = subparsers.add_parser(
            "rollover",
            help="Open next year's balances with carryover",
        )
        rollover.add_argument("--from-year", type=int, required=True, help="Year to roll from")
        rollover.add_argument(
            "--employees",
            type=parse_uuid_list,
            required=True,
            help="Comma-separated employee IDs",
        )
        rollover.add_argument(
            "--confirm",
            action="store_true",
            help="Required: rollover is a one-shot action per year pair",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        settings = get_settings()
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

        handlers: dict[str, Callable[..., int]] = {
            "holidays": self._cmd_holidays,
            "offer": self._cmd_offer,
            "init-db": self._cmd_init_db,
            "balances": self._cmd_balances,
            "rollover": self._cmd_rollover,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except (PeopleEngineError, ValueError, OSError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    def _cmd_holidays(self, args: argparse.Namespace) -> int:
        """Holiday file commands."""
        if args.action not in ("compensate", "load"):
            self.parser.print_help()
            return 1

        settings = get_settings()
        payload = HolidayFile.model_validate_json(args.file.read_text())

        if args.weekend is not None:
            weekend = WeekendConfig.parse(args.weekend)
        elif payload.weekend_days is not None:
            weekend = WeekendConfig(frozenset(payload.weekend_days))
        else:
            weekend = settings.weekend()

        calculator = HolidayCompensationCalculator(weekend, settings.shift_policy())
        if args.action == "load":
            return self._load_holidays(calculator, payload)

        existing = [*payload.existing_observed_dates, *args.existing]
        observed = calculator.compute([h.to_input() for h in payload.holidays], existing)

        output = [
            {
                "name": h.name,
                "date": h.date.isoformat(),
                "observed_date": h.observed_date.isoformat(),
                "is_compensated": h.is_compensated,
                "reason": h.reason,
            }
            for h in observed
        ]
        print(json.dumps(output, indent=2))
        return 0

    def _load_holidays(self, calculator: HolidayCompensationCalculator, payload: HolidayFile) -> int:
        """Plan the file against stored holidays of the same years and record it."""
        from people_engine.database import get_session
        from people_engine.holidays.sql_store import SqlHolidayStore

        holidays = [h.to_input() for h in payload.holidays]
        years = sorted({h.date.year for h in holidays})

        with get_session() as session:
            store = SqlHolidayStore(session)
            existing = [record for year in years for record in store.list_year(year)]
            drafts = HolidayPlanner(calculator).plan_additions(holidays, existing)
            created = store.insert_drafts(drafts)

        compensated = sum(1 for h in created if h.is_compensated)
        print(f"Holidays recorded: {len(created)} ({compensated} compensated)")
        return 0

    def _cmd_offer(self, args: argparse.Namespace) -> int:
        """Compute offer totals."""
        if args.action != "totals":
            self.parser.print_help()
            return 1

        payload = OfferTotalsIn(
            basic_salary=args.basic,
            housing_allowance=args.housing,
            transport_allowance=args.transport,
            other_allowances=args.other,
            deductions_fixed=args.deductions,
            is_subject_to_contribution=args.contribution,
        )
        totals = totals_for(payload.to_inputs(), get_settings().contribution_rates())
        print(json.dumps(totals.to_dict(), indent=2))
        return 0

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create database tables."""
        from people_engine.database import create_all

        create_all()
        print("Database tables created.")
        return 0

    def _cmd_balances(self, args: argparse.Namespace) -> int:
        """Initialize leave balances for a year."""
        if args.action != "init":
            self.parser.print_help()
            return 1

        from people_engine.database import get_session
        from people_engine.leave.ledger import LeaveBalanceLedger
        from people_engine.leave.sql_store import SqlBalanceStore

        with get_session() as session:
            store = SqlBalanceStore(session)
            ledger = LeaveBalanceLedger(store)
            result = ledger.initialize(args.employees, args.year, store.list_leave_types())

        print(f"Balances for {result.year}: {result.created} created, {result.skipped} skipped")
        return 0

    def _cmd_rollover(self, args: argparse.Namespace) -> int:
        """Run the year-end rollover."""
        if not args.confirm:
            print(
                f"Rollover from {args.from_year} to {args.from_year + 1} creates balances "
                "for every employee. Re-run with --confirm to proceed.",
                file=sys.stderr,
            )
            return 1

        from people_engine.database import get_session
        from people_engine.leave.rollover import YearEndRollover
        from people_engine.leave.sql_store import SqlBalanceStore

        with get_session() as session:
            store = SqlBalanceStore(session)
            result = YearEndRollover(store).process(
                args.from_year,
                args.employees,
                store.list_leave_types(),
                confirm=True,
            )

        print(f"Rollover {result.from_year} -> {result.to_year}")
        print(f"  Balances created:   {result.balances_created}")
        print(f"  Carryovers applied: {result.carryovers_applied}")
        print(f"  Days carried:       {result.carried_days}")
        print(f"  Skipped:            {result.skipped}")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PeopleCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
