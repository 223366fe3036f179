"""planet-auction — admin console for seeding and running the auction.

Usage:
    planet-auction createPlanetsDatabase <databaseId>
    planet-auction insertPlanet <databaseId> <planetName> <planetValue>
    planet-auction batchInsertPlanets <databaseId> <csvFile>
    planet-auction batchInsertPlayers <databaseId>
    planet-auction runPlanetAuction <databaseId> <numberOfShares> [showConsoleOutput]

Each verb maps to a typed argument dataclass and an async handler in
COMMANDS. Exit codes: 0 success, 1 invalid arguments, 2 command failed.
"""

import argparse
import logging
import sys
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any

import uvloop

from config.settings import settings
from src.pa_admin.application.service import AdminService, parse_planets_csv
from src.pa_auction.application.driver import AuctionDriver
from src.pa_auction.application.schemas import describe_outcome
from src.pa_auction.domain.models import SettlementOutcome
from src.pa_common.database import create_ddl_engine, create_engine, create_session_factory
from src.pa_common.errors import AppError
from src.pa_common.planet_dollars import format_planet_dollars
from src.pa_common.tracing import create_span, setup_tracing, shutdown_tracing

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_PARAMETER = 1
    FAILURE = 2


# ---------------------------------------------------------------------------
# Typed arguments
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreatePlanetsDatabaseArgs:
    database_id: str


@dataclass(frozen=True)
class InsertPlanetArgs:
    database_id: str
    planet_name: str
    planet_value: int


@dataclass(frozen=True)
class BatchInsertPlanetsArgs:
    database_id: str
    csv_file: str


@dataclass(frozen=True)
class BatchInsertPlayersArgs:
    database_id: str


@dataclass(frozen=True)
class RunPlanetAuctionArgs:
    database_id: str
    number_of_shares: int
    show_console_output: bool = False


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def create_planets_database(args: CreatePlanetsDatabaseArgs) -> ExitCode:
    service = AdminService()
    logger.info("Waiting for operation to complete...")
    admin_engine = create_ddl_engine(settings.ADMIN_DATABASE)
    try:
        async with admin_engine.connect() as conn:
            db_outcome = await service.create_database(conn, args.database_id)
    finally:
        await admin_engine.dispose()

    db_engine = create_ddl_engine(args.database_id)
    try:
        async with db_engine.connect() as conn:
            table_outcomes = await service.create_tables(conn)
    finally:
        await db_engine.dispose()

    logger.info(
        "Operation status: database=%s %s",
        db_outcome.value,
        ", ".join(f"{name}={outcome.value}" for name, outcome in table_outcomes.items()),
    )
    print(f"Created sample database {args.database_id}")
    return ExitCode.SUCCESS


async def insert_planet(args: InsertPlanetArgs) -> ExitCode:
    engine = create_engine(args.database_id)
    try:
        async with create_session_factory(engine)() as db:
            logger.info("Waiting for operation to complete...")
            planet = await AdminService().insert_planet(db, args.planet_name, args.planet_value)
            logger.info("Operation status: inserted planet %d", planet.planet_id)
    finally:
        await engine.dispose()
    print(f"Inserted planet into {args.database_id}")
    return ExitCode.SUCCESS


async def batch_insert_planets(args: BatchInsertPlanetsArgs) -> ExitCode:
    rows = parse_planets_csv(args.csv_file)
    engine = create_engine(args.database_id)
    try:
        async with create_session_factory(engine)() as db:
            logger.info("Waiting for operation to complete...")
            count = await AdminService().batch_insert_planets(db, rows)
            logger.info("Operation status: inserted %d planets", count)
    finally:
        await engine.dispose()
    print(f"Inserted planets into {args.database_id}")
    return ExitCode.SUCCESS


async def batch_insert_players(args: BatchInsertPlayersArgs) -> ExitCode:
    engine = create_engine(args.database_id)
    try:
        async with create_session_factory(engine)() as db:
            logger.info("Waiting for operation to complete...")
            count = await AdminService().batch_insert_players(db)
            logger.info("Operation status: inserted %d players", count)
    finally:
        await engine.dispose()
    print(f"Inserted players into {args.database_id}")
    return ExitCode.SUCCESS


def _print_outcome(index: int, outcome: SettlementOutcome) -> None:
    if outcome.planet is not None:
        print(f"Planet: {outcome.planet.planet_name}")
        print(f"Planet sharesAvailable: {outcome.planet.shares_available}")
        if outcome.settled:
            print(f"Planet costPerShare: {format_planet_dollars(outcome.amount)}")
    print(describe_outcome(outcome))
    print(f"{index + 1} Transaction complete")


async def run_planet_auction(args: RunPlanetAuctionArgs) -> ExitCode:
    engine = create_engine(args.database_id)
    try:
        driver = AuctionDriver(create_session_factory(engine))
        with create_span("cli.run_planet_auction", {"database_id": args.database_id}):
            summary = await driver.run(
                args.number_of_shares,
                on_outcome=_print_outcome if args.show_console_output else None,
            )
    finally:
        await engine.dispose()
    print(
        f"Players purchased {summary.purchased} planet shares in {args.database_id} "
        f"({summary.failed} of {summary.requested} attempts failed)"
    )
    return ExitCode.SUCCESS


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got {value!r}")


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


_DATABASE_ID = ("database_id", {"metavar": "databaseId", "help": "Database to use."})


@dataclass(frozen=True)
class Command:
    help: str
    args_type: type
    handler: Callable[[Any], Awaitable[ExitCode]]
    arguments: tuple[tuple[str, dict[str, Any]], ...]


COMMANDS: dict[str, Command] = {
    "createPlanetsDatabase": Command(
        help="Create the sample database and its Planets/Players/Transactions tables.",
        args_type=CreatePlanetsDatabaseArgs,
        handler=create_planets_database,
        arguments=(_DATABASE_ID,),
    ),
    "insertPlanet": Command(
        help="Insert a planet.",
        args_type=InsertPlanetArgs,
        handler=insert_planet,
        arguments=(
            _DATABASE_ID,
            ("planet_name", {"metavar": "planetName", "help": "Name of the planet."}),
            ("planet_value", {"metavar": "planetValue", "type": _non_negative_int,
                              "help": "Value of the planet in Planet Dollars."}),
        ),
    ),
    "batchInsertPlanets": Command(
        help="Batch insert planets from a CSV file.",
        args_type=BatchInsertPlanetsArgs,
        handler=batch_insert_planets,
        arguments=(
            _DATABASE_ID,
            ("csv_file", {"metavar": "csvFile",
                          "help": "CSV containing PlanetName,PlanetValue on each line."}),
        ),
    ),
    "batchInsertPlayers": Command(
        help="Batch insert generated players.",
        args_type=BatchInsertPlayersArgs,
        handler=batch_insert_players,
        arguments=(_DATABASE_ID,),
    ),
    "runPlanetAuction": Command(
        help="Run automated player purchases of planet shares.",
        args_type=RunPlanetAuctionArgs,
        handler=run_planet_auction,
        arguments=(
            _DATABASE_ID,
            ("number_of_shares", {"metavar": "numberOfShares", "type": _non_negative_int,
                                  "help": "Number of shares to be purchased."}),
            ("show_console_output", {"metavar": "showConsoleOutput", "type": _parse_bool,
                                     "nargs": "?", "default": False,
                                     "help": "Set to 'true' to print every purchase."}),
        ),
    ),
}


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(ExitCode.INVALID_PARAMETER, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="planet-auction", description="Planet Auction admin console")
    subparsers = parser.add_subparsers(dest="verb", metavar="verb", required=True)
    for verb, command in COMMANDS.items():
        sub = subparsers.add_parser(verb, help=command.help, description=command.help)
        for name, kwargs in command.arguments:
            sub.add_argument(name, **kwargs)
    return parser


def parse_command(argv: Sequence[str]) -> tuple[Command, Any]:
    """Resolve argv to (command, typed args). Exits with INVALID_PARAMETER on bad input."""
    namespace = build_parser().parse_args(argv)
    command = COMMANDS[namespace.verb]
    args = command.args_type(
        **{f.name: getattr(namespace, f.name) for f in fields(command.args_type)}
    )
    return command, args


async def _run(command: Command, args: Any) -> ExitCode:
    if settings.TRACING_ENABLED:
        setup_tracing("planet-auction-cli", console_export=settings.TRACE_CONSOLE_EXPORT)
    try:
        return await command.handler(args)
    except AppError as e:
        logger.error("Command failed: %s", e.message)
        print(e.message, file=sys.stderr)
        return ExitCode.FAILURE
    finally:
        shutdown_tracing()


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    command, args = parse_command(sys.argv[1:] if argv is None else argv)
    return int(uvloop.run(_run(command, args)))


if __name__ == "__main__":
    sys.exit(main())
