"""audit-setup: create <table>_audit_log tables and audit triggers for MySQL tables.

Interactive by default: browse the schema's tables page by page and pick one at a time.
With --table NAME (repeatable) the named tables are set up without prompts.
"""
import argparse
import logging
import sys
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.syntax import Syntax
from sqlalchemy.engine import Engine

from audit_setup.config import SessionContext, Settings, get_settings
from audit_setup.database import check_connection, make_engine
from audit_setup.exceptions import AuditSetupError, DatabaseUnavailable, InvalidIdentifier, TableNotFound
from audit_setup.logs import configure_logging
from audit_setup.services.introspection import list_tables
from audit_setup.services.provisioning import AuditPlan, provision_table, render_script, validate_table_name
from audit_setup.services.table_browser import TablePager

logger = logging.getLogger(__name__)

NEXT_PAGE = {"n", "N"}
PREVIOUS_PAGE = {"p", "P"}
EXIT_WORDS = {"exit", "EXIT", "e", "E"}


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="audit-setup",
        description="Create audit log tables and INSERT/UPDATE/DELETE audit triggers for MySQL tables.",
    )
    parser.add_argument("--host", help="MySQL host (default: localhost)")
    parser.add_argument("--port", type=int, help="MySQL port (default: 3306)")
    parser.add_argument("--user", help="MySQL username")
    parser.add_argument("--database", help="Database (schema) name")
    parser.add_argument(
        "-t", "--table",
        action="append",
        dest="tables",
        help="Table to set up; repeatable. Skips the interactive table browser.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the SQL instead of executing it (introspection still runs).",
    )
    parser.add_argument("--page-size", type=_positive_int, help="Tables shown per page")
    parser.add_argument("--log-file", help="Log file, appended to (default: audit_log_setup.log)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def collect_credentials(settings: Settings, args: argparse.Namespace, console: Console) -> SessionContext:
    """Take connection details from arguments/settings and prompt for whatever is missing."""
    host = args.host or settings.db_host
    user = args.user or settings.db_user
    password = settings.db_password
    database = args.database or settings.db_name

    if not (host and user and password and database):
        console.print("Please enter your MySQL connection details.")
    if not host:
        host = Prompt.ask("MySQL Host (e.g., localhost)", default="localhost", console=console)
    if not user:
        user = Prompt.ask("MySQL Username", console=console)
    if not password:
        password = Prompt.ask("MySQL Password", password=True, console=console)
    if not database:
        database = Prompt.ask("Database Name (Schema)", console=console)

    user, database = (user or "").strip(), (database or "").strip()
    if not user or not password or not database:
        raise AuditSetupError("Username, password, and database name are required.")
    return SessionContext.from_settings(
        settings,
        host=(host or "").strip() or "localhost",
        port=args.port,
        user=user,
        password=password,
        database=database,
    )


def process_table(
    engine: Engine,
    ctx: SessionContext,
    name: str,
    available: list[str] | None,
    dry_run: bool = False,
) -> AuditPlan | None:
    """Set up one table. Table-level errors are logged and return None."""
    logger.info("Processing table '%s'...", name)
    try:
        plan = provision_table(engine, ctx.database, name, available, dry_run=dry_run)
    except DatabaseUnavailable:
        raise
    except AuditSetupError as e:
        logger.error("Error: %s Skipping.", e)
        return None
    logger.info("Audit log setup completed for table '%s'.", plan.table.name)
    return plan


def _show_page(console: Console, pager: TablePager) -> None:
    console.print(f"\n[bold]Available tables (Page {pager.page} of {pager.total_pages}):[/]")
    for name in pager.current():
        console.print(name, markup=False, highlight=False)
    console.print("\n[bold]Options:[/]")
    if pager.has_next:
        console.print("n - Next page")
    if pager.has_previous:
        console.print("p - Previous page")
    console.print("Enter the name of the table to create an audit log for (or type 'exit' to quit):")


def run_interactive(
    engine: Engine,
    ctx: SessionContext,
    console: Console,
    page_size: int = 10,
    dry_run: bool = False,
) -> int:
    while True:
        # Re-read on every pass so tables created meanwhile show up
        logger.info("Fetching table list from database '%s'...", ctx.database)
        tables = list_tables(engine)
        if not tables:
            logger.info("No tables found in database '%s' excluding audit log tables.", ctx.database)
            return 0

        pager = TablePager(tables, page_size)
        while True:
            _show_page(console, pager)
            answer = Prompt.ask(">", console=console).strip()

            if answer in NEXT_PAGE:
                if not pager.next_page():
                    console.print("You are on the last page.")
                continue
            if answer in PREVIOUS_PAGE:
                if not pager.previous_page():
                    console.print("You are on the first page.")
                continue
            if answer in EXIT_WORDS:
                logger.info("Exiting.")
                return 0

            try:
                name = validate_table_name(answer, tables)
            except (InvalidIdentifier, TableNotFound) as e:
                console.print(f"[red]{escape(str(e))}[/] Please try again.")
                continue

            plan = process_table(engine, ctx, name, tables, dry_run=dry_run)
            if plan is None:
                break
            if dry_run:
                console.print(Syntax(render_script([plan]), "sql"))
            if Confirm.ask("Do you want to process another table?", default=False, console=console):
                break
            logger.info("Exiting.")
            return 0


def run_batch(engine: Engine, ctx: SessionContext, names: list[str], dry_run: bool = False) -> int:
    """Set up every named table; exit code 1 if any of them failed."""
    available = list_tables(engine)
    plans = []
    for name in names:
        plan = process_table(engine, ctx, name, available, dry_run=dry_run)
        if plan is not None:
            plans.append(plan)
    if dry_run and plans:
        sys.stdout.write(render_script(plans))
    return 0 if len(plans) == len(names) else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_file or settings.log_file, args.log_level or settings.log_level)
    console = Console()

    logger.info("Audit Log Setup started at %s", datetime.now().isoformat(sep=" ", timespec="seconds"))
    try:
        ctx = collect_credentials(settings, args, console)
        engine = make_engine(ctx)
        try:
            check_connection(engine)
            if args.tables:
                return run_batch(engine, ctx, args.tables, dry_run=args.dry_run)
            return run_interactive(
                engine,
                ctx,
                console,
                page_size=args.page_size or settings.page_size,
                dry_run=args.dry_run,
            )
        finally:
            engine.dispose()
    except DatabaseUnavailable as e:
        logger.error("Error: Database does not exist or credentials are incorrect. %s", e)
        return 1
    except AuditSetupError as e:
        logger.error("Error: %s", e)
        return 1
    except (KeyboardInterrupt, EOFError):
        console.print()
        logger.info("Interrupted.")
        return 130
    finally:
        logger.info("Audit Log Setup finished at %s", datetime.now().isoformat(sep=" ", timespec="seconds"))


if __name__ == "__main__":
    sys.exit(main())
