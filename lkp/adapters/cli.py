"""Command line interface.

The only place where a failed issuance ends the process: every `LkpError`,
and any database error raised while the engine is built, is logged and
turned into exit status 1.
"""

import typer
from sqlalchemy.exc import SQLAlchemyError

from lkp.core.application import get_token_manager, issue_access_key
from lkp.core.exceptions import LkpError
from lkp.core.initialization import initialize_application
from lkp.core.logging import logger
from lkp.domain.value_objects.namespace import Namespace
from lkp.infrastructure.database import check_database_health, create_db_and_tables

app = typer.Typer(
    name="lkp",
    help="Issue get-or-create access keys for services and users.",
    no_args_is_help=True,
)


def _fail(code: str, message: str) -> typer.Exit:
    logger.error("command_failed", code=code, error=message)
    typer.echo(f"error: {message}", err=True)
    return typer.Exit(code=1)


def _fail_with(error: LkpError) -> typer.Exit:
    return _fail(error.code, error.message)


def _fail_storage(error: SQLAlchemyError, message: str) -> typer.Exit:
    logger.error("database_error", error=str(error), error_type=type(error).__name__)
    return _fail("storage_error", message)


@app.callback()
def main() -> None:
    try:
        initialize_application()
    except LkpError as e:
        raise _fail_with(e) from e


@app.command("issue")
def issue(
    service_name: str = typer.Argument(..., help="Service name."),
    user_name: str = typer.Argument(..., help="User name."),
) -> None:
    """
    Print the access key for a service/user pair, creating tokens as needed.
    """
    try:
        key = issue_access_key(service_name, user_name)
    except LkpError as e:
        raise _fail_with(e) from e
    except SQLAlchemyError as e:
        raise _fail_storage(e, "could not open the token database") from e
    typer.echo(key)


@app.command("token")
def token(
    namespace: Namespace = typer.Argument(..., help="Namespace of the name."),
    name: str = typer.Argument(..., help="Service or user name."),
) -> None:
    """
    Print the token registered for one name, creating it if needed.
    """
    try:
        value = get_token_manager().get_or_create(namespace, name)
    except LkpError as e:
        raise _fail_with(e) from e
    except SQLAlchemyError as e:
        raise _fail_storage(e, "could not open the token database") from e
    typer.echo(value.value)


@app.command("init-db")
def init_db() -> None:
    """
    Create the service and user token tables.
    """
    try:
        create_db_and_tables()
    except SQLAlchemyError as e:
        raise _fail_storage(e, "could not create tables") from e
    typer.echo("Tables created.")


@app.command("health")
def health() -> None:
    """
    Check database connectivity.
    """
    if not check_database_health():
        typer.echo("Database is unreachable.", err=True)
        raise typer.Exit(code=1)
    typer.echo("Database is healthy.")
