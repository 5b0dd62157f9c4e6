import typer

from shoreline_server.auth.password import PasswordAuth
from shoreline_server.auth.utils import is_authorized_admin_email
from shoreline_server.cli import app
from shoreline_server.exceptions import ShorelineException
from shoreline_server.lib.postgres import Postgres
from shoreline_server.logging import logger


@app.command()
async def set_password(
    email: str,
    password: str = typer.Option(..., prompt=True, hide_input=True),
    name: str | None = None,
) -> None:
    """Create an admin account or change its password.

    Only addresses listed in SHORELINE_AUTHORIZED_ADMIN_EMAILS
    are able to sign in.
    """

    if not is_authorized_admin_email(email):
        logger.warning(f"{email} is not an authorized admin e-mail")

    await Postgres.connect()
    try:
        await PasswordAuth.set_password(email, password, name=name)
    except ShorelineException as e:
        logger.error(e.detail)
        raise typer.Exit(1)
    finally:
        await Postgres.shutdown()

    logger.info(f"Password of {email} has been set")
