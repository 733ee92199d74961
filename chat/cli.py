"""
Chat service CLI - `chat` command.

Commands:
  chat run                 Serve the HTTP API
  chat migrate up|down     Create (and seed) or drop the schema
"""
from typing import Optional

import click

from chat.core.config import get_settings
from chat.core.logging import setup_logging


@click.group()
@click.version_option("1.0.0")
def main():
    """Chat message service."""
    setup_logging()


@main.command("run")
@click.option("--host", default=None, help="Interface to bind, defaults to HOST")
@click.option("--port", type=int, default=None, help="Port to bind, defaults to PORT")
def run(host: Optional[str], port: Optional[int]):
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chat.main:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@main.command("migrate")
@click.argument("direction", type=click.Choice(["up", "down"]))
def migrate(direction: str):
    """Apply (up) or remove (down) the database schema."""
    from chat.core.database import drop_db, init_db

    if direction == "up":
        init_db()
        click.echo("Up migrations were run successfully")
    else:
        drop_db()
        click.echo("Down migrations were run successfully")


if __name__ == "__main__":
    main()
