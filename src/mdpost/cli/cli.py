"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated

import typer

from mdpost.cli.commands import (
    add_image_cmd, describe_cmd, new_cmd, normalize_cmd, render_cmd,
    set_cmd, show_cmd, unset_cmd, validate_cmd,
)
from mdpost.config import load_config
from mdpost.log_config import configure_logging


app = typer.Typer(name="mdpost", no_args_is_help=True, help="Edit, normalize and preview markdown posts")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    log_json: Annotated[bool, typer.Option("--log-json", help="Log as JSON lines")] = False,
    ):
    """Configure logging before any command runs."""
    try:
        settings = load_config()
    except ValueError:
        settings = None  # reported again by the command itself
    configure_logging(
        verbose=verbose or bool(settings and settings.verbose),
        log_json=log_json or bool(settings and settings.log_json),
    )


app.command(name="show")(show_cmd)
app.command(name="render")(render_cmd)
app.command(name="set")(set_cmd)
app.command(name="unset")(unset_cmd)
app.command(name="normalize")(normalize_cmd)
app.command(name="validate")(validate_cmd)
app.command(name="new")(new_cmd)
app.command(name="describe")(describe_cmd)
app.command(name="add-image")(add_image_cmd)
