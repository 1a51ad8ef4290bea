"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blockpress.cli.commands import (
    init_cmd, list_cmd, login_cmd, publish_cmd, render_cmd, serve_cmd, tier_cmd, upload_cmd,
)


app = typer.Typer(name="blockpress", no_args_is_help=True, help="Block-document blog publishing with tiered media")

app.command(name="init")(init_cmd)
app.command(name="login")(login_cmd)
app.command(name="upload")(upload_cmd)
app.command(name="publish")(publish_cmd)
app.command(name="tier")(tier_cmd)
app.command(name="render")(render_cmd)
app.command(name="list")(list_cmd)
app.command(name="serve")(serve_cmd)
