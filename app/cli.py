"""
``wake-on-demand`` command line.

    wake-on-demand server                 # start the server
    wake-on-demand --port 9090 server     # custom port
    wake-on-demand on bedroom             # short power-on pulse
    wake-on-demand off bedroom            # long force-shutdown pulse
    wake-on-demand status bedroom         # connectivity check
    wake-on-demand --server http://192.168.1.100:8080 list
"""

from typing import NoReturn, Optional

import typer

from app.client import ClientError, CommandClient, ServerUnreachableError
from app.config import VERSION, settings
from app.devices.commands import CLI_COMMANDS
from app.devices.durations import parse_duration

app = typer.Typer(
    help=f"wake-on-demand v{VERSION} - Remote server power control",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wake-on-demand v{VERSION}")
        raise typer.Exit()


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))


@app.callback()
def main_options(
    ctx: typer.Context,
    port: int = typer.Option(settings.api_port, "--port", help="Server port"),
    server: str = typer.Option(
        settings.server_url, "--server", help="Server URL for client commands"
    ),
    timeout: Optional[str] = typer.Option(
        None,
        "--timeout",
        help="ESP timeout duration, e.g. 30s or 1m30s",
        callback=_parse_timeout,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Print version",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Remote server power control through polling ESP devices."""
    ctx.obj = {
        "port": port,
        "server": server,
        "timeout": timeout if timeout is not None else settings.device_timeout,
    }


@app.command()
def server(ctx: typer.Context) -> None:
    """Start the server."""
    import uvicorn

    from app.main import create_app

    opts = ctx.obj
    server_settings = settings.model_copy(
        update={"api_port": opts["port"], "device_timeout": opts["timeout"]}
    )
    uvicorn.run(
        create_app(server_settings),
        host=server_settings.api_host,
        port=server_settings.api_port,
    )


def _fail(message: str, hint: Optional[str] = None) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED)
    if hint:
        typer.echo(hint)
    raise typer.Exit(code=1)


def _send(ctx: typer.Context, verb: str, esp_id: str) -> None:
    base_url = ctx.obj["server"]
    with CommandClient(base_url) as client:
        try:
            client.set_command(esp_id, CLI_COMMANDS[verb])
        except ServerUnreachableError as exc:
            _fail(f"Error: {exc}", "Is the server running? Start with: wake-on-demand server")
        except ClientError as exc:
            _fail(f"✗ {exc}")
    typer.secho(f"✓ Command '{verb}' queued for {esp_id}", fg=typer.colors.GREEN)


@app.command()
def on(ctx: typer.Context, esp_id: str = typer.Argument(..., help="ESP id")) -> None:
    """Send power on command (short pulse)."""
    _send(ctx, "on", esp_id)


@app.command()
def off(ctx: typer.Context, esp_id: str = typer.Argument(..., help="ESP id")) -> None:
    """Send force shutdown command (long pulse)."""
    _send(ctx, "off", esp_id)


@app.command()
def status(ctx: typer.Context, esp_id: str = typer.Argument(..., help="ESP id")) -> None:
    """Check target server connectivity."""
    _send(ctx, "status", esp_id)


@app.command("list")
def list_esps(ctx: typer.Context) -> None:
    """List all registered ESPs."""
    base_url = ctx.obj["server"]
    with CommandClient(base_url) as client:
        try:
            devices = client.list_devices()
        except ServerUnreachableError as exc:
            _fail(f"Error: {exc}", "Is the server running? Start with: wake-on-demand server")
        except ClientError as exc:
            _fail(f"✗ {exc}")

    if not devices:
        typer.echo("No ESPs registered")
        return

    typer.echo("Registered ESPs:")
    for device in devices:
        dot = typer.style("●", fg=typer.colors.GREEN if device.online else typer.colors.RED)
        typer.echo(f"  {dot} {device.id:<20} [last seen: {device.last_seen}]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
