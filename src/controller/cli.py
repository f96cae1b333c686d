"""Console script for controller."""
from __future__ import annotations

import json
from typing import Optional

import typer
from rich.console import Console

from ._client import Client
from ._constants import ENV_API_KEY, ENV_ENDPOINT, ENV_ENVIRONMENT, ENV_PROJECT_ID
from ._errors import ConfigurationError, TransportError

app = typer.Typer(help='Send and inspect Controller error reports.')
console = Console()
err_console = Console(stderr=True)


class ControllerTestError(Exception):
    """Raised on purpose to produce a sample report."""


def _raise_sample():
    raise ControllerTestError('This is a test event sent by the controller CLI')


def _sample_exception() -> ControllerTestError:
    try:
        _raise_sample()
    except ControllerTestError as e:
        return e


def _make_client(api_key: str | None,
                 project_id: str | None,
                 endpoint: str | None,
                 environment: str | None) -> Client:
    try:
        client = Client(api_key or '', project_id or '', endpoint)
    except ConfigurationError as e:
        err_console.print(f'[red]Configuration error:[/red] {e}')
        raise typer.Exit(code=2)

    if environment:
        client.set_environment(environment)
    return client


@app.command('send-test')
def send_test(
    api_key: Optional[str] = typer.Option(None, envvar=ENV_API_KEY),
    project_id: Optional[str] = typer.Option(None, envvar=ENV_PROJECT_ID),
    endpoint: Optional[str] = typer.Option(None, envvar=ENV_ENDPOINT),
    environment: Optional[str] = typer.Option(None, envvar=ENV_ENVIRONMENT),
):
    """Report a sample exception to the collector."""
    client = _make_client(api_key, project_id, endpoint, environment)

    try:
        event = client.report_exception(_sample_exception())
    except TransportError as e:
        err_console.print(f'[red]Delivery failed:[/red] {e}')
        raise typer.Exit(code=1)

    console.print(f'[green]Sent event[/green] {event.event_id} '
                  f'to {client.endpoint}/issues')


@app.command()
def preview(
    api_key: Optional[str] = typer.Option('preview', envvar=ENV_API_KEY),
    project_id: Optional[str] = typer.Option('preview', envvar=ENV_PROJECT_ID),
    environment: Optional[str] = typer.Option(None, envvar=ENV_ENVIRONMENT),
):
    """Print the event a sample exception would produce, without sending it."""
    client = _make_client(api_key, project_id, None, environment)
    event = client.build_report(_sample_exception())
    console.print_json(json.dumps(event.to_dict(), default=str))


if __name__ == '__main__':
    app()
