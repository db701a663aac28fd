"""CLI commands for the resilient fetch client."""

import json
import logging
import sys

import click

from resilient_fetch import __version__
from resilient_fetch.fetch.default import build_client
from resilient_fetch.fetch.errors import FetchDecodeError, FetchError
from resilient_fetch.fetch.models import FailureDescriptor, FetchRequest, RetryPolicy
from resilient_fetch.observability.logging import bind_deploy_context, configure_logging
from resilient_fetch.settings import get_settings


EXIT_FETCH_FAILED = 1
EXIT_DECODE_FAILED = 2


def _parse_headers(raw_headers: tuple[str, ...]) -> dict[str, str]:
    """Parse ``Name: value`` header arguments.

    Raises:
        click.BadParameter: If an argument has no colon.
    """
    headers: dict[str, str] = {}
    for raw in raw_headers:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            msg = f"Expected 'Name: value', got '{raw}'"
            raise click.BadParameter(msg, param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers


def _echo_retry(failure: FailureDescriptor) -> None:
    status = failure.status if failure.status is not None else "no response"
    click.echo(f"Retrying after attempt {failure.attempt} ({status})", err=True)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Resilient fetch CLI."""


@cli.command("get")
@click.argument("url")
@click.option(
    "--method",
    "-X",
    default="GET",
    show_default=True,
    help="HTTP method.",
)
@click.option(
    "--header",
    "-H",
    "raw_headers",
    multiple=True,
    help="Request header as 'Name: value' (repeatable).",
)
@click.option(
    "--data",
    "-d",
    "body",
    default=None,
    help="Request body (sent verbatim).",
)
@click.option(
    "--retries",
    type=int,
    default=None,
    help="Maximum number of attempts (default: from settings).",
)
@click.option(
    "--pause-ms",
    type=click.IntRange(min=0),
    default=None,
    help="Pause between attempts in milliseconds (default: from settings).",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Log format (default: JSON in production, console otherwise).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
def get(  # noqa: PLR0913
    url: str,
    method: str,
    raw_headers: tuple[str, ...],
    body: str | None,
    retries: int | None,
    pause_ms: int | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Fetch URL, retrying failures, and print the JSON reply."""
    settings = get_settings()
    configure_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        output=sys.stderr,
        json_format=settings.log_json if json_logs is None else json_logs,
    )
    bind_deploy_context(settings.environment, settings.revision)

    headers = _parse_headers(raw_headers)
    policy = RetryPolicy(
        max_attempts=settings.max_attempts if retries is None else retries,
        delay_ms=settings.delay_ms if pause_ms is None else pause_ms,
    )
    request = FetchRequest(url=url, method=method, headers=headers, body=body)
    client = build_client(settings)

    try:
        result = client.fetch(request, policy, on_retry=_echo_retry)
    except FetchError as e:
        click.echo(json.dumps(e.to_dict(), indent=2), err=True)
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(EXIT_FETCH_FAILED)
    except FetchDecodeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_DECODE_FAILED)

    click.echo(json.dumps(result, indent=2))


if __name__ == "__main__":
    cli()
