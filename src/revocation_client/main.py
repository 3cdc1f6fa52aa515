"""
Command-line entry point — wires dependencies and runs one operation.

Composition root: loads settings from the environment, builds the
RevocationClient (with its default HTTP transport) and hands the Result of
the requested operation to the terminal.

    revocation-client download --max-requests 50 --issuer-name "CN=Contoso Issuing CA"
    revocation-client upload results.json

Responsibilities:
  1. Configure structlog for structured console logging
  2. Load and validate configuration from the environment / .env
  3. Create the client (the ONLY place concrete adapters are chosen)
  4. Run the operation and map its Result to stdout / exit code
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

import click
import structlog
from pydantic import TypeAdapter, ValidationError
from railway import ErrorCode, FailureDescription, Result

from revocation_client import __version__
from revocation_client.client import RevocationClient
from revocation_client.config import AppSettings
from revocation_client.domain.models import RevocationResult
from revocation_client.protocol import MAX_REQUESTS_MAX_VALUE

_RESULTS_FILE = TypeAdapter(list[RevocationResult])

CALLER_ERROR_EXIT_CODE = 2

EXIT_CODES: dict[ErrorCode, int] = {
    ErrorCode.PROTOCOL_ERROR: 3,
    ErrorCode.AUTHENTICATION_ERROR: 4,
    ErrorCode.CONFIGURATION_ERROR: 78,
}


def exit_code_for(failure: FailureDescription) -> int:
    """Process exit status for a failure; 1 for anything unmapped."""
    if failure.code.is_caller_error:
        return CALLER_ERROR_EXIT_CODE
    return EXIT_CODES.get(failure.code, 1)


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for human-readable console logging on stderr.

    stdout is reserved for command output so it can be piped.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def create_client(settings: AppSettings) -> Result[RevocationClient]:
    """Build the client from settings; configuration problems become CONFIGURATION_ERROR."""
    return Result.from_computation(
        lambda: RevocationClient(settings.to_properties()),
        ErrorCode.CONFIGURATION_ERROR,
        "Invalid revocation client configuration",
    )


def load_results(path: Path) -> Result[list[RevocationResult]]:
    """Read a JSON array of revocation results (camelCase keys) from a file."""
    try:
        return Result.success(_RESULTS_FILE.validate_json(path.read_bytes()))
    except (OSError, ValidationError) as e:
        return Result.failure(
            ErrorCode.INVALID_ARGUMENT, f"Cannot read results from {path}: {e}", e
        )


def _finish(result: Result[Any], render: Any) -> None:
    """Print the success value, or report the failure and exit non-zero."""
    log = structlog.get_logger()
    if result.is_success():
        click.echo(render(result.value()))
        return
    failure = result.error()
    log.error("cli.failed", error_code=failure.code.value, message=failure.message)
    click.echo(str(failure), err=True)
    sys.exit(exit_code_for(failure))


# ─────────────────────── Commands ───────────────────────


@click.group()
@click.version_option(__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Exchange certificate revocation requests and results with the service."""
    try:
        settings = AppSettings()
    except ValidationError as e:
        click.echo(f"FATAL: Configuration error — {e}", err=True)
        sys.exit(EXIT_CODES[ErrorCode.CONFIGURATION_ERROR])
    configure_structlog(settings.log_level)
    ctx.obj = settings


@cli.command()
@click.option("--transaction-id", default=lambda: str(uuid.uuid4()), show_default="new UUID")
@click.option(
    "--max-requests",
    type=int,
    default=MAX_REQUESTS_MAX_VALUE,
    show_default=True,
    help=f"Page size, 1..{MAX_REQUESTS_MAX_VALUE}.",
)
@click.option("--provider-name", default=None, help="Filter by certificate provider name.")
@click.option("--issuer-name", default=None, help="Filter by issuer name.")
@click.pass_obj
def download(
    settings: AppSettings,
    transaction_id: str,
    max_requests: int,
    provider_name: str | None,
    issuer_name: str | None,
) -> None:
    """Download pending revocation requests and print them as JSON."""

    async def run(client: RevocationClient) -> Result[Any]:
        return await client.download_revocation_requests(
            transaction_id, max_requests, provider_name, issuer_name
        )

    result = create_client(settings)
    if result.is_success():
        result = asyncio.run(run(result.value()))
    _finish(
        result,
        lambda requests: json.dumps(
            [request.model_dump(mode="json", by_alias=True) for request in requests], indent=2
        ),
    )


@cli.command()
@click.argument("results_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--transaction-id", default=lambda: str(uuid.uuid4()), show_default="new UUID")
@click.pass_obj
def upload(settings: AppSettings, results_file: Path, transaction_id: str) -> None:
    """Upload revocation results read from RESULTS_FILE (a JSON array)."""

    async def run(client: RevocationClient, results: list[RevocationResult]) -> Result[Any]:
        return await client.upload_revocation_results(transaction_id, results)

    result = Result.combine(create_client(settings), load_results(results_file), lambda c, r: (c, r))
    if result.is_success():
        result = asyncio.run(run(*result.value()))
    _finish(result, lambda count: f"{count} result(s) recorded")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
