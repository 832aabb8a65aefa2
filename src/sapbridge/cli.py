"""Command line entry point."""

import asyncio
import json
import logging
import sys

import click

from sapbridge.context import ToolContext
from sapbridge.errors import ConfigError
from sapbridge.server import TRANSPORTS, serve
from sapbridge.tools import build_registry

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    # stdout carries MCP frames on the stdio transport, so logs go to stderr.
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname).1s %(asctime)s %(filename)s:%(lineno)d - %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def load_context() -> ToolContext:
    """Build the tool context, exiting with status 1 on configuration errors."""
    try:
        return ToolContext.from_environment()
    except ConfigError as e:
        logger.error(f"Failed to start SAP MCP Server: {e}")
        raise SystemExit(1) from e


@click.group()
@click.option("--log-level", envvar="SAPBRIDGE_LOG_LEVEL", default="INFO", help="Logging level")
def main(log_level: str):
    """Expose SAP OData data as MCP tools."""
    configure_logging(log_level)


@main.command(name="serve")
@click.option("--transport", type=click.Choice(TRANSPORTS), default=None, help="Transport to serve on")
@click.option("--host", default=None, help="HTTP bind address")
@click.option("--port", type=int, default=None, help="HTTP port")
def serve_command(transport: str | None, host: str | None, port: int | None):
    """Serve tools over stdio or HTTP."""
    context = load_context()
    overrides = {key: value for key, value in (("host", host), ("port", port)) if value is not None}
    if overrides:
        context = context.model_copy(
            update={"server": context.server.model_copy(update=overrides)}
        )
    try:
        asyncio.run(serve(context, transport))
    except KeyboardInterrupt:
        logger.info("Shutting down SAP MCP Server...")


@main.command(name="tools")
def list_tools():
    """Print the name, description and input schema of every tool."""
    context = load_context()
    registry = build_registry(context)
    click.echo(json.dumps(registry.list_tools(), indent=2))
    asyncio.run(context.aclose())


@main.command()
@click.argument("name")
@click.option("--json", "json_input", default="{}", help="JSON object with the tool arguments")
def call(name: str, json_input: str):
    """Invoke tool NAME once and print its result."""
    try:
        arguments = json.loads(json_input)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint="--json") from e

    context = load_context()
    registry = build_registry(context)

    async def _call():
        try:
            return await registry.call(name, arguments)
        finally:
            await context.aclose()

    result = asyncio.run(_call())
    click.echo(result.text)
    if result.is_error:
        sys.exit(1)


if __name__ == "__main__":
    main()
