"""Lending Ledger MCP Server

Exposes the ledger operations to MCP clients:
- tools: issue_book, return_book
- resources: ledger://loans/overdue, ledger://loans/open

Runs over stdio (default) or streamable HTTP. Logging goes to stderr;
stdout carries the stdio transport.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from lending_ledger.config import get_config
from lending_ledger.database.session import get_db_manager
from lending_ledger.resources import all_resources
from lending_ledger.tools import all_tools

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Lending Ledger - copy-count accounting for a book-lending library. "
        "Use the issue_book and return_book tools to lend and take back books, "
        "and the ledger://loans/* resources to see open and overdue loans."
    ),
)

for resource in all_resources:
    logger.debug("Registering resource: %s with URI: %s", resource["name"], resource["uri"])
    mcp.resource(
        uri=resource["uri"],
        name=resource["name"],
        description=resource["description"],
        mime_type=resource["mime_type"],
    )(resource["handler"])

logger.info("Registered %d resources", len(all_resources))

for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    mcp.tool(
        name=tool["name"],
        description=tool["description"],
    )(tool["handler"])

logger.info("Registered %d tools", len(all_tools))


def configure_logging() -> None:
    """Apply the configured log level."""
    if config.is_development:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled")
    else:
        logging.getLogger().setLevel(config.log_level)
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def _serve(transport: str, **transport_kwargs: Any) -> None:
    """Initialise the database, then hand control to FastMCP until shutdown."""
    db_manager = get_db_manager()
    db_manager.init_database()

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        db_manager.close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        mcp.run(transport=transport, **transport_kwargs)
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)
    finally:
        db_manager.close()


def run_stdio_server() -> None:
    """Run the MCP server using stdio transport."""
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)
    _serve("stdio")


def run_http_server() -> None:
    """Run the MCP server using the streamable HTTP transport."""
    logger.info(
        "Starting %s v%s on http://%s:%d",
        config.server_name,
        config.server_version,
        config.http_host,
        config.http_port,
    )
    _serve("streamable-http", host=config.http_host, port=config.http_port)


def main() -> None:
    """Entry point for the ``lending-ledger`` console script."""
    configure_logging()
    try:
        logger.info("Server info: %s", config.server_info)

        if config.transport == "stdio":
            run_stdio_server()
        elif config.transport == "streamable_http":
            run_http_server()
        else:
            logger.error("Unsupported transport: %s", config.transport)
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
