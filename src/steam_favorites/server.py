#!/usr/bin/env python3
"""Steam Favorites MCP server.

Entry point for the stdio MCP server: builds the service graph, loads the
endpoint modules and dispatches tool calls.
"""

import asyncio
import importlib
import logging
import os
import pkgutil
import sys
from typing import Any

from dotenv import load_dotenv
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import EmbeddedResource, ImageContent, TextContent, Tool

from steam_favorites import __version__
from steam_favorites.endpoints.base import EndpointManager
from steam_favorites.services import Services


# Log to stderr only; stdout carries the MCP protocol
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)
logger = logging.getLogger(__name__)

load_dotenv()

server = Server("steam-favorites")

services: Services | None = None
endpoint_manager: EndpointManager | None = None


def discover_endpoints() -> None:
    """Import every endpoint module so its tools register themselves."""
    import steam_favorites.endpoints as endpoints_package

    package_path = os.path.dirname(endpoints_package.__file__)

    for _, module_name, _ in pkgutil.iter_modules([package_path]):
        if module_name == "base":
            continue
        try:
            importlib.import_module(f"steam_favorites.endpoints.{module_name}")
            logger.info(f"Loaded endpoint module: {module_name}")
        except Exception as e:
            logger.error(f"Failed to load endpoint module {module_name}: {e}")


@server.list_tools()
async def handle_list_tools() -> list[Tool]:
    """List all available tools."""
    if endpoint_manager is None:
        return []
    return endpoint_manager.get_all_tools()


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict[str, Any] | None
) -> list[TextContent | ImageContent | EmbeddedResource]:
    """Handle tool execution requests."""
    if endpoint_manager is None:
        raise RuntimeError("Endpoint manager not initialized")

    try:
        return await endpoint_manager.call_tool(name, arguments)
    except ValueError as e:
        return [TextContent(type="text", text=f"Error: {e}")]
    except Exception as e:
        logger.exception(f"Unexpected error executing tool {name}")
        return [TextContent(type="text", text=f"Unexpected error: {e}")]


def log_configuration(services: Services) -> None:
    """Summarize which favorites features are usable with the current environment."""
    auth = services.favorites.auth
    if auth.is_authenticated():
        logger.info(f"Favorites user: {auth.current_user_id()}")
    else:
        logger.info("STEAM_USER_ID not set; favorites tools will report 'not signed in'")

    store_path = getattr(services.favorites.store, "path", None)
    if store_path is not None:
        logger.info(f"Favorites store: {store_path}")
    logger.info(f"Steam catalog refreshed every {services.catalog.ttl:.0f}s")
    if not services.rawg.api_key:
        logger.warning(
            "RAWG_API_KEY not set; name enrichment and game browsing may be rejected by RAWG"
        )


async def run_server() -> None:
    """Run the MCP server."""
    global services, endpoint_manager

    services = Services.create()
    log_configuration(services)

    discover_endpoints()
    endpoint_manager = EndpointManager(services)
    logger.info(f"Loaded {len(endpoint_manager.get_all_tools())} tools from endpoint modules")

    async with stdio_server() as (read_stream, write_stream):
        try:
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name="steam-favorites",
                    server_version=__version__,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )
        finally:
            logger.info(f"Steam response cache at shutdown: {services.steam.cache_stats}")
            await services.close()


def main() -> None:
    """Main entry point."""
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
