"""Tool registration and routing for the MCP server.

Endpoint classes subclass BaseEndpoint and mark async methods with
@endpoint. Defining the class is enough to register its tools; the
EndpointManager instantiates each class once and routes calls to it.

Example:

    class Catalog(BaseEndpoint):
        '''Catalog tools.'''

        @endpoint(
            name="search_apps",
            description="Search the Steam catalog by name",
            params={"query": {"type": "string", "description": "Name fragment"}},
        )
        async def search_apps(self, query: str) -> str:
            entries = await self.services.catalog.search(query)
            return "\\n".join(e.name for e in entries)
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, TypeVar

from mcp.types import TextContent, Tool

from steam_favorites.client import GamerPowerAPIError, RawgAPIError, SteamAPIError
from steam_favorites.favorites.errors import FavoritesError
from steam_favorites.services import Services


logger = logging.getLogger(__name__)

# Type for async endpoint methods
F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, str]])

_SCHEMA_KEYS = ("enum", "default", "minimum", "maximum", "items")


@dataclass
class EndpointTool:
    """Metadata for a registered tool."""

    name: str
    description: str
    input_schema: dict[str, Any]
    handler: Callable[..., Coroutine[Any, Any, str]]
    endpoint_class: type["BaseEndpoint"]
    supports_json: bool = False


class EndpointRegistry:
    """Process-wide registry of tools and the classes that define them."""

    _tools: dict[str, EndpointTool] = {}
    _endpoint_classes: list[type["BaseEndpoint"]] = []

    @classmethod
    def register_tool(cls, tool: EndpointTool) -> None:
        if tool.name in cls._tools:
            logger.warning(f"Tool '{tool.name}' already registered, overwriting")
        cls._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    @classmethod
    def register_endpoint_class(cls, endpoint_class: type["BaseEndpoint"]) -> None:
        if endpoint_class not in cls._endpoint_classes:
            cls._endpoint_classes.append(endpoint_class)

    @classmethod
    def get_tool(cls, name: str) -> EndpointTool | None:
        return cls._tools.get(name)

    @classmethod
    def get_all_tools(cls) -> list[EndpointTool]:
        return list(cls._tools.values())

    @classmethod
    def get_mcp_tools(cls) -> list[Tool]:
        """All tools in MCP Tool format."""
        return [
            Tool(name=t.name, description=t.description, inputSchema=t.input_schema)
            for t in cls._tools.values()
        ]

    @classmethod
    def clear(cls) -> None:
        """Forget every registration (useful for testing)."""
        cls._tools = {}
        cls._endpoint_classes = []


def _build_input_schema(params: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Build a JSON Schema object from parameter definitions."""
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name, param in params.items():
        prop = {
            "type": param.get("type", "string"),
            "description": param.get("description", ""),
        }
        for key in _SCHEMA_KEYS:
            if key in param:
                prop[key] = param[key]
        if param.get("required", True):
            required.append(name)
        properties[name] = prop

    return {"type": "object", "properties": properties, "required": required}


def endpoint(
    name: str,
    description: str,
    params: dict[str, dict[str, Any]] | None = None,
    supports_json: bool = False,
) -> Callable[[F], F]:
    """
    Mark an async method as an MCP tool.

    Args:
        name: Tool name, unique across all endpoint classes
        description: What the tool does, shown to the model
        params: Parameter definitions (type, description, required, enum,
                default, minimum, maximum, items)
        supports_json: Adds a 'format' parameter switching between 'text'
                       (default) and 'json' output
    """
    params = dict(params or {})
    if supports_json:
        params["format"] = {
            "type": "string",
            "description": "Output format: 'text' for readable output, 'json' for structured JSON",
            "enum": ["text", "json"],
            "default": "text",
            "required": False,
        }
    input_schema = _build_input_schema(params)

    def decorator(func: F) -> F:
        func._endpoint_meta = {  # type: ignore[attr-defined]
            "name": name,
            "description": description,
            "input_schema": input_schema,
            "supports_json": supports_json,
        }
        return func

    return decorator


class BaseEndpointMeta(type):
    """Registers endpoint classes and their tools when they are defined."""

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs: Any,
    ) -> type:
        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        if any(isinstance(b, BaseEndpointMeta) for b in bases):
            EndpointRegistry.register_endpoint_class(cls)  # type: ignore[arg-type]
            for attr_value in namespace.values():
                meta = getattr(attr_value, "_endpoint_meta", None)
                if meta is None:
                    continue
                EndpointRegistry.register_tool(
                    EndpointTool(
                        name=meta["name"],
                        description=meta["description"],
                        input_schema=meta["input_schema"],
                        handler=attr_value,
                        endpoint_class=cls,  # type: ignore[arg-type]
                        supports_json=meta["supports_json"],
                    )
                )

        return cls


class BaseEndpoint(metaclass=BaseEndpointMeta):
    """
    Base class for tool groups.

    Attributes:
        services: The service graph (catalog, favorites, news, clients)
    """

    def __init__(self, services: Services) -> None:
        self.services = services

    @staticmethod
    def to_json(data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False)


class EndpointManager:
    """Instantiates endpoint classes and routes tool calls to them."""

    def __init__(self, services: Services) -> None:
        self.services = services
        self._instances: dict[type[BaseEndpoint], BaseEndpoint] = {}

    def _get_instance(self, endpoint_class: type[BaseEndpoint]) -> BaseEndpoint:
        if endpoint_class not in self._instances:
            self._instances[endpoint_class] = endpoint_class(self.services)
        return self._instances[endpoint_class]

    def get_all_tools(self) -> list[Tool]:
        return EndpointRegistry.get_mcp_tools()

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None
    ) -> list[TextContent]:
        """
        Run a tool and wrap its output as text content.

        Expected failures (bad arguments, auth, upstream errors) come back as
        "Error: ..." text instead of raising.

        Raises:
            ValueError: If no tool has this name
        """
        tool = EndpointRegistry.get_tool(name)
        if not tool:
            raise ValueError(f"Unknown tool: {name}")

        instance = self._get_instance(tool.endpoint_class)
        try:
            result = await tool.handler(instance, **(arguments or {}))
        except (
            ValueError,
            TypeError,
            FavoritesError,
            SteamAPIError,
            RawgAPIError,
            GamerPowerAPIError,
        ) as e:
            logger.warning(f"Tool {name} failed: {e}")
            result = f"Error: {e}"
        return [TextContent(type="text", text=result)]
