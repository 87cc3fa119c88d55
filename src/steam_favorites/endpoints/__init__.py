"""MCP tool modules.

Each module groups related tools in a BaseEndpoint subclass; importing the
module registers its tools.
"""

from .base import BaseEndpoint, EndpointRegistry, endpoint

__all__ = ["BaseEndpoint", "endpoint", "EndpointRegistry"]
