"""HTTP clients for the Steam Web API, RAWG and GamerPower."""

from .gamerpower_client import GamerPowerAPIError, GamerPowerClient
from .rawg_client import RawgAPIError, RawgClient
from .steam_client import SteamAPIError, SteamClient

__all__ = [
    "SteamClient",
    "SteamAPIError",
    "RawgClient",
    "RawgAPIError",
    "GamerPowerClient",
    "GamerPowerAPIError",
]
