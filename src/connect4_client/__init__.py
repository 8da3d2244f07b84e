"""Connect-4 client: keeps a local game in step with the game server."""

__version__ = "0.3.0"
