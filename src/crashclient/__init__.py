"""crashclient — realtime session client for a multiplayer crash game."""

__version__ = "0.1.0"
