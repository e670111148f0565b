"""Authoritative server for the gridsnake multiplayer game."""

__all__ = [
    "collision",
    "commands",
    "config",
    "constants",
    "context",
    "handlers",
    "items",
    "main",
    "movement",
    "player",
    "protocol",
    "session",
    "spawner",
    "utils",
    "world",
]
