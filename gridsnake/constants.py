"""Gameplay constants shared across the server modules."""

GRID_SIZE: int = 256

NORMAL_FOOD_POINTS: int = 1
SPECIAL_FOOD_POINTS: int = 5
SPECIAL_FOOD_EXTRA_SEGMENTS: int = 4
SPECIAL_FOOD_CHANCE: float = 0.2
MAX_FOOD: int = 130

PORTAL_BOOST: float = 25.0
MAX_SPEED_BOOST: float = 100.0
SPEED_BOOST_DECAY: float = 0.5

MINIMAP_DURATION: int = 20

INITIAL_FOOD_SPAWNS: int = 100
INITIAL_PORTAL_COUNT: int = 5
INITIAL_YELLOW_DOTS: int = 5
MAX_YELLOW_DOTS: int = 5

FOOD_SPAWN_INTERVAL: float = 5.0
PORTAL_SPAWN_INTERVAL: float = 20.0
YELLOW_DOT_SPAWN_INTERVAL: float = 60.0
BROADCAST_INTERVAL: float = 1.0

SESSION_REAP_INTERVAL: float = 30 * 60.0
SESSION_MAX_AGE: float = 2 * 60 * 60.0
SESSION_CODE_LENGTH: int = 6
SESSION_CODE_ALPHABET: str = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MIN_SESSION_PLAYERS: int = 2

MAX_SPAWN_ATTEMPTS: int = 100
MAX_NAME_LENGTH: int = 16
