from gridsnake.utils import Position


def place(player, *cells, direction="RIGHT"):
    """Put ``player`` in play with a snake on ``cells`` (head first)."""

    player.snake = [Position(x, y) for x, y in cells]
    player.direction = direction
    player.is_playing = True
    return player


def of_type(events, type):
    return [event for event in events if event.type == type]
