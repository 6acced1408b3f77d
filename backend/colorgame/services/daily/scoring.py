import math

from .results import RGB

# Length of the RGB cube diagonal: distance from black to white
MAX_DISTANCE = math.sqrt(3 * 255 ** 2)


def _round_half_away_from_zero(value: float) -> int:
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def score(target: RGB, submitted: RGB) -> int:
    """Score a guess 0-100 by Euclidean distance in RGB space.

    100 is an exact match, 0 is the opposite corner of the cube. Halves round
    away from zero so identical inputs always produce identical scores.
    """
    distance = math.sqrt(
        (target.r - submitted.r) ** 2
        + (target.g - submitted.g) ** 2
        + (target.b - submitted.b) ** 2
    )
    raw = _round_half_away_from_zero((1 - distance / MAX_DISTANCE) * 100)
    return max(0, min(100, raw))


def feedback_message(value: int, exhausted: bool = False) -> str:
    if value == 100:
        message = 'Perfect match! You got the exact color!'
    elif value >= 90:
        message = 'Excellent! Very close!'
    elif value >= 75:
        message = 'Great job! Pretty close!'
    elif value >= 50:
        message = 'Not bad! Keep trying!'
    else:
        message = 'Keep practicing!'
    if exhausted:
        message += ' No more attempts left for today.'
    return message
