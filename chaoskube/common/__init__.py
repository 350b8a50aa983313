import re

from enum import Enum

from typing import Union


class CycleOutcome(Enum):
    """
    All possible results of a single chaos cycle.
    """
    # A victim was chosen and terminated (or would have been, in dry-run)
    TERMINATED = 1
    # The current time falls into an excluded weekday or hour range
    SUPPRESSED = 2
    # Filtering left no eligible pods
    NO_CANDIDATES = 3


# Useful for validating boolean user input
true_list = [
   'true', '1', 't', 'y', 'yes'
]
false_list = [
   'false', '0', 'f', 'n', 'no'
]

# Duration units understood by parse_duration, in seconds
_duration_units = {
    'ms': 0.001,
    's': 1,
    'm': 60,
    'h': 3600,
}
_duration_part = re.compile(r'(\d+(?:\.\d+)?)(ms|s|m|h)')


def parse_duration(duration: Union[str, int, float]) -> float:
    """
    Convert a duration such as "10m", "30s" or "1h30m" into seconds.

    A bare number is taken as seconds.

    :param duration: The duration to convert.
        Required.
    :type duration: Union[str, int, float]
    :return: float
    """
    if isinstance(duration, (int, float)):
        seconds = float(duration)
    else:
        text = duration.strip().lower()
        try:
            seconds = float(text)
        except ValueError:
            parts = _duration_part.findall(text)
            if not parts or ''.join(n + u for n, u in parts) != text:
                raise ValueError("invalid duration: '{}'".format(duration))
            seconds = sum(float(n) * _duration_units[u] for n, u in parts)
    if seconds <= 0:
        raise ValueError("duration must be positive: '{}'".format(duration))
    return seconds


# Chaos defaults
# Please keep defaults in lexically acending order by name
DEFAULT_CHAOS_DRY_RUN=True
DEFAULT_CHAOS_GRACE_PERIOD=30
DEFAULT_CHAOS_INTERVAL="10m"
DEFAULT_CHAOS_TIMEZONE="UTC"
