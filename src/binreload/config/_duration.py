"""Go-style duration strings.

Durations are written as a sequence of decimal numbers, each with an optional
fraction and a unit suffix, such as "300ms", "1.5h" or "2h45m". Valid units
are "ns", "us" (or "µs"), "ms", "s", "m" and "h". A bare "0" is also accepted.
"""

import re

from binreload.exceptions import DurationError

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # noqa: RUF001
    "μs": 1e-6,  # noqa: RUF001
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Longest units first so "ms" wins over "m"
_COMPONENT = re.compile(
    r"(\d+(?:\.\d*)?|\.\d+)("
    + "|".join(sorted((re.escape(u) for u in _UNIT_SECONDS), key=len, reverse=True))
    + r")"
)


def parse_duration(value: str, *, field: str | None = None) -> float:
    """Parse a duration string into seconds.

    Args:
        value: The duration string, e.g. "3s" or "500ms".
        field: Name of the setting being parsed, for error context.

    Returns:
        The duration in seconds.

    Raises:
        DurationError: If the string is malformed or negative.

    Examples:
        >>> parse_duration("3s")
        3.0
        >>> parse_duration("1m30s")
        90.0
    """
    text = value.strip()
    if not text:
        msg = "Duration must not be empty"
        raise DurationError(msg, value=value, field=field)

    if text[0] in "+-":
        if text[0] == "-":
            msg = f"Duration must not be negative: {value!r}"
            raise DurationError(msg, value=value, field=field)
        text = text[1:]

    if text == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            msg = f"Invalid duration {value!r}: expected e.g. '3s', '500ms' or '1m30s'"
            raise DurationError(msg, value=value, field=field)
        number, unit = match.groups()
        total += float(number) * _UNIT_SECONDS[unit]
        pos = match.end()

    if pos == 0:
        msg = f"Invalid duration {value!r}"
        raise DurationError(msg, value=value, field=field)

    return total
