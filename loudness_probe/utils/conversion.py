"""Duration parsing and unit conversion utilities."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

MICROSECONDS_PER_SECOND = Decimal(1_000_000)


def parse_seconds(text: str) -> Decimal:
    """Parse a duration in seconds as printed by sox.

    Args:
        text: Numeric text (e.g. '181.23')

    Returns:
        Exact decimal value

    Raises:
        ValueError: If the text is not a finite number
    """
    try:
        value = Decimal(text.strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {text!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not a finite number: {text!r}")
    return value


def seconds_to_microseconds(seconds: Union[Decimal, float, str]) -> int:
    """Convert seconds to whole microseconds.

    Rounds half away from zero, so 0.0000005 s becomes 1 µs.

    Args:
        seconds: Duration in seconds

    Returns:
        Duration in microseconds
    """
    if not isinstance(seconds, Decimal):
        seconds = Decimal(str(seconds))
    micros = (seconds * MICROSECONDS_PER_SECOND).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    return int(micros)
