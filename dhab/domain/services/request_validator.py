"""Domain service helpers for validating caller supplied query parameters."""

from typing import Optional, Union

from dhab.domain.entities.errors import InvalidRequestError
from dhab.domain.entities.gold import Karat

HISTORY_MAX_DAYS = 1825
PREDICTION_MAX_DAYS = 30


def parse_karat(value: Optional[str], default: Karat = Karat.K24) -> Karat:
    """Map a query value onto the closed karat enumeration.

    Raises:
        InvalidRequestError: If the value is not one of the known karats.
    """
    if value is None or value == "":
        return default
    try:
        return Karat(value)
    except ValueError:
        raise InvalidRequestError(
            f"Invalid karat. Must be one of: {', '.join(Karat.values())}",
            details={"karat": value},
        ) from None


def parse_int_in_range(
    value: Union[str, int, None],
    *,
    name: str,
    default: int,
    minimum: int,
    maximum: int,
) -> int:
    """Parse an integer query parameter and check ``minimum <= x <= maximum``.

    Raises:
        InvalidRequestError: If the value is not an integer or out of range.
    """
    if value is None or value == "":
        return default

    message = f"Invalid {name} parameter. Must be between {minimum} and {maximum}"
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(message, details={name: value}) from None

    if not minimum <= parsed <= maximum:
        raise InvalidRequestError(message, details={name: value})
    return parsed
