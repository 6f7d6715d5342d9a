"""Pydantic data types for Medallion models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, TypeAlias

from pydantic import AfterValidator, BeforeValidator, PlainSerializer
from safir.pydantic import UtcDatetime

__all__ = ["Timestamp"]


def _parse_timestamp(v: Any) -> Any:
    """Pydantic validator for the wire form of timestamp claims.

    On the wire, timestamp claims are integer seconds since the epoch. Unlike
    the lax `datetime` parsing in Pydantic, no other representation is
    accepted: no strings, no floats, and no guessing that large numbers are
    milliseconds. `datetime` objects are passed through for claims built in
    Python.

    Parameters
    ----------
    v
        Field representing a timestamp claim.

    Returns
    -------
    datetime
        The corresponding time.

    Raises
    ------
    ValueError
        Raised if the value is not a `datetime` or a non-negative integer, or
        if it is out of range.
    """
    if isinstance(v, datetime):
        return v
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError("Timestamp must be an integer number of seconds")
    if v < 0:
        raise ValueError("Timestamp must not be before the epoch")
    try:
        return datetime.fromtimestamp(v, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Timestamp {v} is out of range") from e


def _normalize_timestamp(v: datetime) -> datetime:
    """Pydantic validator for timestamp claims.

    Claims on the wire are whole seconds since the epoch, so drop any
    fractional seconds so that a round trip through the wire format yields an
    equal value. Times before the epoch have no wire representation.

    Parameters
    ----------
    v
        Field representing a timestamp claim, already converted to UTC.

    Returns
    -------
    datetime
        The timestamp truncated to whole seconds.

    Raises
    ------
    ValueError
        Raised if the timestamp is before the epoch.
    """
    if v < datetime.fromtimestamp(0, tz=UTC):
        raise ValueError("Timestamp must not be before the epoch")
    return v.replace(microsecond=0)


Timestamp: TypeAlias = Annotated[
    UtcDatetime,
    BeforeValidator(_parse_timestamp),
    AfterValidator(_normalize_timestamp),
    PlainSerializer(lambda t: int(t.timestamp()), return_type=int),
]
"""Type for a `datetime` claim that is seconds since epoch on the wire."""
