"""
Common value types used in JSON API models.

Annotate pydantic model fields with these aliases to get the wire encoding
most APIs use:

- ``Decimal``: JSON number in and out, limited to what an IEEE 754 double
  holds (about 15 significant digits) in both directions. Output is always
  written as a float. Input digits past a double are not guaranteed to
  survive either, and any value read this way loses them when it is written
  back. Amounts needing more digits should be exchanged as strings (plain
  ``decimal.Decimal`` fields).
- ``CountryCode``: ISO 3166-1 alpha-2, e.g. ``"HU"``, checked against the
  ISO 3166 registry.
- ``Date``: ``YYYY-MM-DD``.
- ``Rfc3339DateTime``: offset-aware timestamp as an RFC 3339 string.
- ``UnixTimestamp``: integer seconds since the epoch on the wire, an
  offset-aware UTC ``datetime`` in Python.
"""

import datetime as dt
import decimal
from typing import Annotated, Any

from pydantic import AwareDatetime, BeforeValidator, PlainSerializer
from pydantic_extra_types.country import CountryAlpha2


def _from_unix_seconds(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)
    if isinstance(value, dt.datetime):
        return value
    raise ValueError("Unix timestamp must be an integer number of seconds")


Decimal = Annotated[
    decimal.Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

CountryCode = Annotated[
    CountryAlpha2,
    BeforeValidator(lambda v: v.upper() if isinstance(v, str) else v),
]

Date = dt.date

Rfc3339DateTime = Annotated[
    AwareDatetime,
    PlainSerializer(lambda v: v.isoformat(), return_type=str, when_used="json"),
]

# AwareDatetime keeps timestamp() independent of the host time zone.
UnixTimestamp = Annotated[
    AwareDatetime,
    BeforeValidator(_from_unix_seconds),
    PlainSerializer(lambda v: int(v.timestamp()), return_type=int, when_used="json"),
]

__all__ = ["CountryCode", "Date", "Decimal", "Rfc3339DateTime", "UnixTimestamp"]
