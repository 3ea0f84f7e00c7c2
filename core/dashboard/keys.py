"""
Application identifiers as received at the HTTP boundary.

A path segment is either a numeric application id or an application name. It is
resolved once into an ``ApplicationKey`` so the rest of the code never re-sniffs it.
"""
from dataclasses import dataclass
from typing import Union

from ..exceptions import InvalidApplicationKeyError


@dataclass(frozen=True)
class ById:
    """Lookup by ``dim_snapshots.application_id``."""
    application_id: int

    def __str__(self) -> str:
        return str(self.application_id)


@dataclass(frozen=True)
class ByName:
    """Lookup by ``dim_snapshots.application_name``."""
    name: str

    def __str__(self) -> str:
        return self.name


ApplicationKey = Union[ById, ByName]


def parse_application_key(raw: str) -> ApplicationKey:
    """Parse a raw identifier: all digits means an id, anything else a name."""
    if raw is None or not str(raw).strip():
        raise InvalidApplicationKeyError("Application identifier must not be empty")

    value = str(raw).strip()
    if value.isascii() and value.isdigit():
        return ById(int(value))
    return ByName(value)
