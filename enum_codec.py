"""Bidirectional tables between protocol codes and state tokens."""

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from errors import InvalidArgument

logger = logging.getLogger(__name__)


class EnumTable:
    """Closed mapping between integer codes and string tokens.

    Several codes may decode to the same token. The first code listed for a
    token is the one used when encoding, unless ``canonical`` says otherwise.
    """

    def __init__(
        self,
        name: str,
        codes: Mapping[int, str],
        fallback: str,
        canonical: Optional[Mapping[str, int]] = None,
    ):
        if fallback not in codes.values():
            raise ValueError(f"{name}: fallback '{fallback}' is not a token of the table")
        reverse: Dict[str, int] = {}
        for code, token in codes.items():
            reverse.setdefault(token, code)
        for token, code in (canonical or {}).items():
            if codes.get(code) != token:
                raise ValueError(f"{name}: canonical code {code:#04x} does not decode to '{token}'")
            reverse[token] = code
        self.name = name
        self.fallback = fallback
        self._codes = MappingProxyType(dict(codes))
        self._tokens = MappingProxyType(reverse)

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(self._tokens)

    @property
    def codes(self) -> Mapping[int, str]:
        return self._codes

    @property
    def reverse(self) -> Mapping[str, int]:
        return self._tokens

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __repr__(self) -> str:
        return f"EnumTable({self.name!r}, tokens={list(self._tokens)})"


def decode(table: EnumTable, code: Any) -> str:
    """Return the token for ``code``, or the table fallback when unmapped."""
    try:
        key = int(code)
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"{table.name}: non-integer code {code!r}, using '{table.fallback}'")
        return table.fallback
    token = table.codes.get(key)
    if token is None:
        logger.debug(f"{table.name}: unmapped code {key}, using '{table.fallback}'")
        return table.fallback
    return token


def encode(table: EnumTable, token: Any) -> int:
    """Return the code for ``token``; unknown tokens raise InvalidArgument."""
    if not isinstance(token, str) or token not in table:
        raise InvalidArgument(
            f"Invalid {table.name} '{token}', expected one of: {', '.join(table.tokens)}"
        )
    return table.reverse[token]


FAN_MODE = EnumTable(
    "fan_mode",
    {
        0x00: "auto",
        0x01: "low",       # P20
        0x02: "low-med",   # P40
        0x03: "medium",    # P60
        0x04: "med-high",  # P80
        0x05: "high",      # P100
        0x06: "quiet",     # SILENT
        0x0D: "quiet",     # TURBO
    },
    fallback="auto",
    canonical={"quiet": 0x06},
)

RUNNING_MODE = EnumTable(
    "running_state",
    {
        0x00: "idle",
        0x03: "cool",
        0x04: "heat",
        0x07: "fan_only",
    },
    fallback="idle",
)

SYSTEM_MODE = EnumTable(
    "system_mode",
    {
        0x00: "off",
        0x01: "auto",
        0x03: "cool",
        0x04: "heat",
        0x07: "fan_only",
        0x08: "dry",
    },
    fallback="off",
)
