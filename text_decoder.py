"""Decoding of length-prefixed text attributes and AC error text."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Pattern, Sequence

from constants import (
    DEFAULT_ERROR_FALLBACK,
    DEFAULT_KNOWN_ERROR_PATTERNS,
    ERROR_TEXT_MODE_CLASSIFY,
    ERROR_TEXT_MODE_PASSTHROUGH,
    NO_ERROR_TEXTS,
)
from errors import ConfigurationError

logger = logging.getLogger(__name__)


def decode_length_prefixed(data: Any) -> str:
    """
    Decode a character string attribute laid out as
      [length, byte_0 .. byte_{length-1}, ...trailing]
    and return it trimmed. Never raises: a length beyond the buffer decodes
    the bytes that are there, and ``None`` or an empty buffer gives "".
    """
    if data is None:
        return ""
    if isinstance(data, str):
        return data.strip()
    try:
        buffer = list(data)
    except TypeError:
        logger.debug(f"Cannot decode text attribute of type {type(data).__name__}")
        return ""
    if not buffer:
        return ""

    try:
        length = int(buffer[0]) & 0xFF
    except (TypeError, ValueError):
        logger.debug(f"Malformed length prefix {buffer[0]!r}")
        return ""
    payload = buffer[1:1 + length]
    if len(payload) < length:
        logger.debug(f"Text attribute truncated: expected {length} bytes, got {len(payload)}")

    raw = bytearray()
    for item in payload:
        try:
            raw.append(int(item) & 0xFF)
        except (TypeError, ValueError):
            logger.debug(f"Skipping non-byte item {item!r} in text attribute")
    return raw.decode("latin-1").strip()


class ErrorKind(str, Enum):
    NO_ERROR = "no_error"
    KNOWN_ERROR = "known_error"
    UNKNOWN_ERROR = "unknown_error"


@dataclass(frozen=True)
class ErrorText:
    """Classified error text: ``text`` is shown to users, ``raw`` is kept for diagnostics."""
    kind: ErrorKind
    text: str
    raw: str


class ErrorTextPolicy:
    """Classify AC error text as no error, a known vendor error or unknown."""

    def __init__(
        self,
        known_patterns: Iterable[str] = DEFAULT_KNOWN_ERROR_PATTERNS,
        fallback: str = DEFAULT_ERROR_FALLBACK,
        mode: str = ERROR_TEXT_MODE_CLASSIFY,
        no_error_texts: Sequence[str] = NO_ERROR_TEXTS,
    ):
        if mode not in (ERROR_TEXT_MODE_CLASSIFY, ERROR_TEXT_MODE_PASSTHROUGH):
            raise ConfigurationError(f"Unknown error text mode: {mode}")
        try:
            self.patterns: Sequence[Pattern[str]] = [
                re.compile(p, re.IGNORECASE) for p in known_patterns
            ]
        except re.error as e:
            raise ConfigurationError(f"Invalid known error pattern: {e}") from e
        self.fallback = fallback
        self.mode = mode
        self.no_error_texts = {t.lower() for t in no_error_texts}

    @property
    def passthrough(self) -> bool:
        return self.mode == ERROR_TEXT_MODE_PASSTHROUGH

    def classify(self, text: str) -> ErrorText:
        """Classify trimmed error ``text``; passthrough mode keeps it as is."""
        if self.passthrough:
            kind = ErrorKind.NO_ERROR if not text else ErrorKind.KNOWN_ERROR
            return ErrorText(kind=kind, text=text, raw=text)

        if text.lower() in self.no_error_texts:
            return ErrorText(kind=ErrorKind.NO_ERROR, text="", raw=text)
        if self._match(text) is not None:
            return ErrorText(kind=ErrorKind.KNOWN_ERROR, text=text, raw=text)
        logger.info(f"Unrecognised AC error text: {text!r}")
        return ErrorText(kind=ErrorKind.UNKNOWN_ERROR, text=self.fallback, raw=text)

    def _match(self, text: str) -> Optional[Pattern[str]]:
        for pattern in self.patterns:
            if pattern.search(text):
                return pattern
        return None
