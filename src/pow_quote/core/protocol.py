"""Line-oriented wire codec.

Each message is one line: ``<header-int>|<payload>\\n``. The payload is opaque
here; challenge and resource payloads are puzzle JSON handled elsewhere.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from pow_quote.core.errors import MalformedMessageError, UnknownHeaderError

SEPARATOR = "|"
LINE_TERMINATOR = "\n"


class Header(IntEnum):
    """Message kinds understood by client and server."""

    QUIT = 0
    REQUEST_CHALLENGE = 1
    RESPONSE_CHALLENGE = 2
    REQUEST_RESOURCE = 3
    RESPONSE_RESOURCE = 4


@dataclass(frozen=True)
class Message:
    """A single request or response unit."""

    header: Header
    payload: str = ""


def encode(message: Message) -> str:
    """Render a message as one newline-terminated line.

    Raises:
        MalformedMessageError: If the payload contains a line break and so
            cannot be framed.
    """
    if "\n" in message.payload or "\r" in message.payload:
        raise MalformedMessageError("payload must not contain line breaks")
    return f"{int(message.header)}{SEPARATOR}{message.payload}{LINE_TERMINATOR}"


def decode(line: str) -> Message:
    """Parse one line into a message.

    Only the first separator splits header from payload, so payloads may
    contain ``|`` themselves. A line without a separator has an empty payload.

    Raises:
        MalformedMessageError: If the header is not an integer.
        UnknownHeaderError: If the header is an integer with no known meaning.
    """
    text = line.rstrip("\r\n")
    header_text, _, payload = text.partition(SEPARATOR)
    # Plain ASCII digits with an optional minus sign; int() alone also takes
    # whitespace, "+", underscores and non-ASCII digits.
    digits = header_text.removeprefix("-")
    if not (digits.isascii() and digits.isdigit()):
        raise MalformedMessageError(f"cannot parse header {header_text!r}")
    header_value = int(header_text)
    try:
        header = Header(header_value)
    except ValueError:
        raise UnknownHeaderError(f"unknown header {header_value}") from None
    return Message(header=header, payload=payload)


def encode_bytes(message: Message) -> bytes:
    """Encode a message for a byte stream (UTF-8)."""
    return encode(message).encode("utf-8")


def decode_bytes(raw: bytes) -> Message:
    """Decode one UTF-8 line read from a byte stream.

    Raises:
        MalformedMessageError: If the bytes are not valid UTF-8.
    """
    try:
        line = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedMessageError("message is not valid UTF-8") from exc
    return decode(line)
