# tests/test_protocol.py
"""Tests for the line-oriented wire codec."""

import pytest

from pow_quote.core.errors import MalformedMessageError, UnknownHeaderError
from pow_quote.core.protocol import (
    Header,
    Message,
    decode,
    decode_bytes,
    encode,
    encode_bytes,
)


class TestEncode:
    """Test the encode function."""

    def test_encode_with_payload(self):
        message = Message(Header.RESPONSE_RESOURCE, "hidden treasures")
        assert encode(message) == "4|hidden treasures\n"

    def test_encode_without_payload(self):
        assert encode(Message(Header.REQUEST_CHALLENGE)) == "1|\n"

    def test_encode_rejects_line_breaks(self):
        with pytest.raises(MalformedMessageError):
            encode(Message(Header.RESPONSE_RESOURCE, "two\nlines"))

    def test_encode_bytes_is_utf8(self):
        raw = encode_bytes(Message(Header.RESPONSE_RESOURCE, "naïve"))
        assert raw == "4|naïve\n".encode("utf-8")


class TestDecode:
    """Test the decode function."""

    def test_decode_request_challenge(self):
        assert decode("1|\n") == Message(Header.REQUEST_CHALLENGE, "")

    def test_decode_without_separator_has_empty_payload(self):
        assert decode("0\n") == Message(Header.QUIT, "")

    def test_decode_strips_crlf_only(self):
        assert decode("4| padded \r\n").payload == " padded "

    def test_decode_splits_on_first_separator_only(self):
        message = decode("3|a|b|c\n")
        assert message.header is Header.REQUEST_RESOURCE
        assert message.payload == "a|b|c"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "\n",
            "abc|payload\n",
            "|payload\n",
            "1.5|x\n",
            " 1|\n",
            "+1|\n",
            "1_0|\n",
            "\u0661|\n",
            "--1|\n",
        ],
    )
    def test_decode_non_integer_header(self, line):
        with pytest.raises(MalformedMessageError):
            decode(line)

    @pytest.mark.parametrize("line", ["5|\n", "-1|\n", "42\n"])
    def test_decode_unknown_header(self, line):
        with pytest.raises(UnknownHeaderError):
            decode(line)

    def test_decode_bytes_rejects_invalid_utf8(self):
        with pytest.raises(MalformedMessageError):
            decode_bytes(b"4|\xff\xfe\n")


class TestRoundTrip:
    """decode(encode(m)) == m for payloads with and without the separator."""

    @pytest.mark.parametrize(
        "payload",
        [
            "",
            "plain text",
            '{"Version":1,"ZerosCount":4,"Resource":"127.0.0.1:1"}',
            "with|separator",
            "|leading and trailing|",
        ],
    )
    def test_round_trip(self, payload):
        for header in Header:
            message = Message(header, payload)
            assert decode(encode(message)) == message
