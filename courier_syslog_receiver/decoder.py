# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Syslog packet decoder
#
# Decodes a raw packet into a Message. Two header layouts are recognised, both
# detected purely from byte positions:
#   - RFC 3339 timestamp (25 bytes, e.g. "2003-10-11T22:14:15+02:00"), hostname at 26
#   - BSD timestamp (15 bytes, e.g. "Oct 11 22:14:15"), hostname at 16
# Anything else is treated as a bare message body.

# Standard library imports
import logging
import unicodedata

from datetime import datetime, timedelta, timezone
from typing import AbstractSet, Any, Optional, Tuple

# Local/package imports
from courier_syslog_receiver.message import DEFAULT_PRIORITY, Message, Severity

logger = logging.getLogger("courier_syslog_receiver.decoder")

MAX_PRIORITY_DIGITS = 3

RFC3339_TIMESTAMP_LENGTH = 25
RFC3339_HOSTNAME_OFFSET = 26
BSD_TIMESTAMP_LENGTH = 15
BSD_HOSTNAME_OFFSET = 16

RFC3339_FORMATS = ("%Y-%m-%dT%H:%M:%S%z", "%Y-%m-%dT%H:%M:%S.%f%z")
# BSD timestamps carry no year; 2000 is a leap year so "Feb 29" still parses
BSD_FORMAT = "%Y %b %d %H:%M:%S"
BSD_PLACEHOLDER_YEAR = 2000

TRAILING_BYTES = b"\x00\r\n"
# Accepted by str.isspace() but not separators in the loose split
INFORMATION_SEPARATORS = "\x1c\x1d\x1e\x1f"
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def parse_priority(packet: bytes) -> Tuple[int, bool, bytes]:
    """
    Strip an optional "<PRI>" prefix from a packet.

    Args:
        packet: The raw packet

    Returns:
        A tuple of (priority, has_priority, remainder). When no valid prefix
        is present the default priority is returned with the packet untouched.
    """
    if packet[:1] == b"<":
        end = packet.find(b">", 1)
        if 1 < end <= MAX_PRIORITY_DIGITS + 1:
            token = packet[1:end]
            if token.isdigit():
                return int(token), True, packet[end + 1 :]
    return DEFAULT_PRIORITY, False, packet


def _parse_rfc3339(field: bytes) -> Optional[datetime]:
    try:
        text = field.decode("ascii")
    except UnicodeDecodeError:
        return None

    for fmt in RFC3339_FORMATS:
        try:
            timestamp = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if timestamp == ZERO_TIME:
            return None
        return timestamp
    return None


def _with_year(parsed: datetime, year: int) -> datetime:
    while True:
        try:
            return parsed.replace(year=year)
        except ValueError:
            # Feb 29 outside of a leap year
            year -= 1


def _parse_bsd(field: bytes, arrival_time: datetime) -> Optional[datetime]:
    try:
        text = field.decode("ascii")
        parsed = datetime.strptime(f"{BSD_PLACEHOLDER_YEAR} {text}", BSD_FORMAT)
    except ValueError:
        # UnicodeDecodeError is a ValueError too
        return None

    parsed = parsed.replace(tzinfo=arrival_time.tzinfo)
    timestamp = _with_year(parsed, arrival_time.year)
    if timestamp - arrival_time > timedelta(days=1):
        # Sent on Dec 31, received on Jan 1
        timestamp = _with_year(parsed, arrival_time.year - 1)
    return timestamp


def parse_header(packet: bytes, arrival_time: datetime) -> Tuple[Optional[datetime], int]:
    """
    Detect the header layout of a packet by byte position.

    Args:
        packet: The packet with the priority prefix already removed
        arrival_time: Used to infer the year of BSD timestamps

    Returns:
        A tuple of (timestamp, hostname_offset). The offset is 0 when no
        header layout matched.
    """
    length = len(packet)

    if (
        length >= RFC3339_HOSTNAME_OFFSET
        and packet[RFC3339_TIMESTAMP_LENGTH] == 0x20
        and packet[BSD_TIMESTAMP_LENGTH] != 0x20
    ):
        timestamp = _parse_rfc3339(packet[:RFC3339_TIMESTAMP_LENGTH])
        if timestamp is not None:
            return timestamp, RFC3339_HOSTNAME_OFFSET

    if length >= BSD_HOSTNAME_OFFSET and packet[BSD_TIMESTAMP_LENGTH] == 0x20:
        timestamp = _parse_bsd(packet[:BSD_TIMESTAMP_LENGTH], arrival_time)
        if timestamp is not None:
            return timestamp, BSD_HOSTNAME_OFFSET

    return None, 0


def is_tag_char(char: str, allowed_tag_runes: AbstractSet[str]) -> bool:
    return char in allowed_tag_runes or unicodedata.category(char)[0] in ("L", "N")


def split_tag(body: str, allowed_tag_runes: AbstractSet[str]) -> Tuple[Optional[str], str]:
    """
    Split a body on the first character that cannot be part of a program tag.

    The delimiter stays at the start of the content.
    """
    for index, char in enumerate(body):
        if not is_tag_char(char, allowed_tag_runes):
            return body[:index], body[index:]
    return None, body


def is_space(char: str) -> bool:
    return char.isspace() and char not in INFORMATION_SEPARATORS


def _lstrip_space(text: str) -> str:
    index = 0
    while index < len(text) and is_space(text[index]):
        index += 1
    return text[index:]


def _strip_space(text: str) -> str:
    end = len(text)
    while end > 0 and is_space(text[end - 1]):
        end -= 1
    return _lstrip_space(text[:end])


def split_tag_loose(body: str) -> Tuple[Optional[str], str]:
    """
    Split a body on the first whitespace character after stripping it.

    The ASCII information separators (U+001C..U+001F) are not whitespace here.
    """
    body = _strip_space(body)
    for index, char in enumerate(body):
        if is_space(char):
            return body[:index], _lstrip_space(body[index + 1 :])
    return None, body


def decode(
    raw: bytes,
    arrival_time: datetime,
    source: Any = None,
    allowed_tag_runes: AbstractSet[str] = frozenset(),
) -> Message:
    """
    Decode a raw syslog packet into a Message.

    Never raises on malformed input; fields that cannot be recovered are left
    unset and the packet is logged for diagnostics.

    Args:
        raw: The packet bytes
        arrival_time: When the packet was received
        source: Address of the sender
        allowed_tag_runes: Characters besides letters and digits allowed in a tag

    Returns:
        The decoded message
    """
    priority, has_priority, packet = parse_priority(bytes(raw))

    timestamp: Optional[datetime] = None
    hostname: Optional[str] = None
    hostname_offset = 0
    if has_priority:
        timestamp, hostname_offset = parse_header(packet, arrival_time)

    if hostname_offset == 0:
        logger.info(
            "Packet did not parse correctly",
            extra={"log_msg": packet.decode("utf-8", errors="replace")},
        )
        body = packet
    else:
        end = packet.find(b" ", hostname_offset)
        if end < 0:
            body = packet[hostname_offset:]
        else:
            hostname = packet[hostname_offset:end].decode("utf-8", errors="replace")
            body = packet[end + 1 :]

    text = body.rstrip(TRAILING_BYTES).decode("utf-8", errors="replace")
    tag, content = split_tag(text, allowed_tag_runes)
    tag1, content1 = split_tag_loose(text)

    return Message(
        source=source,
        arrival_time=arrival_time,
        priority=priority,
        severity=Severity(priority & 0x07),
        facility=priority >> 3,
        timestamp=timestamp,
        hostname=hostname,
        tag=tag,
        content=content,
        tag1=tag1,
        content1=content1,
    )


class SyslogDecoder:
    """
    Decoder bound to a set of allowed tag runes.

    One instance is shared by every listener of a server; the rune set is
    replaced wholesale by set_allowed_runes().
    """

    def __init__(self, allowed_tag_runes: str = ""):
        self.allowed_tag_runes: AbstractSet[str] = frozenset(allowed_tag_runes)

    def set_allowed_runes(self, allowed: str) -> None:
        self.allowed_tag_runes = frozenset(allowed)

    def decode(
        self,
        raw: bytes,
        source: Any = None,
        arrival_time: Optional[datetime] = None,
    ) -> Message:
        if arrival_time is None:
            arrival_time = datetime.now(timezone.utc)
        return decode(raw, arrival_time, source, self.allowed_tag_runes)
