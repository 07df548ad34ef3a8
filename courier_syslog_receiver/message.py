# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Message model for decoded syslog events

# Standard library imports
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional

# Third-party imports
from pydantic import BaseModel, Field

# user.notice, used when a packet carries no <PRI> prefix
DEFAULT_PRIORITY = 13


class Severity(IntEnum):
    """
    Syslog severity, the low three bits of the priority value.
    """

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


class Facility(IntEnum):
    """
    Syslog facilities defined by RFC 3164/5424.

    Priority values of up to three digits can encode facilities past LOCAL7,
    which is why Message.facility is a plain int.
    """

    KERN = 0
    USER = 1
    MAIL = 2
    DAEMON = 3
    AUTH = 4
    SYSLOG = 5
    LPR = 6
    NEWS = 7
    UUCP = 8
    CRON = 9
    AUTHPRIV = 10
    FTP = 11
    NTP = 12
    SECURITY = 13
    CONSOLE = 14
    SOLARIS_CRON = 15
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22
    LOCAL7 = 23


class Message(BaseModel):
    """
    One decoded syslog event.

    Attributes:
        source: Address of the sender, (host, port) for network listeners or
            the peer name for Unix sockets.
        arrival_time: When the server received the packet.
        priority: The priority value used to derive severity and facility.
        severity: Severity (priority & 0x7).
        facility: Facility (priority >> 3).
        timestamp: Timestamp parsed from the packet header, if any.
        hostname: Reporting host parsed from the packet header, if any.
        tag: Body prefix up to the first character that is not a letter,
            digit or allowed tag rune.
        content: Body from that character onwards.
        tag1: Body prefix up to the first whitespace character.
        content1: Body after that whitespace, leading whitespace stripped.
    """

    source: Any = None
    arrival_time: datetime
    priority: int = DEFAULT_PRIORITY
    severity: Severity = Severity(DEFAULT_PRIORITY & 0x07)
    facility: int = Field(default=DEFAULT_PRIORITY >> 3, ge=0)
    timestamp: Optional[datetime] = None
    hostname: Optional[str] = None
    tag: Optional[str] = None
    content: str = ""
    tag1: Optional[str] = None
    content1: str = ""

    @property
    def severity_name(self) -> str:
        return self.severity.name.lower()

    @property
    def facility_name(self) -> str:
        try:
            return Facility(self.facility).name.lower()
        except ValueError:
            return "unknown"

    def __str__(self) -> str:
        return (
            f"<{self.priority}> {self.timestamp.isoformat() if self.timestamp else '-'} "
            f"{self.hostname or '-'} {self.tag or ''}{self.content}"
        )
