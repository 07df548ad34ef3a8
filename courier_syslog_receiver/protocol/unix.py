# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Unix Stream Protocol implementation for syslog server


# Standard library imports
import asyncio

from typing import Any

# Local/package imports
from courier_syslog_receiver.protocol.base_stream import BaseSyslogBufferedProtocol


class SyslogUnixProtocol(BaseSyslogBufferedProtocol):
    """
    Unix Stream Protocol implementation for handling syslog messages.
    Inherits shared logic from BaseSyslogBufferedProtocol.
    """

    @property
    def logger_name(self) -> str:
        return "courier_syslog_receiver.protocol.unix"

    def get_source(self) -> Any:
        # Unbound client sockets have an empty peer name
        return self.peername or None

    def on_connection_made(self, transport: asyncio.BaseTransport) -> None:
        # Use socket peer credentials if available (for Linux)
        peer_creds = transport.get_extra_info("peercreds")

        if peer_creds and isinstance(peer_creds, tuple) and len(peer_creds) == 3:
            pid, uid, gid = peer_creds
            peer_info = f"PID={pid}, UID={uid}, GID={gid}"
        else:
            peer_info = self.peername or "unknown"

        self.logger.debug(
            "Unix Stream connection established", extra={"peer": peer_info}
        )
