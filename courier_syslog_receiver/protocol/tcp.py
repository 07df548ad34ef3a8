# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# TCP Protocol implementation for syslog server

# Standard library imports
import asyncio

from typing import Any, Dict

# Local/package imports
from courier_syslog_receiver.protocol.base_stream import BaseSyslogBufferedProtocol


class SyslogTCPProtocol(BaseSyslogBufferedProtocol):
    """
    TCP Protocol implementation for handling syslog messages.
    Inherits shared logic from BaseSyslogBufferedProtocol.
    """

    @property
    def logger_name(self) -> str:
        return "courier_syslog_receiver.protocol.tcp"

    def get_source(self) -> Any:
        # (host, port) for IPv4, (host, port, flowinfo, scopeid) for IPv6
        if self.peername:
            return tuple(self.peername[:2])
        return None

    def get_peer_info(self) -> Dict[str, Any]:
        if self.peername:
            return {"host": self.peername[0], "port": self.peername[1]}
        return {"host": "unknown", "port": "unknown"}

    def on_connection_made(self, transport: asyncio.BaseTransport) -> None:
        host, port = self.peername[:2] if self.peername else ("unknown", "unknown")
        self.logger.info(
            "TCP connection established",
            extra={
                "net.transport": "ip_tcp",
                "net.peer.ip": host,
                "net.peer.port": port,
            },
        )
