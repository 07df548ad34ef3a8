# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# UDP Protocol implementation for syslog server


# Standard library imports
import asyncio
import logging

from typing import Any, Optional, Tuple

# Local/package imports
from courier_syslog_receiver.protocol.base_stream import DEFAULT_READ_BUFFER_SIZE


class SyslogUDPProtocol(asyncio.DatagramProtocol):
    """
    UDP Protocol implementation for receiving syslog datagrams.

    Each datagram is one unit: it is truncated to the read buffer size and
    handed to the receiver, which decodes and dispatches it before the next
    datagram is processed.
    """

    def __init__(self, receiver: Any, read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE):
        """
        Initialize the UDP protocol.

        Args:
            receiver: Object providing process_packet() and handle_transport_error(),
                normally the SyslogServer
            read_buffer_size: Maximum number of bytes kept from each datagram
        """
        self.logger = logging.getLogger("courier_syslog_receiver.protocol.udp")
        self.transport: Optional[asyncio.BaseTransport] = None
        self.receiver = receiver
        self.read_buffer_size = read_buffer_size

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Called when the endpoint is bound.

        Args:
            transport: The transport for the endpoint
        """
        self.transport = transport
        socket_info = transport.get_extra_info("socket")
        if socket_info:
            sockname = socket_info.getsockname()
            # IPv4 (host, port) and IPv6 (host, port, flowinfo, scopeid)
            if isinstance(sockname, tuple) and len(sockname) >= 2:
                host, port = sockname[0], sockname[1]
            else:
                host, port = "unknown", "unknown"
            self.logger.info(
                "UDP server started on address",
                extra={
                    "net.transport": "ip_udp",
                    "net.host.ip": host,
                    "net.host.port": port,
                },
            )
        else:
            self.logger.info("UDP server started", extra={"net.transport": "ip_udp"})

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        """
        Called when a UDP datagram is received.

        Args:
            data: The datagram data
            addr: The address (host, port) of the sender
        """
        if not data:
            return

        self.logger.debug(
            "Received UDP datagram",
            extra={"peer": addr, "bytes_received": len(data)},
        )
        self.receiver.process_packet(data[: self.read_buffer_size], addr)

    def error_received(self, exc: Exception) -> None:
        """
        Called when a previous send or receive operation raises an OSError.

        Args:
            exc: The exception that was raised
        """
        self.receiver.handle_transport_error(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """
        Called when the endpoint is closed.

        Args:
            exc: The exception that caused the endpoint to close,
                 or None if it was closed without an error
        """
        if exc:
            self.receiver.handle_transport_error(exc)
        else:
            self.logger.debug(
                "UDP server connection closed",
                extra={"net.transport": "ip_udp"},
            )
