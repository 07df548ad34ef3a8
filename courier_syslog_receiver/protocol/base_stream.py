# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Abstract base class for buffered streaming syslog protocols

# Standard library imports
import asyncio
import logging

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

# Constants
DEFAULT_READ_BUFFER_SIZE = 1024


class BaseSyslogBufferedProtocol(asyncio.BufferedProtocol, ABC):
    """
    Abstract base class for syslog buffered streaming protocols (TCP/Unix).

    One instance handles one accepted connection, and the connection is one
    unit. asyncio fills a freshly allocated buffer of read_buffer_size bytes
    and the first non-empty read is handed to the receiver for decoding and
    dispatch. The connection is then closed; anything the peer sent past the
    first read is discarded.
    """

    def __init__(self, receiver: Any, read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE):
        self.logger = logging.getLogger(self.logger_name)
        self.transport: Optional[asyncio.BaseTransport] = None
        self.peername: Any = None
        self.receiver = receiver
        self.read_buffer_size = read_buffer_size
        self._read_buffer: Optional[bytearray] = None
        self.unit_received = False

    @property
    @abstractmethod
    def logger_name(self) -> str:
        """Return the logger name for this protocol."""

    @abstractmethod
    def get_source(self) -> Any:
        """Return the sender address stored on decoded messages."""

    def get_buffer(self, sizehint: int) -> bytearray:
        """
        Get a buffer for received data.

        Called by asyncio before each read. A new buffer is returned every
        time so no decoded message shares memory with the protocol.
        """
        self._read_buffer = bytearray(self.read_buffer_size)
        return self._read_buffer

    def buffer_updated(self, nbytes: int) -> None:
        """
        Process the received data from buffer.

        Called by asyncio when the buffer is updated with nbytes.
        """
        if not nbytes:
            return

        if self._read_buffer is None:
            self.logger.error("Buffer updated called but no buffer exists")
            return

        if self.unit_received:
            # Already closing; the rest of the stream is not read
            return
        self.unit_received = True

        self.logger.debug(
            "Received data",
            extra={"peer": self.get_peer_info(), "bytes_received": nbytes},
        )
        try:
            self.receiver.process_packet(
                bytes(self._read_buffer[:nbytes]), self.get_source()
            )
        finally:
            if self.transport is not None:
                self.transport.close()

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Called when a connection is made. Sets up transport and peername, then calls protocol-specific hook.
        """
        self.transport = transport
        self.peername = transport.get_extra_info("peername")
        self.receiver.connection_opened(transport)
        self.on_connection_made(transport)

    def on_connection_made(self, transport: asyncio.BaseTransport) -> None:
        """
        Protocol-specific connection setup. Subclasses may override this method.
        """

    def get_peer_info(self) -> Dict[str, Any]:
        """
        Get information about the connected peer for logging.
        """
        return {"peer": self.get_source()}

    def eof_received(self) -> bool:
        self.logger.debug("EOF received", extra=self.get_peer_info())
        return False  # Don't keep the transport open

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """
        Handle connection lost event.

        A connection failing with an error is a read failure and is reported
        to the receiver; a clean close is only logged.
        """
        self._read_buffer = None
        if self.transport is not None:
            self.receiver.connection_closed(self.transport)

        if exc is not None:
            self.receiver.handle_transport_error(exc)
        else:
            self.logger.debug("Connection closed", extra=self.get_peer_info())
