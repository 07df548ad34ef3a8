# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Server implementation for the syslog receiver

# Standard library imports
import asyncio
import logging
import os

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

# Local/package imports
from courier_syslog_receiver.config import Config
from courier_syslog_receiver.decoder import SyslogDecoder
from courier_syslog_receiver.fatal import FatalSink, create_fatal_sink
from courier_syslog_receiver.handlers.chain import Handler, HandlerChain
from courier_syslog_receiver.message import Message
from courier_syslog_receiver.protocol.tcp import SyslogTCPProtocol
from courier_syslog_receiver.protocol.udp import SyslogUDPProtocol
from courier_syslog_receiver.protocol.unix import SyslogUnixProtocol
from courier_syslog_receiver.telemetry import get_tracer


@dataclass
class Listener:
    """An open endpoint: an asyncio server (tcp/unix) or datagram transport (udp)."""

    address: str
    protocol: str
    endpoint: Any


def parse_network_address(address: str) -> Tuple[str, int]:
    """
    Split a "host:port" address. IPv6 hosts are written in brackets, "[::1]:514".

    Raises:
        ValueError: If the address is malformed
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid address: {address}. Expected host:port")

    port_number = int(port)
    if port_number > 65535:
        raise ValueError(f"Invalid port in address: {address}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, port_number


class SyslogServer:
    """
    AsyncIO listener manager for the syslog receiver.

    Owns any number of UDP, TCP and Unix stream endpoints. Packets received on
    any of them are decoded and passed through the handler chain. A transport
    error outside of shutdown is reported to the fatal sink, which by default
    halts the process.
    """

    def __init__(self, config: Optional[Config] = None, fatal_sink: Optional[FatalSink] = None):
        """
        Initialize the syslog server.

        Args:
            config: The configuration object
            fatal_sink: Receives fatal listener errors (default from config.fatal_action)
        """
        self.logger = logging.getLogger("courier_syslog_receiver.server")
        self.config = config or Config()
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.fatal_sink: FatalSink = fatal_sink or create_fatal_sink(self.config.fatal_action)
        self.decoder = SyslogDecoder(self.config.allowed_tag_runes)
        self.handlers = HandlerChain()
        self.listeners: List[Listener] = []
        self.connections: Set[asyncio.BaseTransport] = set()
        self.shutting_down = False
        self.tracer = get_tracer()
        self.previous_exception_handler: Optional[Callable] = None
        self.exception_handler_installed = False

    def set_fatal_sink(self, sink: FatalSink) -> None:
        self.fatal_sink = sink

    def add_handler(self, handler: Handler) -> None:
        """Append a handler to the chain. Must be called before listening starts."""
        self.handlers.add(handler)

    def set_allowed_tag_runes(self, runes: str) -> None:
        """Replace the extra characters allowed in program tags."""
        self.decoder.set_allowed_runes(runes)

    async def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Start listening on every endpoint in the configuration.

        Args:
            loop: Optional event loop to use

        Raises:
            RuntimeError: If an endpoint cannot be opened
        """
        self.loop = loop or asyncio.get_running_loop()
        for listener_config in self.config.listeners:
            await self.listen(listener_config.address, listener_config.protocol)

    async def listen(self, address: str, protocol: str) -> Listener:
        """
        Open an endpoint and start receiving on it.

        Args:
            address: "host:port" for udp/tcp, a filesystem path for unix
            protocol: "udp", "tcp" or "unix"

        Returns:
            The registered listener

        Raises:
            RuntimeError: If the endpoint cannot be opened (bad address,
                address in use, permission denied, unknown protocol)
        """
        if self.loop is None:
            self.loop = asyncio.get_running_loop()
        protocol = protocol.lower()

        self.logger.info(
            f"Starting syslog listener on {address} using {protocol.upper()} protocol"
        )

        try:
            if protocol == "udp":
                endpoint = await self.start_udp_server(address)
            elif protocol == "tcp":
                endpoint = await self.start_tcp_server(address)
            elif protocol == "unix":
                endpoint = await self.start_unix_server(address)
            else:
                raise ValueError(f"Invalid protocol specified: {protocol}")
        except Exception as e:
            self.logger.error(f"Failed to listen on {address}: {e}")
            raise RuntimeError(f"Failed to listen on {address}: {e}") from e

        listener = Listener(address=address, protocol=protocol, endpoint=endpoint)
        self.listeners.append(listener)
        if protocol != "udp":
            self.install_exception_handler()
        return listener

    async def start_udp_server(self, address: str) -> asyncio.DatagramTransport:
        """
        Open a UDP endpoint.

        Args:
            address: The "host:port" to bind to

        Returns:
            The datagram transport
        """
        host, port = parse_network_address(address)

        def protocol_factory():
            return SyslogUDPProtocol(self, read_buffer_size=self.config.read_buffer_size)

        transport, _ = await self.loop.create_datagram_endpoint(
            protocol_factory, local_addr=(host or "0.0.0.0", port)
        )
        self.logger.info(f"UDP server listening on {address}")
        return transport

    async def start_tcp_server(self, address: str) -> asyncio.AbstractServer:
        """
        Open a TCP endpoint.

        Args:
            address: The "host:port" to bind to

        Returns:
            The server object
        """
        host, port = parse_network_address(address)

        def protocol_factory():
            return SyslogTCPProtocol(self, read_buffer_size=self.config.read_buffer_size)

        server = await self.loop.create_server(protocol_factory, host or None, port)
        self.logger.info(f"TCP server listening on {address}")
        return server

    async def start_unix_server(self, socket_path: str) -> asyncio.AbstractServer:
        """
        Open a Unix stream endpoint.

        Args:
            socket_path: The path to the Unix domain socket

        Returns:
            The server object
        """
        # Remove the socket file if it already exists
        if os.path.exists(socket_path):
            os.unlink(socket_path)

        # Create the directory for the socket if it doesn't exist
        socket_dir = os.path.dirname(socket_path)
        if socket_dir and not os.path.exists(socket_dir):
            os.makedirs(socket_dir, exist_ok=True)

        def protocol_factory():
            return SyslogUnixProtocol(self, read_buffer_size=self.config.read_buffer_size)

        server = await self.loop.create_unix_server(protocol_factory, socket_path)
        self.logger.info(f"Unix Stream server listening on {socket_path}")
        return server

    def install_exception_handler(self) -> None:
        """
        Route accept failures of stream endpoints to the fatal sink.

        asyncio reports a failing accept() (for example EMFILE) only to the
        loop exception handler and keeps retrying. Other contexts are passed
        on to the handler that was installed before.
        """
        if self.exception_handler_installed:
            return
        self.previous_exception_handler = self.loop.get_exception_handler()
        self.loop.set_exception_handler(self.handle_loop_exception)
        self.exception_handler_installed = True

    def restore_exception_handler(self) -> None:
        if not self.exception_handler_installed:
            return
        self.loop.set_exception_handler(self.previous_exception_handler)
        self.previous_exception_handler = None
        self.exception_handler_installed = False

    def is_stream_endpoint_socket(self, sock: Any) -> bool:
        try:
            fileno = sock.fileno()
        except (AttributeError, OSError):
            return False
        for listener in self.listeners:
            if listener.protocol == "udp":
                continue
            for endpoint_socket in listener.endpoint.sockets or ():
                if endpoint_socket.fileno() == fileno:
                    return True
        return False

    def handle_loop_exception(
        self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]
    ) -> None:
        exc = context.get("exception")
        sock = context.get("socket")
        if exc is not None and sock is not None and self.is_stream_endpoint_socket(sock):
            self.handle_transport_error(exc)
            return

        if self.previous_exception_handler is not None:
            self.previous_exception_handler(loop, context)
        else:
            loop.default_exception_handler(context)

    def connection_opened(self, transport: asyncio.BaseTransport) -> None:
        self.connections.add(transport)

    def connection_closed(self, transport: asyncio.BaseTransport) -> None:
        self.connections.discard(transport)

    def process_packet(self, data: bytes, source: Any) -> Optional[Message]:
        """
        Decode one received unit and pass it through the handler chain.

        Args:
            data: The raw bytes read from the endpoint
            source: The sender address

        Returns:
            The output of the handler chain
        """
        with self.tracer.start_as_current_span(
            "syslog.message",
            attributes={"net.peer": str(source), "message.length": len(data)},
        ) as span:
            message = self.decoder.decode(data, source)
            if message.hostname is not None:
                span.set_attribute("syslog.hostname", message.hostname)

            try:
                return self.handlers.dispatch(message)
            except Exception as exc:
                self.logger.error(
                    f"Error handling message from {source}: {exc}",
                    exc_info=True,
                    extra={"peer": source},
                )
                return None

    def handle_transport_error(self, exc: Exception) -> None:
        """
        Report a read/accept failure. Errors are expected while shutting down.
        """
        if self.shutting_down:
            self.logger.debug(
                "Transport error during shutdown", extra={"error": str(exc)}
            )
            return
        self.fatal_sink.fatal("Read error:", exc)

    async def close_listener(self, listener: Listener) -> None:
        self.logger.debug(f"Closing {listener.protocol.upper()} listener on {listener.address}")
        listener.endpoint.close()
        if listener.protocol == "udp":
            return

        # Connections outlive their server; close them so wait_closed() returns
        for transport in list(self.connections):
            transport.close()
        await listener.endpoint.wait_closed()

        if listener.protocol == "unix" and os.path.exists(listener.address):
            try:
                os.unlink(listener.address)
                self.logger.debug(f"Removed Unix socket file: {listener.address}")
            except OSError as e:
                self.logger.warning(f"Error removing Unix socket file: {e}")

    async def shutdown(self) -> None:
        """
        Stop the syslog server.

        Closes every endpoint, sends the None termination signal through the
        handler chain and forgets all endpoints and handlers. Must not be
        called concurrently with itself.
        """
        self.logger.info("Stopping syslog server")
        self.shutting_down = True

        for listener in self.listeners:
            try:
                await self.close_listener(listener)
            except Exception as e:
                self.fatal_sink.fatal(e)

        self.handlers.dispatch(None)
        self.restore_exception_handler()
        self.listeners = []
        self.connections.clear()
        self.handlers.clear()

    async def run_forever(self) -> None:
        """
        Run the server until cancelled.
        """
        try:
            await self.start()
            while True:
                await asyncio.sleep(3600)  # Just to keep the task alive
        except asyncio.CancelledError:
            self.logger.info("Server task cancelled")
        finally:
            await self.shutdown()

    def __del__(self) -> None:
        if self.listeners:
            self.logger.warning("Server resources not properly cleaned up.")
