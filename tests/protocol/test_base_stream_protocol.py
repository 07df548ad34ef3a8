# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the shared buffered stream protocol behaviour

# Standard library imports
import logging

from unittest.mock import MagicMock

# Third-party imports
import pytest

# Local/package imports
from courier_syslog_receiver.protocol.base_stream import (
    DEFAULT_READ_BUFFER_SIZE,
    BaseSyslogBufferedProtocol,
)


class DummyStreamProtocol(BaseSyslogBufferedProtocol):
    @property
    def logger_name(self):
        return "test.protocol.dummy"

    def get_source(self):
        return self.peername


@pytest.fixture
def receiver():
    return MagicMock()


@pytest.fixture
def protocol(receiver):
    return DummyStreamProtocol(receiver)


def feed(protocol, data):
    """Simulate one read: asyncio fills the buffer and reports the size."""
    buf = protocol.get_buffer(-1)
    buf[: len(data)] = data
    protocol.buffer_updated(len(data))
    return buf


class TestBaseSyslogBufferedProtocol:
    """Tests for BaseSyslogBufferedProtocol."""

    @pytest.mark.unit
    def test_init(self, protocol, receiver):
        assert protocol.logger.name == "test.protocol.dummy"
        assert protocol.receiver is receiver
        assert protocol.read_buffer_size == DEFAULT_READ_BUFFER_SIZE == 1024
        assert protocol.transport is None
        assert protocol.peername is None

    @pytest.mark.unit
    def test_get_buffer_returns_fresh_buffer(self, protocol):
        first = protocol.get_buffer(-1)
        second = protocol.get_buffer(65536)

        assert len(first) == 1024
        assert len(second) == 1024
        assert first is not second

    @pytest.mark.unit
    def test_custom_read_buffer_size(self, receiver):
        protocol = DummyStreamProtocol(receiver, read_buffer_size=16)
        assert len(protocol.get_buffer(-1)) == 16

    @pytest.mark.unit
    def test_connection_is_one_unit(self, protocol, receiver):
        transport = MagicMock()
        transport.get_extra_info.return_value = ("192.0.2.1", 40000)
        protocol.connection_made(transport)

        feed(protocol, b"<13>first")
        feed(protocol, b"continuation")

        receiver.process_packet.assert_called_once_with(
            b"<13>first", ("192.0.2.1", 40000)
        )
        transport.close.assert_called_once()
        assert protocol.unit_received is True

    @pytest.mark.unit
    def test_read_is_limited_to_buffer_size(self, receiver):
        protocol = DummyStreamProtocol(receiver, read_buffer_size=8)
        transport = MagicMock()
        protocol.connection_made(transport)

        buf = protocol.get_buffer(-1)
        buf[:8] = b"<13>abcd"
        protocol.buffer_updated(8)

        receiver.process_packet.assert_called_once()
        assert receiver.process_packet.call_args.args[0] == b"<13>abcd"
        transport.close.assert_called_once()

    @pytest.mark.unit
    def test_connection_closed_when_processing_fails(self, protocol, receiver):
        transport = MagicMock()
        protocol.connection_made(transport)
        receiver.process_packet.side_effect = RuntimeError("decode failed")

        with pytest.raises(RuntimeError):
            feed(protocol, b"<13>x")

        transport.close.assert_called_once()

    @pytest.mark.unit
    def test_packet_does_not_share_the_read_buffer(self, protocol, receiver):
        buf = feed(protocol, b"hello")
        buf[:5] = b"XXXXX"

        assert receiver.process_packet.call_args.args[0] == b"hello"

    @pytest.mark.unit
    def test_zero_bytes_is_ignored(self, protocol, receiver):
        protocol.get_buffer(-1)
        protocol.buffer_updated(0)
        receiver.process_packet.assert_not_called()

    @pytest.mark.unit
    def test_buffer_updated_without_buffer(self, protocol, receiver, caplog):
        protocol.buffer_updated(5)
        receiver.process_packet.assert_not_called()
        assert "no buffer exists" in caplog.text

    @pytest.mark.unit
    def test_connection_made_registers_transport(self, protocol, receiver):
        transport = MagicMock()
        protocol.connection_made(transport)

        assert protocol.transport is transport
        receiver.connection_opened.assert_called_once_with(transport)

    @pytest.mark.unit
    def test_eof_received_closes_transport(self, protocol):
        assert protocol.eof_received() is False

    @pytest.mark.unit
    def test_clean_close_is_not_an_error(self, protocol, receiver, caplog):
        caplog.set_level(logging.DEBUG)
        transport = MagicMock()
        protocol.connection_made(transport)

        protocol.connection_lost(None)

        receiver.connection_closed.assert_called_once_with(transport)
        receiver.handle_transport_error.assert_not_called()
        assert "Connection closed" in caplog.text

    @pytest.mark.unit
    def test_read_failure_is_reported(self, protocol, receiver):
        protocol.connection_made(MagicMock())
        exc = ConnectionResetError("reset by peer")

        protocol.connection_lost(exc)

        receiver.handle_transport_error.assert_called_once_with(exc)
        assert protocol._read_buffer is None
