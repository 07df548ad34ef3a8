# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Tests for the handler chain and the built-in handlers

# Standard library imports
import asyncio
import json
import logging

# Third-party imports
import pytest

# Local/package imports
from courier_syslog_receiver.handlers import HandlerChain, KafkaHandler, LoggingHandler
from courier_syslog_receiver.message import Message


class UppercaseHandler:
    def handle(self, message):
        if message is None:
            return None
        return message.model_copy(update={"content": message.content.upper()})


class DummyKafkaBackend:
    def __init__(self):
        self.sent = []
        self.stopped = False

    async def send(self, value, key=None, headers=None):
        await asyncio.sleep(0)
        self.sent.append((value, key))

    async def stop(self):
        self.stopped = True


@pytest.fixture
def message(arrival_time):
    return Message(
        source=("192.0.2.1", 40000),
        arrival_time=arrival_time,
        hostname="myhost",
        tag="prog",
        content=": hello",
    )


class TestHandlerChain:
    """Tests for ordered dispatch with short-circuit on None."""

    @pytest.mark.unit
    def test_dispatch_runs_handlers_in_order(self, message, recording_handler_factory):
        calls = []
        chain = HandlerChain(
            [recording_handler_factory(name, calls) for name in ("h1", "h2", "h3")]
        )

        result = chain.dispatch(message)

        assert [name for name, _ in calls] == ["h1", "h2", "h3"]
        assert result is message

    @pytest.mark.unit
    def test_none_stops_propagation(self, message, recording_handler_factory):
        calls = []
        chain = HandlerChain()
        chain.add(recording_handler_factory("h1", calls, passthrough=False))
        chain.add(recording_handler_factory("h2", calls))
        chain.add(recording_handler_factory("h3", calls))

        assert chain.dispatch(message) is None
        assert [name for name, _ in calls] == ["h1"]

    @pytest.mark.unit
    def test_stop_in_the_middle(self, message, recording_handler_factory):
        calls = []
        chain = HandlerChain(
            [
                recording_handler_factory("h1", calls),
                recording_handler_factory("h2", calls, passthrough=False),
                recording_handler_factory("h3", calls),
            ]
        )

        chain.dispatch(message)

        assert [name for name, _ in calls] == ["h1", "h2"]

    @pytest.mark.unit
    def test_each_handler_receives_previous_output(self, message, recording_handler_factory):
        calls = []
        chain = HandlerChain([UppercaseHandler(), recording_handler_factory("h2", calls)])

        result = chain.dispatch(message)

        assert calls[0][1].content == ": HELLO"
        assert result.content == ": HELLO"
        assert message.content == ": hello"

    @pytest.mark.unit
    def test_termination_signal_follows_short_circuit(self, recording_handler_factory):
        calls = []
        chain = HandlerChain(
            [recording_handler_factory("h1", calls), recording_handler_factory("h2", calls)]
        )

        assert chain.dispatch(None) is None
        assert calls == [("h1", None)]

    @pytest.mark.unit
    def test_empty_chain_returns_input(self, message):
        assert HandlerChain().dispatch(message) is message

    @pytest.mark.unit
    def test_clear_len_and_iter(self, recording_handler_factory):
        handler = recording_handler_factory("h1", [])
        chain = HandlerChain([handler])
        assert len(chain) == 1
        assert list(chain) == [handler]

        chain.clear()
        assert len(chain) == 0


class TestLoggingHandler:
    """Tests for LoggingHandler."""

    @pytest.mark.unit
    def test_logs_and_passes_message_on(self, message, caplog):
        caplog.set_level(logging.DEBUG)
        handler = LoggingHandler()

        assert handler.handle(message) is message

        records = [r for r in caplog.records if r.message == "Syslog message received"]
        assert len(records) == 1
        record = records[0]
        assert record.host == "192.0.2.1"
        assert record.port == 40000
        assert record.hostname == "myhost"
        assert record.tag == "prog"
        assert record.severity == "notice"
        assert record.facility == "user"
        assert record.log_msg == ": hello"

    @pytest.mark.unit
    def test_unix_peer(self, arrival_time, caplog):
        caplog.set_level(logging.INFO)
        handler = LoggingHandler()

        handler.handle(Message(source="/run/app.sock", arrival_time=arrival_time))

        assert caplog.records[0].peer == "/run/app.sock"

    @pytest.mark.unit
    def test_model_json_output(self, message, caplog):
        caplog.set_level(logging.DEBUG)
        handler = LoggingHandler(enable_model_json_output=True)

        handler.handle(message)

        json_records = [r for r in caplog.records if hasattr(r, "decoded_model_json")]
        assert len(json_records) == 1
        assert json.loads(json_records[0].decoded_model_json)["hostname"] == "myhost"

    @pytest.mark.unit
    def test_termination_signal(self, caplog):
        caplog.set_level(logging.INFO)
        assert LoggingHandler().handle(None) is None
        assert "Syslog message received" not in caplog.text


class TestKafkaHandler:
    """Tests for KafkaHandler."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_message_json(self, message):
        backend = DummyKafkaBackend()
        handler = KafkaHandler(backend)

        assert handler.handle(message) is message
        await asyncio.gather(*handler.pending)

        assert len(backend.sent) == 1
        value, key = backend.sent[0]
        assert key == b"myhost"
        assert json.loads(value)["content"] == ": hello"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_custom_key_and_value(self, message):
        backend = DummyKafkaBackend()
        handler = KafkaHandler(
            backend,
            key_func=lambda m: b"fixed",
            value_func=lambda m: m.content.encode(),
        )

        handler.handle(message)
        await asyncio.gather(*handler.pending)

        assert backend.sent == [(b": hello", b"fixed")]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_no_key_without_hostname(self, arrival_time):
        backend = DummyKafkaBackend()
        handler = KafkaHandler(backend)

        handler.handle(Message(arrival_time=arrival_time))
        await asyncio.gather(*handler.pending)

        assert backend.sent[0][1] is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_termination_drains_and_stops(self, message):
        backend = DummyKafkaBackend()
        handler = KafkaHandler(backend)

        handler.handle(message)
        handler.handle(message)
        assert handler.handle(None) is None

        while handler.pending:
            await asyncio.gather(*handler.pending)

        assert len(backend.sent) == 2
        assert backend.stopped is True
