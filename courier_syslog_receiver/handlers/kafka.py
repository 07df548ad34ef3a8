# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
"""
Handler that forwards decoded messages to Kafka.
"""
# Standard library imports
import asyncio
import logging

from typing import Any, Callable, Optional, Set

# Local/package imports
from courier_syslog_receiver.message import Message


def default_key(message: Message) -> Optional[bytes]:
    return message.hostname.encode("utf-8") if message.hostname else None


def default_value(message: Message) -> bytes:
    return message.model_dump_json().encode("utf-8")


class KafkaHandler:
    """
    Schedule a Kafka send for every message and pass the message on.

    Handlers are synchronous, so sends run as tasks on the event loop. The
    termination signal waits for the outstanding sends and stops the backend.

    Args:
        backend: A KafkaOutputBackend (or anything with async send()/stop())
        key_func: Builds the record key from a message (default: hostname)
        value_func: Builds the record value from a message (default: model JSON)
    """

    def __init__(
        self,
        backend: Any,
        key_func: Optional[Callable[[Message], Optional[bytes]]] = None,
        value_func: Optional[Callable[[Message], bytes]] = None,
    ):
        self.backend = backend
        self.key_func = key_func or default_key
        self.value_func = value_func or default_value
        self.pending: Set[asyncio.Task] = set()
        self.logger = logging.getLogger("courier_syslog_receiver.handlers.kafka")

    def _schedule(self, coro: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
        return task

    async def _drain_and_stop(self, tasks: Set[asyncio.Task]) -> None:
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.backend.stop()
        self.logger.debug("Kafka handler stopped")

    def handle(self, message: Optional[Message]) -> Optional[Message]:
        if message is None:
            self._schedule(self._drain_and_stop(set(self.pending)))
            return None

        self._schedule(
            self.backend.send(value=self.value_func(message), key=self.key_func(message))
        )
        return message
