# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Ordered handler chain

# Standard library imports
from typing import Iterator, List, Optional, Protocol

# Local/package imports
from courier_syslog_receiver.message import Message


class Handler(Protocol):
    """
    A step in the handler chain.

    handle() receives a decoded Message, or None when the server shuts down.
    It returns the message to pass to the next handler, or None to stop
    propagation. Handlers receiving None should release their resources and
    return None.
    """

    def handle(self, message: Optional[Message]) -> Optional[Message]: ...


class HandlerChain:
    """
    Ordered sequence of handlers with short-circuit on None.

    Handlers are expected to be added before the server starts listening;
    dispatch() only reads the list.
    """

    def __init__(self, handlers: Optional[List[Handler]] = None):
        self._handlers: List[Handler] = list(handlers or [])

    def add(self, handler: Handler) -> None:
        self._handlers.append(handler)

    def clear(self) -> None:
        self._handlers = []

    def dispatch(self, message: Optional[Message]) -> Optional[Message]:
        """
        Pass a message (or the None termination signal) through the chain.

        Args:
            message: The decoded message, or None to signal shutdown

        Returns:
            The output of the last handler that ran, or None if a handler
            stopped propagation.
        """
        for handler in self._handlers:
            message = handler.handle(message)
            if message is None:
                break
        return message

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[Handler]:
        return iter(self._handlers)
