# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Fatal error sinks for unrecoverable listener failures
#
# A running server is quiet and only reports fatal errors: a broken listener
# socket or a failure to close one. By default the error is written to stderr
# and the process exits. Pass a different sink to the server to log the error
# and keep running instead.

# Standard library imports
import logging
import sys

from typing import Any, Protocol


class FatalSink(Protocol):
    """Receives fatal listener errors. Implementations may not return."""

    def fatal(self, *values: Any) -> None: ...


def _join(values: tuple) -> str:
    return " ".join(str(value) for value in values)


class ExitingFatalSink:
    """
    Write a timestamped line to stderr and terminate the process.
    """

    def __init__(self, exit_code: int = 1):
        self.exit_code = exit_code
        self.logger = logging.getLogger("courier_syslog_receiver.fatal")
        self.logger.propagate = False

        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(
                logging.Formatter("%(asctime)s %(message)s", datefmt="%Y/%m/%d %H:%M:%S")
            )
            self.logger.addHandler(console_handler)

    def fatal(self, *values: Any) -> None:
        self.logger.critical(_join(values))
        raise SystemExit(self.exit_code)


class LoggingFatalSink:
    """
    Log fatal errors and return, leaving the process running.
    """

    def __init__(self, logger_name: str = "courier_syslog_receiver.server"):
        self.logger = logging.getLogger(logger_name)

    def fatal(self, *values: Any) -> None:
        self.logger.error(_join(values))


def create_fatal_sink(action: str = "exit") -> FatalSink:
    """
    Create a fatal sink for the configured action ("exit" or "log").
    """
    action = action.lower()
    if action == "exit":
        return ExitingFatalSink()
    if action == "log":
        return LoggingFatalSink()
    raise ValueError(f"Invalid fatal action: {action}. Must be one of ['exit', 'log']")
