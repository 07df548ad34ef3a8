# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Handler that logs every received message

# Standard library imports
import logging

from typing import Any, Dict, Optional

# Local/package imports
from courier_syslog_receiver.message import Message


class LoggingHandler:
    """
    Log each message with structured extra fields and pass it on unchanged.

    Optionally logs the JSON representation of the message model at DEBUG
    level (for demos/debugging).
    """

    def __init__(
        self,
        logger_name: str = "courier_syslog_receiver.handlers.logging",
        level: int = logging.INFO,
        enable_model_json_output: bool = False,
    ):
        self.logger = logging.getLogger(logger_name)
        self.level = level
        self.enable_model_json_output = enable_model_json_output

    def _log_extra(self, message: Message) -> Dict[str, Any]:
        log_extra: Dict[str, Any] = {
            "hostname": message.hostname,
            "tag": message.tag,
            "severity": message.severity_name,
            "facility": message.facility_name,
            "log_msg": message.content,
        }
        # Network peers are (host, port, ...) tuples, Unix peers are paths
        source = message.source
        if isinstance(source, tuple) and len(source) >= 2:
            log_extra["host"] = source[0]
            log_extra["port"] = source[1]
        elif source:
            log_extra["peer"] = source
        return log_extra

    def handle(self, message: Optional[Message]) -> Optional[Message]:
        if message is None:
            self.logger.debug("Logging handler received termination signal")
            return None

        self.logger.log(self.level, "Syslog message received", extra=self._log_extra(message))

        if self.enable_model_json_output:
            self.logger.debug(
                "Decoded model JSON representation:",
                extra={"decoded_model_json": message.model_dump_json(indent=2)},
            )
        return message
