# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# Message handlers
#
# Handlers form an ordered chain. Each receives the previous handler's output
# and may transform it, pass it on, or return None to stop propagation.

# Local/package imports
from courier_syslog_receiver.handlers.chain import Handler, HandlerChain
from courier_syslog_receiver.handlers.kafka import KafkaHandler
from courier_syslog_receiver.handlers.logging_handler import LoggingHandler

__all__ = ["Handler", "HandlerChain", "KafkaHandler", "LoggingHandler"]
