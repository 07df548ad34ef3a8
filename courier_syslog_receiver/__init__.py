# -*- coding: utf-8 -*-

# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# courier_syslog_receiver package
#
# This is the package initializer for the Courier Syslog Receiver.
# It receives syslog packets over UDP, TCP and Unix stream sockets, decodes
# them into Message objects and passes them through a chain of handlers.

# Local/package imports
from courier_syslog_receiver.decoder import SyslogDecoder, decode
from courier_syslog_receiver.message import Facility, Message, Severity

__all__ = ["Facility", "Message", "Severity", "SyslogDecoder", "decode"]
