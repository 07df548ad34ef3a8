# -*- coding: utf-8 -*-
# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2025 Ziggiz Inc.
#
# This file is part of the ziggiz-courier-core-data-processing and is licensed under the
# Business Source License 1.1. You may not use this file except in
# compliance with the License. You may obtain a copy of the License at:
# https://github.com/ziggiz-courier/ziggiz-courier-core-data-processing/blob/main/LICENSE
# OpenTelemetry setup for the Courier Syslog Receiver
#
# Every dispatched message runs inside a span. Spans are only exported when
# console export is enabled (development/demo); in production configure an
# OTLP exporter on the provider.

# Third-party imports
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Tracer

SERVICE_NAME = "courier-syslog-receiver"

resource = Resource.create({"service.name": SERVICE_NAME})
tracer_provider = TracerProvider(resource=resource)
trace.set_tracer_provider(tracer_provider)

_console_export_enabled = False


def setup_tracing(console_export: bool = False) -> TracerProvider:
    """
    Attach exporters to the tracer provider.

    Args:
        console_export: Export finished spans to the console

    Returns:
        The package tracer provider
    """
    global _console_export_enabled

    if console_export and not _console_export_enabled:
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        _console_export_enabled = True
    return tracer_provider


def get_tracer() -> Tracer:
    return trace.get_tracer(SERVICE_NAME)
